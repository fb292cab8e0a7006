from .ast import (
    Aliased,
    Arithmetic,
    BooleanCombination,
    CaseExpression,
    Cast,
    Comparison,
    Concat,
    Expression,
    FunctionCall,
    Identifier,
    Literal,
    Negation,
    Ordered,
    PlaceholderFragment,
    Query,
    RawFragment,
    RegexPattern,
    ValueList,
    WindowSpec,
    and_,
    col,
    invert,
    lit,
    not_,
    or_,
    raw,
)
from .builder import FilterBuilder
from .compiler import (
    CompiledSQL,
    RenderContext,
    SqlCompiler,
    compile_expression,
    compile_filter,
)
from .dialect import (
    DEFAULT,
    MSSQL,
    MYSQL,
    ORACLE,
    POSTGRES,
    SQLITE,
    DialectConfig,
    IdentifierCase,
    LimitStyle,
    ParamStyle,
    RegexOperators,
    available_dialects,
    get_dialect,
    register_dialect,
)
from .exceptions import (
    DialectNotFoundError,
    ExpressionError,
    InvalidExpressionError,
    MissingPlaceholderError,
    PlaceholderCountError,
    UnknownOperatorError,
    UnsupportedFeatureError,
)
from .filters import (
    FilterSpec,
    Range,
    comparison,
    condition_for,
    expr,
    sql_negate,
    sql_or,
    to_expression,
)
from .functions import (
    FunctionNamespace,
    asc,
    case,
    cast,
    concat,
    count_star,
    desc,
    func,
    function,
)
from .operators import (
    OPERATOR_ALIASES,
    ArithmeticOperator,
    BooleanOperator,
    ComparisonOperator,
)
from .placeholders import bind_placeholders
from .renderers import DEFAULT_RENDERER_REGISTRY, build_default_renderer_registry
from .statements import (
    Delete,
    Insert,
    Select,
    Statement,
    Update,
    delete,
    insert,
    select,
    table,
    update,
)
from .strategy import NodeRenderer, RendererRegistry
from .virtual_row import VirtualRow

__all__ = [
    # Tree
    "Expression",
    "Identifier",
    "Literal",
    "RawFragment",
    "PlaceholderFragment",
    "ValueList",
    "RegexPattern",
    "Comparison",
    "BooleanCombination",
    "Negation",
    "Arithmetic",
    "FunctionCall",
    "WindowSpec",
    "CaseExpression",
    "Aliased",
    "Ordered",
    "Cast",
    "Concat",
    "Query",
    # Operators
    "ComparisonOperator",
    "BooleanOperator",
    "ArithmeticOperator",
    "OPERATOR_ALIASES",
    # Construction
    "col",
    "lit",
    "raw",
    "expr",
    "and_",
    "or_",
    "not_",
    "invert",
    "comparison",
    "condition_for",
    "to_expression",
    "sql_negate",
    "sql_or",
    "Range",
    "FilterSpec",
    "bind_placeholders",
    "VirtualRow",
    "func",
    "function",
    "FunctionNamespace",
    "count_star",
    "case",
    "cast",
    "concat",
    "asc",
    "desc",
    # Builder
    "FilterBuilder",
    # Statements
    "Select",
    "Insert",
    "Update",
    "Delete",
    "Statement",
    "table",
    "select",
    "insert",
    "update",
    "delete",
    # Dialects
    "DialectConfig",
    "IdentifierCase",
    "ParamStyle",
    "LimitStyle",
    "RegexOperators",
    "DEFAULT",
    "POSTGRES",
    "SQLITE",
    "MYSQL",
    "MSSQL",
    "ORACLE",
    "get_dialect",
    "register_dialect",
    "available_dialects",
    # Compiler / strategy
    "CompiledSQL",
    "RenderContext",
    "SqlCompiler",
    "compile_expression",
    "compile_filter",
    "NodeRenderer",
    "RendererRegistry",
    "DEFAULT_RENDERER_REGISTRY",
    "build_default_renderer_registry",
    # Exceptions
    "ExpressionError",
    "InvalidExpressionError",
    "MissingPlaceholderError",
    "PlaceholderCountError",
    "UnknownOperatorError",
    "UnsupportedFeatureError",
    "DialectNotFoundError",
]
