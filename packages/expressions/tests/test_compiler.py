"""Rendering contract of the expression compiler."""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

import pytest

from sqlweave_expressions import (
    DEFAULT,
    DEFAULT_RENDERER_REGISTRY,
    MSSQL,
    MYSQL,
    ORACLE,
    POSTGRES,
    SQLITE,
    CompiledSQL,
    DialectConfig,
    Expression,
    Identifier,
    InvalidExpressionError,
    NodeRenderer,
    RegexPattern,
    SqlCompiler,
    UnsupportedFeatureError,
    case,
    cast,
    col,
    compile_expression,
    compile_filter,
    count_star,
    func,
    lit,
    raw,
    sql_or,
)

# -- Identifiers -------------------------------------------------------------


def test_identifier_is_quoted(render):
    assert render(col("price")) == ('"price"', ())


def test_qualified_identifier(render):
    assert render(col("items.price")) == ('"items"."price"', ())


def test_schema_qualified_identifier(render):
    assert render(col("public.items.price")) == ('"public"."items"."price"', ())


def test_qualification_and_alias_compose_in_either_order(render):
    expected = ('"items"."price" AS "p"', ())
    assert render(col("price").qualify("items").as_("p")) == expected
    assert render(col("price").as_("p").qualify("items")) == expected


def test_embedded_quote_is_doubled(render):
    assert render(Identifier('we"ird')) == ('"we""ird"', ())


def test_literal_identifier_renders_verbatim(render):
    assert render(Identifier("ROWID", literal=True)) == ("ROWID", ())


def test_identifier_quoting_per_dialect(render):
    assert render(col("items.price"), MSSQL)[0] == "[items].[price]"
    assert render(col("items.price"), MYSQL)[0] == "`items`.`price`"
    assert render(col("items.price"), ORACLE)[0] == '"ITEMS"."PRICE"'


def test_unquoted_dialect_still_folds_case(render):
    dialect = DialectConfig(name="bare", quote_identifiers=False, identifier_case="lower")
    assert render(col("Items.Price"), dialect)[0] == "items.price"


# -- Literals ----------------------------------------------------------------


def test_literal_binds_as_parameter(render):
    assert render(col("price") >= 100) == ('("price" >= ?)', (100,))


def test_null_literal_is_not_bound(render):
    assert render(col("price") < None) == ('("price" < NULL)', ())


def test_param_styles(render):
    node = (col("a") > 1) & (col("b") < 2)
    assert render(node, POSTGRES)[0] == '(("a" > $1) AND ("b" < $2))'
    assert render(node, MYSQL)[0] == "((`a` > %s) AND (`b` < %s))"
    assert render(node, ORACLE)[0] == '(("A" > :1) AND ("B" < :2))'


def test_inline_rendering_escapes_literals(render):
    sql, params = render(col("name").eq("O'Brien"), inline=True)
    assert sql == "(\"name\" = 'O''Brien')"
    assert params == ()


def test_inline_boolean_uses_dialect_spelling(render):
    node = col("active").gt(lit(False))
    assert render(node, MSSQL, inline=True)[0] == "([active] > 0)"
    assert render(node, POSTGRES, inline=True)[0] == '("active" > FALSE)'


# -- Comparisons -------------------------------------------------------------


def test_is_null_renders_keyword(render):
    assert render(col("deleted_at").eq(None)) == ('("deleted_at" IS NULL)', ())
    assert render(col("active").eq(True)) == ('("active" IS TRUE)', ())
    assert render(col("active").ne(False)) == ('("active" IS NOT FALSE)', ())


def test_identity_renderer_rejects_a_non_constant_right_side(render):
    node = col("active").eq(True)
    object.__setattr__(node, "right", col("flag"))

    with pytest.raises(InvalidExpressionError, match="IS"):
        render(node)


def test_in_list(render):
    assert render(col("qty").in_([1, 2])) == ('("qty" IN (?, ?))', (1, 2))


def test_empty_in_is_always_false(render):
    assert render(col("qty").in_([])) == ("(1 = 0)", ())


def test_empty_not_in_is_always_true(render):
    assert render(col("qty").not_in([])) == ("(1 = 1)", ())


def test_empty_conjunction_and_disjunction(render):
    assert compile_filter({}).sql == "(1 = 1)"
    assert render(sql_or({})) == ("(1 = 0)", ())


# -- LIKE / ILIKE / regex ----------------------------------------------------


def test_like_uses_like(render):
    assert render(col("name").like("A%")) == ('("name" LIKE ?)', ("A%",))


def test_like_with_several_patterns_is_ored(render):
    sql, params = render(col("name").like("a%", "b%"))
    assert sql == '(("name" LIKE ?) OR ("name" LIKE ?))'
    assert params == ("a%", "b%")


def test_not_like_with_several_patterns_is_anded(render):
    sql, _ = render(col("name").not_like("a%", "b%"))
    assert sql == '(("name" NOT LIKE ?) AND ("name" NOT LIKE ?))'


def test_case_sensitive_like_on_case_insensitive_dialect(render):
    assert render(col("name").like("A%"), MYSQL)[0] == "(`name` LIKE BINARY %s)"


def test_ilike_native(render):
    assert render(col("name").ilike("a%"), POSTGRES)[0] == '("name" ILIKE $1)'


def test_ilike_on_case_insensitive_like_dialect(render):
    assert render(col("name").ilike("a%"), SQLITE)[0] == '("name" LIKE ?)'


def test_ilike_fallback_upper(render):
    assert render(col("name").ilike("a%"), DEFAULT) == (
        '(UPPER("name") LIKE UPPER(?))',
        ("a%",),
    )
    assert render(col("name").not_ilike("a%"), DEFAULT)[0] == (
        '(UPPER("name") NOT LIKE UPPER(?))'
    )


def test_like_escape_clause(render):
    dialect = DialectConfig(name="escaping", like_escape="\\")
    assert render(col("name").like("50\\%"), dialect)[0] == (
        "(\"name\" LIKE ? ESCAPE '\\')"
    )


@pytest.mark.parametrize(
    ("build", "expected"),
    [
        (lambda c: c.like(re.compile("^A")), '("name" ~ $1)'),
        (lambda c: c.like(re.compile("^A", re.IGNORECASE)), '("name" ~* $1)'),
        (lambda c: c.ilike(re.compile("^A")), '("name" ~* $1)'),
        (lambda c: c.not_like(re.compile("^A")), '("name" !~ $1)'),
        (lambda c: c.not_ilike(re.compile("^A")), '("name" !~* $1)'),
    ],
)
def test_regex_operators_postgres(render, build, expected):
    sql, params = render(build(col("name")), POSTGRES)
    assert sql == expected
    assert params == ("^A",)


def test_regex_operators_mysql(render):
    assert render(col("name").like(re.compile("^A")), MYSQL)[0] == (
        "(`name` REGEXP BINARY %s)"
    )
    assert render(col("name").ilike(re.compile("^A")), MYSQL)[0] == "(`name` REGEXP %s)"


def test_regex_unsupported_dialect_raises():
    with pytest.raises(UnsupportedFeatureError) as exc_info:
        compile_expression(col("name").like(re.compile("^A")), SQLITE)
    assert exc_info.value.dialect == "sqlite"


def test_regex_pattern_outside_like_cannot_be_rendered():
    with pytest.raises(InvalidExpressionError):
        compile_expression(RegexPattern("^A"))


# -- Arithmetic, functions, CASE --------------------------------------------


def test_arithmetic_is_parenthesised(render):
    assert render(col("price") * 2 + 1) == ('(("price" * ?) + ?)', (2, 1))


def test_wrapped_literal_on_the_left(render):
    assert render(lit(5) - col("a")) == ('(? - "a")', (5,))


def test_function_call(render):
    assert render(func.lower(col("name"))) == ('lower("name")', ())
    assert render(count_star()) == ("count(*)", ())
    assert render(func.count(col("id")).as_distinct()) == ('count(DISTINCT "id")', ())


def test_window_function(render):
    node = func.rank().over(partition=col("dept"), order=col("salary").desc())
    assert render(node)[0] == 'rank() OVER (PARTITION BY "dept" ORDER BY "salary" DESC)'


def test_window_with_empty_clauses(render):
    assert render(func.count(col("id")).over())[0] == 'count("id") OVER ()'


def test_window_unsupported_dialect():
    dialect = DialectConfig(name="nowindow", supports_window_functions=False)
    with pytest.raises(UnsupportedFeatureError):
        compile_expression(func.rank().over(order=col("id")), dialect)


def test_case_expression(render):
    node = case([(col("qty") > 10, "bulk"), (col("qty") > 1, "few")], "single")
    sql, params = render(node)
    assert sql == '(CASE WHEN ("qty" > ?) THEN ? WHEN ("qty" > ?) THEN ? ELSE ? END)'
    assert params == (10, "bulk", 1, "few", "single")


def test_case_with_subject(render):
    node = case({1: "one", 2: "two"}, "many", subject=col("n"))
    sql, params = render(node)
    assert sql == '(CASE "n" WHEN ? THEN ? WHEN ? THEN ? ELSE ? END)'
    assert params == (1, "one", 2, "two", "many")


def test_case_requires_a_branch():
    with pytest.raises(InvalidExpressionError):
        case([], "x")


def test_cast(render):
    assert render(cast(col("price"), "NUMERIC(10, 2)"))[0] == (
        'CAST("price" AS NUMERIC(10, 2))'
    )


def test_cast_rejects_suspicious_type_names():
    with pytest.raises(InvalidExpressionError):
        cast(col("price"), "INT); DROP TABLE items; --")


def test_concat_per_dialect(render):
    node = col("first").concat(" ", col("last"))
    assert render(node) == ('("first" || ? || "last")', (" ",))
    assert render(node, MYSQL)[0] == "CONCAT(`first`, %s, `last`)"
    assert render(node, MSSQL)[0] == "([first] + ? + [last])"


def test_ordering_with_nulls(render):
    assert render(col("a").desc(nulls="last"))[0] == '"a" DESC NULLS LAST'


def test_raw_fragment_is_verbatim(render):
    assert render(raw("now() - interval '1 day'")) == ("now() - interval '1 day'", ())


# -- Compiler behaviour ------------------------------------------------------


def test_compile_returns_named_tuple():
    compiled = compile_expression(col("a").eq(1))
    assert isinstance(compiled, CompiledSQL)
    sql, params = compiled
    assert sql == compiled.sql
    assert params == compiled.params == (1,)


def test_render_is_deterministic():
    node = (col("a").eq({3, 1, 2})) & col("b").ilike("x%") & (col("c") > 2)
    first = compile_expression(node, POSTGRES)
    assert all(compile_expression(node, POSTGRES) == first for _ in range(5))


def test_shared_compiler_is_safe_across_threads():
    compiler = SqlCompiler(POSTGRES)
    nodes = [col("n").eq(i) & (col("m") > i) for i in range(50)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(compiler.compile, nodes))
    for i, compiled in enumerate(results):
        assert compiled.sql == '(("n" = $1) AND ("m" > $2))'
        assert compiled.params == (i, i)


def test_unknown_node_type_raises():
    class Unrenderable(Expression):
        pass

    with pytest.raises(InvalidExpressionError):
        compile_expression(Unrenderable())


def test_custom_renderer_can_be_registered():
    @dataclass(frozen=True)
    class JsonPath(Expression):
        column: str
        path: str

    class JsonPathRenderer(NodeRenderer):
        @property
        def node_type(self) -> type[Any]:
            return JsonPath

        def render(self, node: Any, context: Any) -> str:
            return f"{context.quote(node.column)} #>> {context.bind(node.path)}"

    registry = DEFAULT_RENDERER_REGISTRY.copy()
    registry.register(JsonPathRenderer())
    compiler = SqlCompiler(POSTGRES, registry=registry)

    compiled = compiler.compile(JsonPath("payload", "{a,b}").eq("x"))
    assert compiled.sql == '("payload" #>> $1 = $2)'
    assert compiled.params == ("{a,b}", "x")
    assert not DEFAULT_RENDERER_REGISTRY.has(JsonPath)
