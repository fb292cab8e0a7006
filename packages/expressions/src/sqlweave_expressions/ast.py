"""
Immutable expression tree.

Every builder entry point returns an :class:`Expression`. Composition is a
method (or operator) on that wrapper and always produces a new node;
operands are never mutated and may be shared by several parent trees.

Example::

    price = col("price")
    cond = (price >= 100) & col("name").ilike("%book%")
    # → AND(price >= 100, name ILIKE '%book%')

A bare Python value on the left of an operator is not coerced::

    1 + price          # TypeError
    lit(1) + price     # Arithmetic(+, 1, price)
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .exceptions import InvalidExpressionError, UnknownOperatorError
from .operators import ArithmeticOperator, BooleanOperator, ComparisonOperator

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")
_TYPE_RE = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_ ]*(\(\s*\d+(\s*,\s*\d+)?\s*\))?(\[\])?$"
)


class Expression:
    """Base class for every node of the expression tree."""

    __slots__ = ()

    def __bool__(self) -> bool:
        raise InvalidExpressionError(
            "The truth value of a SQL expression is undefined; use '&', '|' "
            "and '~' instead of 'and', 'or' and 'not', and avoid chained "
            "comparisons",
            node=self,
        )

    # -- comparisons ---------------------------------------------------------

    def eq(self, other: Any) -> Expression:
        """Equality with value-shape dispatch (NULL → IS NULL, list → IN, ...)."""
        from .filters import condition_for

        return condition_for(self, other)

    def ne(self, other: Any) -> Expression:
        return invert(self.eq(other))

    def lt(self, other: Any) -> Comparison:
        return Comparison(self, ComparisonOperator.LT, _scalar_operand(other))

    def le(self, other: Any) -> Comparison:
        return Comparison(self, ComparisonOperator.LE, _scalar_operand(other))

    def gt(self, other: Any) -> Comparison:
        return Comparison(self, ComparisonOperator.GT, _scalar_operand(other))

    def ge(self, other: Any) -> Comparison:
        return Comparison(self, ComparisonOperator.GE, _scalar_operand(other))

    def __lt__(self, other: Any) -> Comparison:
        return self.lt(other)

    def __le__(self, other: Any) -> Comparison:
        return self.le(other)

    def __gt__(self, other: Any) -> Comparison:
        return self.gt(other)

    def __ge__(self, other: Any) -> Comparison:
        return self.ge(other)

    def is_(self, value: bool | None) -> Comparison:
        return Comparison(self, ComparisonOperator.IS, Literal(value))

    def is_not(self, value: bool | None) -> Comparison:
        return Comparison(self, ComparisonOperator.IS_NOT, Literal(value))

    def in_(self, values: Any) -> Comparison:
        return Comparison(self, ComparisonOperator.IN, _membership_operand(values))

    def not_in(self, values: Any) -> Comparison:
        return Comparison(self, ComparisonOperator.NOT_IN, _membership_operand(values))

    def between(self, lower: Any, upper: Any) -> Expression:
        """Closed range: ``(self >= lower) AND (self <= upper)``."""
        from .filters import Range, condition_for

        return condition_for(self, Range(lower, upper))

    # -- pattern matching ----------------------------------------------------

    def like(self, *patterns: Any) -> Expression:
        """LIKE against one or more patterns (ORed); ``re.Pattern`` → regex match."""
        return _like(self, ComparisonOperator.LIKE, patterns)

    def ilike(self, *patterns: Any) -> Expression:
        """Case-insensitive :meth:`like`; regex patterns are always case-insensitive."""
        return _like(self, ComparisonOperator.ILIKE, patterns)

    def not_like(self, *patterns: Any) -> Expression:
        return invert(self.like(*patterns))

    def not_ilike(self, *patterns: Any) -> Expression:
        return invert(self.ilike(*patterns))

    # -- arithmetic ----------------------------------------------------------

    def __add__(self, other: Any) -> Arithmetic:
        return Arithmetic(ArithmeticOperator.ADD, self, _scalar_operand(other))

    def __sub__(self, other: Any) -> Arithmetic:
        return Arithmetic(ArithmeticOperator.SUB, self, _scalar_operand(other))

    def __mul__(self, other: Any) -> Arithmetic:
        return Arithmetic(ArithmeticOperator.MUL, self, _scalar_operand(other))

    def __truediv__(self, other: Any) -> Arithmetic:
        return Arithmetic(ArithmeticOperator.DIV, self, _scalar_operand(other))

    # -- boolean logic -------------------------------------------------------

    def __and__(self, other: Any) -> Expression:
        return and_(self, _boolean_operand(other))

    def __or__(self, other: Any) -> Expression:
        return or_(self, _boolean_operand(other))

    def __invert__(self) -> Expression:
        return invert(self)

    # -- decoration ----------------------------------------------------------

    def as_(self, alias: str) -> Aliased:
        return Aliased(self, alias)

    def asc(self, nulls: str | None = None) -> Ordered:
        return Ordered(self, descending=False, nulls=nulls)

    def desc(self, nulls: str | None = None) -> Ordered:
        return Ordered(self, descending=True, nulls=nulls)

    def cast(self, type_name: str) -> Cast:
        return Cast(self, type_name)

    def concat(self, *others: Any) -> Concat:
        return Concat((self, *(_scalar_operand(o) for o in others)))


# ---------------------------------------------------------------------------
# Atoms
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identifier(Expression):
    """
    Column (or table) reference, optionally qualified by a table.

    ``table`` may itself be dotted (``"schema.table"``). ``literal=True``
    renders ``name`` verbatim instead of quoting it.
    """

    name: str
    table: str | None = None
    literal: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidExpressionError("Identifier name must not be empty")

    def qualify(self, table: str) -> Identifier:
        return replace(self, table=table)


@dataclass(frozen=True)
class Literal(Expression):
    """Typed scalar value, bound as a parameter when rendered."""

    value: Any


@dataclass(frozen=True)
class RawFragment(Expression):
    """SQL text the caller asserts is valid; rendered verbatim."""

    sql: str


@dataclass(frozen=True)
class PlaceholderFragment(Expression):
    """Raw SQL whose placeholders were bound: ``parts`` interleave ``values``."""

    parts: tuple[str, ...]
    values: tuple[Expression, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "parts", tuple(self.parts))
        object.__setattr__(self, "values", tuple(self.values))
        if len(self.parts) != len(self.values) + 1:
            raise InvalidExpressionError(
                "PlaceholderFragment needs exactly one more part than values",
                node=self,
            )


@dataclass(frozen=True)
class ValueList(Expression):
    """Parenthesised list of expressions, e.g. the right side of IN."""

    items: tuple[Expression, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class RegexPattern(Expression):
    """Native regular expression used as a LIKE/ILIKE pattern."""

    source: str
    ignore_case: bool = False

    @classmethod
    def from_pattern(cls, pattern: re.Pattern[str]) -> RegexPattern:
        return cls(pattern.pattern, bool(pattern.flags & re.IGNORECASE))


class Query(Expression):
    """Marker base for statements usable as sub-selects."""

    __slots__ = ()


# ---------------------------------------------------------------------------
# Composite nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Comparison(Expression):
    """``left op right``; structure is checked at construction."""

    left: Expression
    op: ComparisonOperator
    right: Expression

    def __post_init__(self) -> None:
        object.__setattr__(self, "op", _comparison_operator(self.op))
        _require_expression(self.left, "Comparison left operand")
        _require_expression(self.right, "Comparison right operand")
        op, right = self.op, self.right

        if op.is_identity:
            if not (isinstance(right, Literal) and _is_truth_constant(right.value)):
                raise InvalidExpressionError(
                    f"{op.value} only accepts NULL, TRUE or FALSE", node=self
                )
        elif op.is_membership:
            if not isinstance(right, ValueList | Query):
                raise InvalidExpressionError(
                    f"{op.value} needs a list of values or a sub-select", node=self
                )
        elif isinstance(right, ValueList):
            raise InvalidExpressionError(
                f"A list of values cannot be compared with {op.value}", node=self
            )
        if isinstance(right, RegexPattern) and not op.is_like:
            raise InvalidExpressionError(
                f"A regular expression cannot be compared with {op.value}", node=self
            )


@dataclass(frozen=True)
class BooleanCombination(Expression):
    """Operands joined by AND or OR, in order."""

    op: BooleanOperator
    operands: tuple[Expression, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "op", BooleanOperator(self.op))
        object.__setattr__(self, "operands", tuple(self.operands))
        for operand in self.operands:
            _require_expression(operand, f"{self.op.value} operand")


@dataclass(frozen=True)
class Negation(Expression):
    """``NOT inner``."""

    inner: Expression

    def __post_init__(self) -> None:
        _require_expression(self.inner, "NOT operand")


@dataclass(frozen=True)
class Arithmetic(Expression):
    """``left op right`` for ``+ - * /``."""

    op: ArithmeticOperator
    left: Expression
    right: Expression

    def __post_init__(self) -> None:
        object.__setattr__(self, "op", ArithmeticOperator(self.op))
        for operand in (self.left, self.right):
            _require_expression(operand, f"'{self.op.value}' operand")


@dataclass(frozen=True)
class WindowSpec:
    """``OVER (PARTITION BY ... ORDER BY ...)``; empty clauses are omitted."""

    partition: tuple[Expression, ...] = ()
    order: tuple[Expression, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "partition", tuple(self.partition))
        object.__setattr__(self, "order", tuple(self.order))


@dataclass(frozen=True)
class FunctionCall(Expression):
    """SQL function call, optionally an aggregate over a window."""

    name: str
    args: tuple[Expression, ...] = ()
    window: WindowSpec | None = None
    distinct: bool = False

    def __post_init__(self) -> None:
        if not _NAME_RE.match(self.name or ""):
            raise InvalidExpressionError(f"Invalid function name: {self.name!r}")
        object.__setattr__(self, "args", tuple(self.args))
        for arg in self.args:
            _require_expression(arg, f"{self.name}() argument")

    def over(
        self,
        partition: Any = (),
        order: Any = (),
    ) -> FunctionCall:
        """Return a copy evaluated over a window."""
        return replace(
            self,
            window=WindowSpec(
                partition=tuple(_scalar_operand(p) for p in _as_tuple(partition)),
                order=tuple(_scalar_operand(o) for o in _as_tuple(order)),
            ),
        )

    def as_distinct(self) -> FunctionCall:
        """Return a copy with ``DISTINCT`` applied to the arguments."""
        return replace(self, distinct=True)


@dataclass(frozen=True)
class CaseExpression(Expression):
    """``CASE [subject] WHEN condition THEN result ... ELSE else_value END``."""

    branches: tuple[tuple[Expression, Expression], ...]
    else_value: Expression
    subject: Expression | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "branches", tuple(tuple(branch) for branch in self.branches)
        )
        if not self.branches:
            raise InvalidExpressionError("CASE needs at least one WHEN branch")
        for condition, result in self.branches:
            _require_expression(condition, "CASE condition")
            _require_expression(result, "CASE result")
        _require_expression(self.else_value, "CASE else value")


@dataclass(frozen=True)
class Aliased(Expression):
    """``expression AS alias``."""

    expression: Expression
    alias: str

    def __post_init__(self) -> None:
        _require_expression(self.expression, "aliased expression")
        if not self.alias:
            raise InvalidExpressionError("Alias must not be empty")

    def qualify(self, table: str) -> Aliased:
        if not isinstance(self.expression, Identifier):
            raise InvalidExpressionError(
                "Only aliased identifiers can be qualified", node=self
            )
        return Aliased(self.expression.qualify(table), self.alias)


@dataclass(frozen=True)
class Ordered(Expression):
    """Sort key: ``expression ASC|DESC [NULLS FIRST|LAST]``."""

    expression: Expression
    descending: bool = False
    nulls: str | None = None

    def __post_init__(self) -> None:
        _require_expression(self.expression, "sort key")
        if self.nulls is not None:
            nulls = self.nulls.lower()
            if nulls not in ("first", "last"):
                raise InvalidExpressionError(
                    f"nulls must be 'first' or 'last', got {self.nulls!r}"
                )
            object.__setattr__(self, "nulls", nulls)


@dataclass(frozen=True)
class Cast(Expression):
    """``CAST(expression AS type_name)``."""

    expression: Expression
    type_name: str

    def __post_init__(self) -> None:
        _require_expression(self.expression, "cast operand")
        if not _TYPE_RE.match(self.type_name or ""):
            raise InvalidExpressionError(f"Invalid type name: {self.type_name!r}")


@dataclass(frozen=True)
class Concat(Expression):
    """String concatenation of two or more parts."""

    parts: tuple[Expression, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parts", tuple(self.parts))
        if len(self.parts) < 2:
            raise InvalidExpressionError("Concatenation needs at least two parts")
        for part in self.parts:
            _require_expression(part, "concatenated part")


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def and_(*operands: Expression) -> Expression:
    """Conjunction; nested ANDs are flattened, one operand is returned as-is."""
    return _combine(BooleanOperator.AND, operands)


def or_(*operands: Expression) -> Expression:
    """Disjunction; nested ORs are flattened, one operand is returned as-is."""
    return _combine(BooleanOperator.OR, operands)


def invert(node: Expression) -> Expression:
    """
    Logical inversion pushed down the tree (De Morgan).

    - Comparison → the counterpart operator (``=`` → ``!=``, ``IN`` → ``NOT IN``)
    - AND ↔ OR with every operand inverted
    - ``NOT x`` → ``x``
    - anything else → ``NOT x``
    """
    _require_expression(node, "inverted operand")
    if isinstance(node, Comparison):
        return Comparison(node.left, node.op.negated, node.right)
    if isinstance(node, BooleanCombination):
        return BooleanCombination(
            node.op.flipped, tuple(invert(operand) for operand in node.operands)
        )
    if isinstance(node, Negation):
        return node.inner
    return Negation(node)


def not_(node: Expression) -> Expression:
    """Alias of :func:`invert`."""
    return invert(node)


def _combine(op: BooleanOperator, operands: tuple[Expression, ...]) -> Expression:
    flat: list[Expression] = []
    for operand in operands:
        _require_expression(operand, f"{op.value} operand")
        if (
            isinstance(operand, BooleanCombination)
            and operand.op is op
            and operand.operands
        ):
            flat.extend(operand.operands)
        else:
            flat.append(operand)
    if len(flat) == 1:
        return flat[0]
    return BooleanCombination(op, tuple(flat))


# ---------------------------------------------------------------------------
# Convenience constructors
# ---------------------------------------------------------------------------


def col(name: str, table: str | None = None) -> Identifier:
    """Column identifier; ``"items.price"`` is qualified by ``items``."""
    if table is None and "." in name:
        table, name = name.rsplit(".", 1)
    return Identifier(name=name, table=table)


def lit(value: Any) -> Literal:
    """Wrap a Python scalar so it can be the left operand of a composition."""
    return Literal(value)


def raw(sql: str) -> RawFragment:
    """Escape hatch: SQL text inserted verbatim."""
    return RawFragment(sql)


# ---------------------------------------------------------------------------
# Operand coercion
# ---------------------------------------------------------------------------


def _require_expression(value: Any, what: str) -> None:
    if not isinstance(value, Expression):
        raise InvalidExpressionError(
            f"{what} must be an Expression, got {type(value).__name__}; "
            f"wrap plain values with lit() or col()"
        )


def _is_truth_constant(value: Any) -> bool:
    return value is None or value is True or value is False


def _comparison_operator(op: Any) -> ComparisonOperator:
    if isinstance(op, ComparisonOperator):
        return op
    try:
        return ComparisonOperator(op)
    except ValueError:
        raise UnknownOperatorError(
            str(op), [m.value for m in ComparisonOperator]
        ) from None


def _is_sequence_value(value: Any) -> bool:
    return isinstance(value, list | tuple | set | frozenset)


def _ordered_items(value: Any) -> list[Any]:
    """Sets are sorted so that rendering stays deterministic."""
    if isinstance(value, set | frozenset):
        try:
            return sorted(value)
        except TypeError:
            return sorted(value, key=repr)
    return list(value)


def _scalar_operand(value: Any) -> Expression:
    if isinstance(value, Expression):
        return value
    if isinstance(value, re.Pattern):
        raise InvalidExpressionError(
            "Regular expressions are only valid as like()/ilike() patterns"
        )
    if _is_sequence_value(value) or isinstance(value, Mapping):
        raise InvalidExpressionError(
            f"A {type(value).__name__} is not a scalar operand; use in_() "
            f"or a filter mapping instead"
        )
    return Literal(value)


def _membership_operand(values: Any) -> Expression:
    if isinstance(values, ValueList | Query):
        return values
    if _is_sequence_value(values):
        return ValueList(tuple(_scalar_operand(v) for v in _ordered_items(values)))
    raise InvalidExpressionError(
        f"IN needs a list of values or a sub-select, got {type(values).__name__}"
    )


def _boolean_operand(value: Any) -> Expression:
    if isinstance(value, Expression):
        return value
    if isinstance(value, Mapping) or _is_sequence_value(value):
        from .filters import to_expression

        return to_expression(value)
    raise InvalidExpressionError(
        f"Cannot combine an expression with {type(value).__name__}"
    )


def _pattern_operand(pattern: Any) -> Expression:
    if isinstance(pattern, re.Pattern):
        return RegexPattern.from_pattern(pattern)
    if isinstance(pattern, Expression):
        return pattern
    if isinstance(pattern, str):
        return Literal(pattern)
    raise InvalidExpressionError(
        f"LIKE pattern must be a string, regex or expression, "
        f"got {type(pattern).__name__}"
    )


def _like(
    left: Expression,
    op: ComparisonOperator,
    patterns: tuple[Any, ...],
) -> Expression:
    if not patterns:
        raise InvalidExpressionError(f"{op.value} needs at least one pattern")
    return or_(*(Comparison(left, op, _pattern_operand(p)) for p in patterns))


def _as_tuple(value: Any) -> tuple[Any, ...]:
    if isinstance(value, list | tuple):
        return tuple(value)
    return (value,)
