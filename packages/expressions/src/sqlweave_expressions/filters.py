"""
Filter normalization.

Turns the loosely-typed shapes accepted by ``where``-style APIs into an
:class:`~sqlweave_expressions.ast.Expression`. Dispatch on the *shape* of
each value happens here, once; the compiler never inspects Python values.

Accepted filter specs::

    {"status": "open", "qty": [1, 2]}            # mapping, pairs ANDed
    [("status", "open"), ("qty", Range(1, 5))]   # pairs, order preserved
    "price > ? AND qty < ?", 10, 5               # raw SQL + positional values
    "category = :cat", cat="books"               # raw SQL + named values
    lambda row: row.price > 100                  # virtual row callable
    col("price") > 100                           # expression passthrough
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .ast import (
    Comparison,
    Expression,
    Literal,
    Query,
    RegexPattern,
    _is_sequence_value,
    _membership_operand,
    _pattern_operand,
    _scalar_operand,
    and_,
    col,
    invert,
    or_,
)
from .exceptions import InvalidExpressionError, UnknownOperatorError
from .operators import OPERATOR_ALIASES, ComparisonOperator
from .placeholders import bind_placeholders
from .virtual_row import VirtualRow

FilterSpec = Expression | Mapping[str, Any] | Iterable[Any] | str | Callable[..., Any]


@dataclass(frozen=True)
class Range:
    """
    Inclusive range ``lower..upper``; ``exclude_end=True`` makes it half-open.

    Either bound may be None for an open-ended range.
    """

    lower: Any
    upper: Any
    exclude_end: bool = False

    def __post_init__(self) -> None:
        if self.lower is None and self.upper is None:
            raise InvalidExpressionError("A range needs at least one bound")


def condition_for(left: Expression, value: Any) -> Expression:
    """
    Build the condition ``left`` ~ ``value`` by dispatching on the value's shape.

    ========================  ==============================
    value                     condition
    ========================  ==============================
    None / True / False       ``left IS NULL|TRUE|FALSE``
    list, tuple, set          ``left IN (...)``
    Range / range             ``left >= lo AND left <= hi``
    sub-select                ``left IN (SELECT ...)``
    ``re.Pattern``            regex match
    Expression                ``left = expression``
    anything else             ``left = ?``
    ========================  ==============================
    """
    if not isinstance(left, Expression):
        raise InvalidExpressionError(
            f"Condition left side must be an Expression, got {type(left).__name__}"
        )
    if value is None or value is True or value is False:
        return Comparison(left, ComparisonOperator.IS, Literal(value))
    if isinstance(value, Range):
        return _range_condition(left, value.lower, value.upper, value.exclude_end)
    if isinstance(value, range):
        if value.step != 1:
            return Comparison(left, ComparisonOperator.IN, _membership_operand(list(value)))
        return _range_condition(left, value.start, value.stop, True)
    if isinstance(value, Query):
        return Comparison(left, ComparisonOperator.IN, value)
    if isinstance(value, re.Pattern):
        return Comparison(left, ComparisonOperator.LIKE, RegexPattern.from_pattern(value))
    if _is_sequence_value(value):
        return Comparison(left, ComparisonOperator.IN, _membership_operand(value))
    if isinstance(value, Mapping):
        raise InvalidExpressionError(
            "A mapping cannot be used as a comparison value", node=left
        )
    return Comparison(left, ComparisonOperator.EQ, _scalar_operand(value))


def to_expression(filter_spec: Any, *args: Any, **named: Any) -> Expression:
    """Normalize any accepted filter spec into an :class:`Expression`."""
    if isinstance(filter_spec, str):
        return bind_placeholders(filter_spec, *args, **named)
    if args or named:
        raise InvalidExpressionError(
            "Placeholder values are only accepted together with a SQL string"
        )
    if isinstance(filter_spec, Expression):
        return filter_spec
    if isinstance(filter_spec, Mapping):
        return and_(*(condition_for(_key(k), v) for k, v in filter_spec.items()))
    if isinstance(filter_spec, list | tuple):
        return and_(*_pair_conditions(filter_spec))
    if callable(filter_spec):
        result = filter_spec(VirtualRow())
        if callable(result) and not isinstance(result, Expression):
            raise InvalidExpressionError("A filter callable must not return a callable")
        return to_expression(result)
    raise InvalidExpressionError(
        f"Cannot build a filter from {type(filter_spec).__name__}"
    )


def expr(value: Any) -> Expression:
    """
    Wrap ``value`` so it can start a composition.

    Expressions pass through, mappings/pair lists/callables are normalized as
    filters, anything else becomes a :class:`Literal`.
    """
    if isinstance(value, Expression):
        return value
    if isinstance(value, Mapping) or callable(value):
        return to_expression(value)
    if isinstance(value, list | tuple) and value and all(_is_pair(v) for v in value):
        return to_expression(value)
    return Literal(value)


def sql_negate(filter_spec: Mapping[str, Any] | Iterable[Any]) -> Expression:
    """AND of each pair's inverted condition: ``{a: 1, b: 2}`` → ``a != 1 AND b != 2``."""
    return and_(*(invert(c) for c in _conditions(filter_spec)))


def sql_or(filter_spec: Mapping[str, Any] | Iterable[Any]) -> Expression:
    """OR of each pair's condition: ``{a: 1, b: 2}`` → ``a = 1 OR b = 2``."""
    return or_(*_conditions(filter_spec))


def comparison(left: Any, op: str | ComparisonOperator, value: Any) -> Comparison:
    """
    Comparison with an explicit operator.

    ``op`` accepts the SQL spelling (``">="``, ``"not in"``) or a name
    (``"ge"``, ``"not_in"``); unknown operators raise
    :class:`UnknownOperatorError` with suggestions.
    """
    operator = _resolve_operator(op)
    left_expr = _key(left)
    if operator.is_membership:
        return Comparison(left_expr, operator, _membership_operand(value))
    if operator.is_identity:
        return Comparison(left_expr, operator, Literal(value))
    if operator.is_like:
        return Comparison(left_expr, operator, _pattern_operand(value))
    return Comparison(left_expr, operator, _scalar_operand(value))


def _resolve_operator(op: str | ComparisonOperator) -> ComparisonOperator:
    if isinstance(op, ComparisonOperator):
        return op
    key = " ".join(str(op).split()).lower()
    try:
        return OPERATOR_ALIASES[key]
    except KeyError:
        raise UnknownOperatorError(str(op), sorted(OPERATOR_ALIASES)) from None


def _range_condition(left: Expression, lower: Any, upper: Any, exclude_end: bool) -> Expression:
    conditions: list[Expression] = []
    if lower is not None:
        conditions.append(Comparison(left, ComparisonOperator.GE, _scalar_operand(lower)))
    if upper is not None:
        op = ComparisonOperator.LT if exclude_end else ComparisonOperator.LE
        conditions.append(Comparison(left, op, _scalar_operand(upper)))
    return and_(*conditions)


def _key(key: Any) -> Expression:
    if isinstance(key, str):
        return col(key)
    if isinstance(key, Expression):
        return key
    raise InvalidExpressionError(
        f"Filter keys must be column names or expressions, got {type(key).__name__}"
    )


def _is_pair(value: Any) -> bool:
    return isinstance(value, list | tuple) and len(value) == 2


def _pair_conditions(pairs: Iterable[Any]) -> list[Expression]:
    conditions: list[Expression] = []
    for item in pairs:
        if isinstance(item, Expression):
            conditions.append(item)
        elif _is_pair(item):
            conditions.append(condition_for(_key(item[0]), item[1]))
        else:
            raise InvalidExpressionError(
                f"Expected a (column, value) pair, got {item!r}"
            )
    return conditions


def _conditions(filter_spec: Mapping[str, Any] | Iterable[Any]) -> list[Expression]:
    if isinstance(filter_spec, Mapping):
        return [condition_for(_key(k), v) for k, v in filter_spec.items()]
    if isinstance(filter_spec, list | tuple):
        return _pair_conditions(filter_spec)
    raise InvalidExpressionError(
        f"Expected a mapping or a list of pairs, got {type(filter_spec).__name__}"
    )
