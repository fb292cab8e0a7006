"""
Function calls, CASE, CAST, concatenation and ordering helpers.

    func.count(col("id"))                      # count("id")
    func.sum(col("amount")).over(partition=col("account"))
    case([(col("qty") > 10, "bulk")], "single")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import partial
from typing import Any

from .ast import (
    CaseExpression,
    Cast,
    Concat,
    Expression,
    FunctionCall,
    Identifier,
    Ordered,
    _scalar_operand,
    col,
)
from .exceptions import InvalidExpressionError


def function(name: str, *args: Any) -> FunctionCall:
    """``name(args...)``; plain values become bound literals."""
    return FunctionCall(name, tuple(_scalar_operand(a) for a in args))


class FunctionNamespace:
    """Attribute access builds function calls: ``func.lower(col("name"))``."""

    __slots__ = ()

    def __getattr__(self, name: str) -> partial[FunctionCall]:
        if name.startswith("__"):
            raise AttributeError(name)
        return partial(function, name)


func = FunctionNamespace()


def count_star() -> FunctionCall:
    """``count(*)``"""
    return FunctionCall("count", (Identifier("*"),))


def case(
    branches: Mapping[Any, Any] | Iterable[tuple[Any, Any]],
    else_value: Any,
    subject: Any = None,
) -> CaseExpression:
    """
    ``CASE [subject] WHEN ... THEN ... ELSE else_value END``.

    Without ``subject`` each branch condition is normalized as a filter
    (expression, mapping, callable). With ``subject`` the conditions are
    values compared against it. Branch order is preserved.
    """
    from .filters import to_expression

    items = branches.items() if isinstance(branches, Mapping) else branches
    normalized: list[tuple[Expression, Expression]] = []
    for item in items:
        try:
            condition, result = item
        except (TypeError, ValueError):
            raise InvalidExpressionError(
                f"CASE branches must be (condition, result) pairs, got {item!r}"
            ) from None
        when = _scalar_operand(condition) if subject is not None else to_expression(condition)
        normalized.append((when, _scalar_operand(result)))
    return CaseExpression(
        tuple(normalized),
        _scalar_operand(else_value),
        _scalar_operand(subject) if subject is not None else None,
    )


def cast(value: Any, type_name: str) -> Cast:
    return Cast(_scalar_operand(value), type_name)


def concat(*parts: Any) -> Concat:
    return Concat(tuple(_scalar_operand(p) for p in parts))


def asc(column: str | Expression, nulls: str | None = None) -> Ordered:
    return Ordered(_sort_key(column), descending=False, nulls=nulls)


def desc(column: str | Expression, nulls: str | None = None) -> Ordered:
    return Ordered(_sort_key(column), descending=True, nulls=nulls)


def _sort_key(column: str | Expression) -> Expression:
    if isinstance(column, str):
        return col(column)
    return _scalar_operand(column)
