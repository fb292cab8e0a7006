"""
Binding of values into raw SQL strings.

``?`` placeholders take positional values in order; ``:name`` placeholders
draw from a mapping. PostgreSQL ``::type`` casts are left alone::

    bind_placeholders("price > ? AND qty < ?", 10, 5)
    bind_placeholders("category = :cat AND price::int > 0", cat="books")

Binding happens once, at normalization time; the compiler only renders the
resulting :class:`PlaceholderFragment`.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from .ast import (
    Expression,
    Literal,
    PlaceholderFragment,
    RawFragment,
    _is_sequence_value,
    _membership_operand,
)
from .exceptions import (
    InvalidExpressionError,
    MissingPlaceholderError,
    PlaceholderCountError,
)

NAMED_PLACEHOLDER_RE = re.compile(r"(?<![:\w]):([A-Za-z_]\w*)")


def bind_placeholders(sql: str, *args: Any, **named: Any) -> Expression:
    """
    Bind ``args`` or ``named`` into ``sql``.

    With no bindings the string is returned verbatim as a
    :class:`RawFragment`. A single mapping passed positionally is treated
    as named bindings.

    Raises:
        PlaceholderCountError: ``?`` count differs from ``len(args)``.
        MissingPlaceholderError: a ``:name`` has no binding.
        InvalidExpressionError: positional and named bindings are mixed.
    """
    if len(args) == 1 and isinstance(args[0], Mapping):
        if named:
            raise InvalidExpressionError(
                "Pass named placeholder values either as a mapping or as "
                "keyword arguments, not both"
            )
        named = dict(args[0])
        args = ()
    if args and named:
        raise InvalidExpressionError(
            "Positional and named placeholder values cannot be mixed"
        )
    if not args and not named:
        return RawFragment(sql)
    if named:
        return _bind_named(sql, named)
    return _bind_positional(sql, args)


def _bind_positional(sql: str, args: tuple[Any, ...]) -> PlaceholderFragment:
    parts = sql.split("?")
    expected = len(parts) - 1
    if expected != len(args):
        raise PlaceholderCountError(sql, expected, len(args))
    return PlaceholderFragment(tuple(parts), tuple(_bound(v) for v in args))


def _bind_named(sql: str, named: Mapping[str, Any]) -> PlaceholderFragment:
    parts: list[str] = []
    values: list[Expression] = []
    position = 0
    for match in NAMED_PLACEHOLDER_RE.finditer(sql):
        name = match.group(1)
        if name not in named:
            raise MissingPlaceholderError(name, sql, list(named))
        parts.append(sql[position : match.start()])
        values.append(_bound(named[name]))
        position = match.end()
    parts.append(sql[position:])
    return PlaceholderFragment(tuple(parts), tuple(values))


def _bound(value: Any) -> Expression:
    if isinstance(value, Expression):
        return value
    if _is_sequence_value(value):
        return _membership_operand(value)
    return Literal(value)
