"""
SELECT, INSERT, UPDATE and DELETE statement nodes.

``Select`` is immutable: every refinement returns a new statement, so a
base query can be shared and specialised freely::

    books = table("items").where(category="books")
    cheap = books.where(col("price") < 10).order_by("-price").limit(5)

A ``Select`` is also an expression: used as a value it renders as a
parenthesised sub-select (``col("id").in_(sub)`` or ``{"id": sub}``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from .ast import (
    Aliased,
    Expression,
    Identifier,
    Literal,
    Query,
    _scalar_operand,
    and_,
    col,
    invert,
    or_,
)
from .exceptions import InvalidExpressionError
from .filters import to_expression


class Statement(Expression):
    """Marker base for data-modifying statements."""

    __slots__ = ()


@dataclass(frozen=True)
class Select(Query):
    source: Expression | None = None
    columns: tuple[Expression, ...] = ()
    where_clause: Expression | None = None
    group: tuple[Expression, ...] = ()
    having_clause: Expression | None = None
    order: tuple[Expression, ...] = ()
    limit_count: int | None = None
    offset_count: int | None = None
    is_distinct: bool = False

    def select(self, *columns: str | Expression) -> Select:
        """Replace the selected columns; no columns means ``*``."""
        return replace(self, columns=tuple(_column(c) for c in columns))

    def where(self, filter_spec: Any = None, *args: Any, **named: Any) -> Select:
        """
        AND a filter onto the WHERE clause.

        Keyword arguments without a string filter are column equalities:
        ``where(category="books")``.
        """
        condition = _filter(filter_spec, args, named)
        return replace(self, where_clause=_and_with(self.where_clause, condition))

    def exclude(self, filter_spec: Any = None, *args: Any, **named: Any) -> Select:
        """AND the inverted filter: ``exclude(a=1, b=2)`` → ``(a != 1 OR b != 2)``."""
        condition = invert(_filter(filter_spec, args, named))
        return replace(self, where_clause=_and_with(self.where_clause, condition))

    def or_where(self, filter_spec: Any = None, *args: Any, **named: Any) -> Select:
        """OR a filter onto the WHERE clause; a no-op while there is none."""
        if self.where_clause is None:
            return self
        condition = _filter(filter_spec, args, named)
        return replace(self, where_clause=or_(self.where_clause, condition))

    def group_by(self, *columns: str | Expression) -> Select:
        return replace(self, group=tuple(_column(c) for c in columns))

    def having(self, filter_spec: Any = None, *args: Any, **named: Any) -> Select:
        condition = _filter(filter_spec, args, named)
        return replace(self, having_clause=_and_with(self.having_clause, condition))

    def order_by(self, *keys: str | Expression) -> Select:
        """Replace the ordering; ``"-price"`` sorts descending."""
        return replace(self, order=tuple(_order_key(k) for k in keys))

    def limit(self, count: int | None, offset: int | None = None) -> Select:
        for name, value in (("limit", count), ("offset", offset)):
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, int) or value < 0
            ):
                raise InvalidExpressionError(
                    f"{name} must be a non-negative integer, got {value!r}"
                )
        return replace(self, limit_count=count, offset_count=offset)

    def distinct(self) -> Select:
        return replace(self, is_distinct=True)

    def as_subquery(self, alias: str) -> Aliased:
        return Aliased(self, alias)


@dataclass(frozen=True)
class Insert(Statement):
    """``INSERT INTO table (...) VALUES (...)``; no values → ``DEFAULT VALUES``."""

    table: Identifier
    values: tuple[tuple[str, Expression], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class Update(Statement):
    """``UPDATE table SET ... [WHERE ...]``."""

    table: Identifier
    values: tuple[tuple[str, Expression], ...]
    where_clause: Expression | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))
        if not self.values:
            raise InvalidExpressionError("UPDATE needs at least one column to set")


@dataclass(frozen=True)
class Delete(Statement):
    """``DELETE FROM table [WHERE ...]``."""

    table: Identifier
    where_clause: Expression | None = None


def table(name: str | Expression) -> Select:
    """``SELECT * FROM name``; ``"schema.items"`` is schema-qualified."""
    source = col(name) if isinstance(name, str) else name
    return Select(source=source)


def select(*columns: str | Expression) -> Select:
    """A SELECT without a FROM clause, e.g. ``select(func.now())``."""
    if not columns:
        raise InvalidExpressionError("SELECT without a table needs columns")
    return Select(columns=tuple(_column(c) for c in columns))


def insert(table_name: str, values: Mapping[str, Any] | None = None) -> Insert:
    return Insert(col(table_name), _assignments(values or {}))


def update(
    table_name: str,
    values: Mapping[str, Any],
    where: Any = None,
) -> Update:
    return Update(
        col(table_name),
        _assignments(values),
        to_expression(where) if where is not None else None,
    )


def delete(table_name: str, where: Any = None) -> Delete:
    return Delete(col(table_name), to_expression(where) if where is not None else None)


def _assignments(values: Mapping[str, Any]) -> tuple[tuple[str, Expression], ...]:
    pairs: list[tuple[str, Expression]] = []
    for name, value in values.items():
        if not isinstance(name, str) or not name:
            raise InvalidExpressionError(f"Column names must be strings, got {name!r}")
        # Stored values bind as-is (lists, dicts included) for drivers that adapt them.
        pairs.append((name, value if isinstance(value, Expression) else Literal(value)))
    return tuple(pairs)


def _filter(filter_spec: Any, args: tuple[Any, ...], named: dict[str, Any]) -> Expression:
    if filter_spec is None:
        if args or not named:
            raise InvalidExpressionError("A filter is required")
        return to_expression(named)
    return to_expression(filter_spec, *args, **named)


def _and_with(existing: Expression | None, condition: Expression) -> Expression:
    if existing is None:
        return condition
    return and_(existing, condition)


def _column(value: str | Expression) -> Expression:
    if isinstance(value, str):
        return col(value)
    return _scalar_operand(value)


def _order_key(key: str | Expression) -> Expression:
    if isinstance(key, str):
        if key.startswith("-"):
            return col(key[1:]).desc()
        return col(key).asc()
    return _scalar_operand(key)
