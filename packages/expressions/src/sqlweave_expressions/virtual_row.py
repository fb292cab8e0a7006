"""
Virtual rows: attribute access that yields identifiers.

    to_expression(lambda row: (row.price > 100) & (row["items"].qty < 5))
    to_expression(lambda row: row.fn.count(row.id) > 1)

``row.fn`` is reserved for the function namespace; reach a column named
``fn`` with ``col("fn")``.
"""

from __future__ import annotations

from .ast import Identifier
from .functions import FunctionNamespace, func


class VirtualRow:
    __slots__ = ("_table",)

    def __init__(self, table: str | None = None) -> None:
        self._table = table

    def __getattr__(self, name: str) -> Identifier:
        if name.startswith("__"):
            raise AttributeError(name)
        return Identifier(name, table=self._table)

    def __getitem__(self, table: str) -> VirtualRow:
        if self._table is not None:
            return VirtualRow(f"{self._table}.{table}")
        return VirtualRow(table)

    @property
    def fn(self) -> FunctionNamespace:
        return func

    def __repr__(self) -> str:
        return f"VirtualRow(table={self._table!r})"
