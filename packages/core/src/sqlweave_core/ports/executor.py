"""Executor port — the external layer that runs compiled SQL."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .unit_of_work import UnitOfWork


@dataclass(frozen=True)
class ExecutionResult:
    """
    What the executor reports back for one statement.

    Attributes:
        rowcount: Rows affected (``-1`` when the driver cannot tell).
        rows: Fetched rows for statements that return rows.
        lastrowid: Driver-reported id of the last inserted row, if any.
    """

    rowcount: int = 0
    rows: tuple[tuple[Any, ...], ...] = ()
    lastrowid: Any = None


@runtime_checkable
class IExecutor(Protocol):
    """
    Protocol for statement executors.

    ``dialect`` is the read-only dialect descriptor the executor's SQL must
    be compiled for. It is typed loosely so the core package stays free of
    the expression package.
    """

    @property
    def dialect(self) -> Any:
        ...

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecutionResult:
        """Run one statement with positional bind parameters."""
        ...

    def transaction(self) -> UnitOfWork:
        """Return a fresh transaction scope (an async context manager)."""
        ...
