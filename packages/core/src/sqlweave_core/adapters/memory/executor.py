"""InMemoryExecutor — records statements instead of talking to a database."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ...ports.executor import ExecutionResult
from .unit_of_work import InMemoryUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

_INSERT_RE = re.compile(r"^\s*INSERT\b", re.IGNORECASE)


@dataclass(frozen=True)
class ExecutedStatement:
    """One statement seen by the executor."""

    sql: str
    params: tuple[Any, ...]
    in_transaction: bool


class InMemoryExecutor:
    """In-memory implementation of ``IExecutor`` for testing.

    Every statement is appended to ``statements``. INSERTs report one
    affected row and a generated ``lastrowid``; everything else reports one
    affected row. Pass a ``responder`` to script results or to raise errors;
    returning ``None`` from it falls back to the default result.
    """

    def __init__(
        self,
        dialect: Any = None,
        *,
        responder: Callable[[str, tuple[Any, ...]], ExecutionResult | None]
        | None = None,
    ) -> None:
        self._dialect = dialect
        self._responder = responder
        self._next_id = 1
        self.statements: list[ExecutedStatement] = []
        self.transactions: list[InMemoryUnitOfWork] = []

    @property
    def dialect(self) -> Any:
        return self._dialect

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecutionResult:
        bound = tuple(params)
        self.statements.append(
            ExecutedStatement(sql=sql, params=bound, in_transaction=self._in_transaction)
        )
        if self._responder is not None:
            result = self._responder(sql, bound)
            if result is not None:
                return result
        if _INSERT_RE.match(sql):
            lastrowid = self._next_id
            self._next_id += 1
            return ExecutionResult(rowcount=1, lastrowid=lastrowid)
        return ExecutionResult(rowcount=1)

    def transaction(self) -> InMemoryUnitOfWork:
        uow = InMemoryUnitOfWork()
        self.transactions.append(uow)
        return uow

    # ── Test helpers ─────────────────────────────────────────────

    @property
    def _in_transaction(self) -> bool:
        return any(not uow.completed for uow in self.transactions)

    @property
    def sql(self) -> list[str]:
        """Executed SQL texts, in order."""
        return [statement.sql for statement in self.statements]

    def reset(self) -> None:
        """Forget recorded statements and transactions."""
        self.statements.clear()
        self.transactions.clear()
