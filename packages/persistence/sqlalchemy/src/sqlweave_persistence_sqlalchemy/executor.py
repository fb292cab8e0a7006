"""
SQLAlchemyExecutor — runs compiled SQL on an ``AsyncSession``.

Statements go to the DB-API driver unchanged through
``AsyncConnection.exec_driver_sql``, so the executor's dialect must use the
driver's parameter style; :func:`~.dialects.dialect_for` derives it from the
engine.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from sqlweave_core.ports.executor import ExecutionResult
from sqlweave_core.primitives.exceptions import ExecutorError

from .dialects import dialect_for
from .exceptions import SessionManagementError
from .uow import SQLAlchemyUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.engine import CursorResult
    from sqlalchemy.ext.asyncio import AsyncSession

    from sqlweave_expressions import DialectConfig

logger = logging.getLogger("sqlweave.executor")


class SQLAlchemyExecutor:
    """
    ``IExecutor`` over a caller-managed ``AsyncSession``.

    Args:
        session: Session whose connection runs the statements.
        dialect: Compilation dialect; derived from ``session.bind`` when
            omitted.
        autocommit: Commit statements issued outside a unit of work right
            away. Without it they stay in the session's open transaction
            until the caller commits.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        dialect: DialectConfig | None = None,
        autocommit: bool = True,
    ) -> None:
        if dialect is None:
            if session.bind is None:
                raise SessionManagementError(
                    "Session has no bind; pass dialect= explicitly"
                )
            dialect = dialect_for(session.bind)
        self._session = session
        self._dialect = dialect
        self._autocommit = autocommit
        self._units: list[SQLAlchemyUnitOfWork] = []

    @property
    def dialect(self) -> DialectConfig:
        return self._dialect

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecutionResult:
        """Run one statement; driver errors surface as :class:`ExecutorError`."""
        logger.debug("SQL: %s %r", sql, tuple(params))
        try:
            connection = await self._session.connection()
            result: CursorResult[Any] = await connection.exec_driver_sql(sql, tuple(params))
            outcome = _to_execution_result(result)
            if self._autocommit and not self.in_unit_of_work:
                await self._session.commit()
        except SQLAlchemyError as exc:
            logger.error("Statement failed: %s", exc)
            if self._autocommit and not self.in_unit_of_work:
                await self._session.rollback()
            raise ExecutorError(str(exc), sql) from exc
        return outcome

    def transaction(self) -> SQLAlchemyUnitOfWork:
        """A unit of work on this executor's session (a savepoint when nested)."""
        self._units = [unit for unit in self._units if not unit.closed]
        uow = SQLAlchemyUnitOfWork(session=self._session)
        self._units.append(uow)
        return uow

    @property
    def in_unit_of_work(self) -> bool:
        return any(unit.active for unit in self._units)


def _to_execution_result(result: CursorResult[Any]) -> ExecutionResult:
    rows: tuple[tuple[Any, ...], ...] = ()
    if result.returns_rows:
        rows = tuple(tuple(row) for row in result.fetchall())
    try:
        lastrowid = result.lastrowid
    except (AttributeError, NotImplementedError):
        lastrowid = None
    return ExecutionResult(rowcount=result.rowcount, rows=rows, lastrowid=lastrowid)
