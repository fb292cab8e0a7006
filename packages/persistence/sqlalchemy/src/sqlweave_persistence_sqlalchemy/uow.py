"""
SQLAlchemy implementation of the Unit of Work port.
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

from sqlweave_core.ports.unit_of_work import UnitOfWork

from .exceptions import SessionManagementError, UnitOfWorkError

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

    AsyncSessionFactory = Callable[[], AsyncSession]


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    Unit of Work implementation using SQLAlchemy AsyncSession.

    Supports two usage patterns:

    1. **Caller-Managed Sessions**:
       ```python
       async with SQLAlchemyUnitOfWork(session=session) as uow:
           ...
       ```
       The session lifecycle is managed by the caller.

    2. **Self-Managed Sessions**:
       ```python
       factory = async_sessionmaker(engine)
       async with SQLAlchemyUnitOfWork(session_factory=factory) as uow:
           ...
       ```
       The UoW creates and closes the session.

    When the session already has a transaction open, the unit of work runs
    in a SAVEPOINT, so rolling it back leaves the outer transaction intact.

    **Important:** Exactly one of `session` or `session_factory` must be provided.
    """

    def __init__(
        self,
        session: AsyncSession | None = None,
        session_factory: AsyncSessionFactory | None = None,
    ) -> None:
        if session is not None and session_factory is not None:
            raise SessionManagementError(
                "Cannot provide both 'session' and 'session_factory'. "
                "Use either caller-managed (session) or self-managed "
                "(session_factory) pattern."
            )

        if session is None and session_factory is None:
            raise SessionManagementError(
                "Must provide either 'session' or 'session_factory'. "
                "Use caller-managed pattern with session=(AsyncSession) "
                "or self-managed pattern with session_factory=(callable)."
            )

        self._session: AsyncSession | None = session
        self._session_factory = session_factory
        self._owns_session = session_factory is not None and session is None
        self._transaction: AsyncSessionTransaction | None = None
        self.active = False
        self.closed = False
        super().__init__()

    @property
    def session(self) -> AsyncSession:
        """Get the active session. Raises if session not yet created."""
        if self._session is None:
            raise UnitOfWorkError(
                "Session not yet created. Ensure __aenter__ was called."
            )
        return self._session

    @property
    def is_savepoint(self) -> bool:
        return self._transaction is not None and self._transaction.nested

    async def __aenter__(self) -> SQLAlchemyUnitOfWork:
        """Begin a transaction (or a savepoint), creating the session if needed."""
        try:
            if self._owns_session and self._session_factory:
                self._session = self._session_factory()

            if self.session.in_transaction():
                self._transaction = await self.session.begin_nested()
            else:
                self._transaction = await self.session.begin()
            self.active = True
            return self
        except Exception as e:  # noqa: BLE001
            # Catch all exceptions during session initialization and wrap them
            if isinstance(e, SessionManagementError | UnitOfWorkError):
                raise
            raise SessionManagementError(f"Failed to initialize UoW: {e}") from e

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """
        Commit or rollback via the base class, closing a factory-created
        session.
        """
        try:
            await super().__aexit__(exc_type, exc_val, exc_tb)
        finally:
            self.active = False
            self.closed = True
            if self._owns_session and self._session is not None:
                try:
                    await self._session.close()
                except Exception as e:  # noqa: BLE001
                    raise SessionManagementError(f"Failed to close session: {e}") from e

    async def commit(self) -> None:
        """Commit the transaction or release the savepoint."""
        transaction = self._require_transaction()
        try:
            if transaction.is_active:
                await transaction.commit()
        except Exception as e:  # noqa: BLE001
            # Constraint violations surface at commit time; undo what is left.
            with contextlib.suppress(Exception):
                await self.rollback()
            raise UnitOfWorkError(f"Failed to commit transaction: {e}") from e

    async def rollback(self) -> None:
        """Roll back the transaction or to the savepoint."""
        transaction = self._require_transaction()
        try:
            if transaction.is_active:
                await transaction.rollback()
        except Exception as e:  # noqa: BLE001
            raise UnitOfWorkError(f"Failed to rollback transaction: {e}") from e

    def _require_transaction(self) -> AsyncSessionTransaction:
        if self._transaction is None:
            raise UnitOfWorkError("No transaction begun. Ensure __aenter__ was called.")
        return self._transaction
