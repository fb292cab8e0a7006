"""UnitOfWork — transaction scope handed out by an executor."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("sqlweave.uow")


class UnitOfWork(ABC):
    """
    Abstract base class for transaction scopes.

    Used as an async context manager: a clean exit commits, an exception
    rolls back and propagates. Callbacks registered with ``on_commit`` run
    only **after** the commit completed, callbacks registered with
    ``on_rollback`` only after the rollback completed.

    Example:
        ```python
        async with executor.transaction() as uow:
            uow.on_commit(notify)
            await executor.execute("UPDATE ...", params)
        ```
    """

    def __init__(self) -> None:
        self._on_commit_hooks: deque[Callable[[], Awaitable[Any]]] = deque()
        self._on_rollback_hooks: deque[Callable[[], Awaitable[Any]]] = deque()

    def on_commit(self, callback: Callable[[], Awaitable[Any]]) -> None:
        """Register an async callback to be executed after a successful commit."""
        self._on_commit_hooks.append(callback)

    def on_rollback(self, callback: Callable[[], Awaitable[Any]]) -> None:
        """Register an async callback to be executed after a rollback."""
        self._on_rollback_hooks.append(callback)

    async def trigger_commit_hooks(self) -> None:
        """Execute all registered on_commit hooks, dropping rollback hooks."""
        self._on_rollback_hooks.clear()
        await self._drain(self._on_commit_hooks, "on_commit")

    async def trigger_rollback_hooks(self) -> None:
        """Execute all registered on_rollback hooks, dropping commit hooks."""
        self._on_commit_hooks.clear()
        await self._drain(self._on_rollback_hooks, "on_rollback")

    @staticmethod
    async def _drain(
        hooks: deque[Callable[[], Awaitable[Any]]],
        kind: str,
    ) -> None:
        while hooks:
            callback = hooks.popleft()
            try:
                await callback()
            except Exception as exc:
                logger.error("Error in %s hook: %s", kind, exc, exc_info=True)

    @abstractmethod
    async def commit(self) -> None:
        """Commit the transaction. Must be implemented by subclasses."""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback the transaction. Must be implemented by subclasses."""
        ...

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """
        Exit the context manager.

        1. No exception: commit(), then the on_commit hooks.
        2. Exception: rollback(), then the on_rollback hooks; the
           exception keeps propagating.
        """
        if exc_type is None:
            await self.commit()
            await self.trigger_commit_hooks()
        else:
            await self.rollback()
            await self.trigger_rollback_hooks()
