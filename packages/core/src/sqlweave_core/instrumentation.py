"""Instrumentation hooks around persistence operations (tracing, metrics)."""

from __future__ import annotations

import fnmatch
import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("sqlweave.instrumentation")

_MATCH_CACHE_MAX_SIZE = 2048


@runtime_checkable
class InstrumentationHook(Protocol):
    """Protocol for instrumentation hooks.

    A hook wraps an operation such as ``lifecycle.save`` and must await
    ``next_handler`` exactly once, returning its result.
    """

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        ...


class HookRegistration:
    """A registered hook with filtering and priority."""

    def __init__(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        operations: list[str] | None = None,
        record_types: list[str] | None = None,
        enabled: bool = True,
    ) -> None:
        self.hook = hook
        self.priority = priority
        self.operations = operations or []
        self.record_types = record_types or []
        self.enabled = enabled
        self._match_cache: dict[str, bool] = {}

    def matches(self, operation: str, attributes: dict[str, Any]) -> bool:
        """Check if this registration applies to the operation."""
        if not self.enabled:
            return False
        if not self._matches_operation(operation):
            return False
        if not self.record_types:
            return True
        record_type = attributes.get("record_type")
        return record_type is None or record_type in self.record_types

    def _matches_operation(self, operation: str) -> bool:
        if not self.operations:
            return True
        if operation in self._match_cache:
            return self._match_cache[operation]
        matched = any(
            fnmatch.fnmatch(operation, pattern) for pattern in self.operations
        )
        if len(self._match_cache) >= _MATCH_CACHE_MAX_SIZE:
            self._match_cache.clear()
        self._match_cache[operation] = matched
        return matched


class HookRegistry:
    """Registry for instrumentation hooks, run as a priority-ordered pipeline."""

    def __init__(self) -> None:
        self._registrations: list[HookRegistration] = []

    def register(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        operations: list[str] | None = None,
        record_types: list[str] | None = None,
        enabled: bool = True,
    ) -> HookRegistration:
        """Register a hook with optional filtering."""
        registration = HookRegistration(
            hook=hook,
            priority=priority,
            operations=operations,
            record_types=record_types,
            enabled=enabled,
        )
        self._registrations.append(registration)
        self._registrations.sort(key=lambda r: r.priority)
        return registration

    async def execute_all(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Execute all matching hooks in priority order around ``next_handler``."""
        matching = [r for r in self._registrations if r.matches(operation, attributes)]
        if not matching:
            return await next_handler()

        async def pipeline(index: int = 0) -> Any:
            if index >= len(matching):
                return await next_handler()
            registration = matching[index]
            return await registration.hook(
                operation,
                attributes,
                lambda: pipeline(index + 1),
            )

        return await pipeline()

    def clear(self) -> None:
        """Remove all registrations."""
        self._registrations.clear()


_hook_registry_var: ContextVar[HookRegistry | None] = ContextVar(
    "sqlweave_hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Get the hook registry for the current context.

    Creates a fresh ``HookRegistry`` on first access within each context,
    so state does not leak across async tasks or test boundaries.
    """
    registry = _hook_registry_var.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry_var.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    """Set a custom hook registry in the current context."""
    _hook_registry_var.set(registry)
