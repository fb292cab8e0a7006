"""Exception hierarchy shared by every sqlweave package."""

from __future__ import annotations

from typing import Any


class SqlWeaveError(Exception):
    """Root exception for the entire sqlweave toolkit."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class LifecycleError(SqlWeaveError):
    """Base class for errors raised while running a persistence lifecycle."""


class HookAbortedError(LifecycleError):
    """A before-hook halted the surrounding operation.

    This is a non-fatal outcome: nothing was written and the caller is
    told which stage stopped the operation.
    """

    def __init__(self, stage: str | None = None, reason: str | None = None) -> None:
        self.stage = stage
        self.reason = reason
        msg = f"Operation halted by {stage} hook" if stage else "Operation halted"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "HOOK_ABORTED",
            "stage": self.stage,
            "reason": self.reason,
        }


class ValidationFailedError(LifecycleError):
    """Raised when record validation fails.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALIDATION_FAILED",
            "errors": self.errors,
        }


class InvalidRecordStateError(LifecycleError):
    """The record's persistence state does not allow the requested operation."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} a record in state '{state}'")


class InfrastructureError(SqlWeaveError):
    """Base class for all infrastructure-related errors."""


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""


class ExecutorError(PersistenceError):
    """Wraps an error raised by the external statement executor.

    Fatal to the current operation; the surrounding transaction is
    rolled back before it propagates.
    """

    def __init__(self, message: str, sql: str | None = None) -> None:
        self.sql = sql
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "EXECUTOR_FAILURE",
            "message": str(self),
            "sql": self.sql,
        }


class NoExistingObjectError(PersistenceError):
    """An UPDATE or DELETE of a record matched no rows."""

    def __init__(self, table: str, key: dict[str, Any]) -> None:
        self.table = table
        self.key = key
        super().__init__(f"No row in '{table}' matched primary key {key!r}")
