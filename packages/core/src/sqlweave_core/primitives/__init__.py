from .exceptions import (
    ExecutorError,
    HookAbortedError,
    InfrastructureError,
    InvalidRecordStateError,
    LifecycleError,
    NoExistingObjectError,
    PersistenceError,
    SqlWeaveError,
    ValidationFailedError,
)

__all__ = [
    "ExecutorError",
    "HookAbortedError",
    "InfrastructureError",
    "InvalidRecordStateError",
    "LifecycleError",
    "NoExistingObjectError",
    "PersistenceError",
    "SqlWeaveError",
    "ValidationFailedError",
]
