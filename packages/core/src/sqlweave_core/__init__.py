"""sqlweave-core — foundation package for the sqlweave toolkit.

Exception tree, executor and unit-of-work ports, in-memory adapters,
validation results and instrumentation hooks. No database dependencies.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import ExecutedStatement, InMemoryExecutor, InMemoryUnitOfWork

# ── Instrumentation ─────────────────────────────────────────────
from .instrumentation import (
    HookRegistration,
    HookRegistry,
    InstrumentationHook,
    get_hook_registry,
    set_hook_registry,
)

# ── Ports ───────────────────────────────────────────────────────
from .ports import ExecutionResult, IExecutor, UnitOfWork

# ── Primitives ──────────────────────────────────────────────────
from .primitives.exceptions import (
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

# ── Validation ──────────────────────────────────────────────────
from .validation import PydanticValidator, ValidationResult

__all__ = [
    # Adapters
    "ExecutedStatement",
    "InMemoryExecutor",
    "InMemoryUnitOfWork",
    # Instrumentation
    "HookRegistration",
    "HookRegistry",
    "InstrumentationHook",
    "get_hook_registry",
    "set_hook_registry",
    # Ports
    "ExecutionResult",
    "IExecutor",
    "UnitOfWork",
    # Exceptions
    "ExecutorError",
    "HookAbortedError",
    "InfrastructureError",
    "InvalidRecordStateError",
    "LifecycleError",
    "NoExistingObjectError",
    "PersistenceError",
    "SqlWeaveError",
    "ValidationFailedError",
    # Validation
    "PydanticValidator",
    "ValidationResult",
]
