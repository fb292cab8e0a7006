"""sqlweave-lifecycle — hooked save/destroy state machine for pydantic records."""

from __future__ import annotations

from .hooks import Hook, HookLayer, HookOutcome, HookStage, LayeredHookRegistry
from .machine import Lifecycle
from .outcome import LifecycleOutcome, LifecycleStage, OutcomeStatus
from .record import LOADED_CONTEXT_KEY, ModelRecord, PersistenceState

__all__ = [
    # Hooks
    "Hook",
    "HookLayer",
    "HookOutcome",
    "HookStage",
    "LayeredHookRegistry",
    # Records
    "LOADED_CONTEXT_KEY",
    "ModelRecord",
    "PersistenceState",
    # State machine
    "Lifecycle",
    "LifecycleOutcome",
    "LifecycleStage",
    "OutcomeStatus",
]
