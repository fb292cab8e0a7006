"""Lifecycle stages and the outcome reported for every save/destroy call."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlweave_core.ports.executor import ExecutionResult


class LifecycleStage(str, Enum):
    """States of one save or destroy invocation."""

    INITIAL = "INITIAL"
    VALIDATING = "VALIDATING"
    PRE_SAVE = "PRE_SAVE"
    PRE_CREATE = "PRE_CREATE"
    PRE_UPDATE = "PRE_UPDATE"
    EXECUTING = "EXECUTING"
    POST_CREATE = "POST_CREATE"
    POST_UPDATE = "POST_UPDATE"
    POST_SAVE = "POST_SAVE"
    PRE_DESTROY = "PRE_DESTROY"
    POST_DESTROY = "POST_DESTROY"
    DONE = "DONE"


class OutcomeStatus(str, Enum):
    """
    ``ABORTED`` is the non-exceptional stop (a before-hook halted, or the
    record was invalid); ``FAILED`` means an exception was captured.
    """

    SUCCESS = "SUCCESS"
    ABORTED = "ABORTED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class LifecycleOutcome:
    """
    Result of :meth:`Lifecycle.save` or :meth:`Lifecycle.destroy`.

    Truthy only on success, so ``if await lifecycle.save(item):`` reads
    naturally.

    Attributes:
        operation: ``"save"`` or ``"destroy"``.
        status: How the invocation ended.
        record: The record the invocation ran against.
        trail: Stages entered, in order, starting with ``INITIAL``.
        error: The halt, validation or captured error, if any.
        result: What the executor reported for the statement, if one ran.
    """

    operation: str
    status: OutcomeStatus
    record: Any
    trail: tuple[LifecycleStage, ...]
    error: Exception | None = None
    result: ExecutionResult | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @property
    def aborted(self) -> bool:
        return self.status is OutcomeStatus.ABORTED

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    @property
    def stage(self) -> LifecycleStage:
        """The last stage entered."""
        return self.trail[-1]

    def raise_for_status(self) -> LifecycleOutcome:
        """Raise the carried error unless the invocation succeeded."""
        if self.error is not None and not self.succeeded:
            raise self.error
        return self

    def __bool__(self) -> bool:
        return self.succeeded
