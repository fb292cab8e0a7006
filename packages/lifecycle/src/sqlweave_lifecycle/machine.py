"""
Lifecycle: the save/destroy state machine.

One invocation walks::

    save:     INITIAL → VALIDATING → PRE_SAVE → PRE_CREATE | PRE_UPDATE
              → EXECUTING → POST_CREATE | POST_UPDATE → POST_SAVE → DONE
    destroy:  INITIAL → PRE_DESTROY → EXECUTING → POST_DESTROY → DONE

Validation runs before any transaction is opened. Everything from
``before_save`` (or ``before_destroy``) onwards runs inside one unit of
work when the record class has ``use_transactions`` set, so a halt or an
error rolls the statement back.

Example::

    lifecycle = Lifecycle(executor)
    outcome = await lifecycle.save(Item(name="pen"))
    if outcome.aborted:
        print(outcome.error)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlweave_core.instrumentation import get_hook_registry
from sqlweave_core.ports.executor import ExecutionResult
from sqlweave_core.primitives.exceptions import (
    ExecutorError,
    HookAbortedError,
    InvalidRecordStateError,
    NoExistingObjectError,
    SqlWeaveError,
    ValidationFailedError,
)
from sqlweave_core.validation import PydanticValidator
from sqlweave_expressions import DEFAULT, SqlCompiler, delete, insert, update

from .hooks import HookOutcome, HookStage
from .outcome import LifecycleOutcome, LifecycleStage, OutcomeStatus
from .record import ModelRecord, PersistenceState

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from sqlweave_core.ports.executor import IExecutor
    from sqlweave_core.ports.unit_of_work import UnitOfWork
    from sqlweave_expressions import DialectConfig, Expression

logger = logging.getLogger("sqlweave.lifecycle")


class _Trail:
    """Stages entered by one invocation."""

    def __init__(self, operation: str, record: ModelRecord) -> None:
        self.operation = operation
        self.record = record
        self.stages: list[LifecycleStage] = [LifecycleStage.INITIAL]

    def enter(self, stage: LifecycleStage) -> None:
        self.stages.append(stage)
        logger.debug(
            "%s %s: %s", self.operation, type(self.record).__name__, stage.value
        )

    def outcome(
        self,
        status: OutcomeStatus,
        error: Exception | None = None,
        result: ExecutionResult | None = None,
    ) -> LifecycleOutcome:
        return LifecycleOutcome(
            operation=self.operation,
            status=status,
            record=self.record,
            trail=tuple(self.stages),
            error=error,
            result=result,
        )


class Lifecycle:
    """
    Runs hooks, validation and statements for :class:`ModelRecord` objects.

    Args:
        executor: Runs compiled SQL and hands out transactions.
        dialect: Dialect to compile for; defaults to the executor's, then
            ``DEFAULT``.
        validator: Field validator; a :class:`PydanticValidator` by default.
    """

    def __init__(
        self,
        executor: IExecutor,
        dialect: DialectConfig | None = None,
        *,
        validator: PydanticValidator | None = None,
    ) -> None:
        self.executor = executor
        self.dialect = dialect or getattr(executor, "dialect", None) or DEFAULT
        self.compiler = SqlCompiler(self.dialect)
        self.validator = validator or PydanticValidator()

    # ── Hooked operations ────────────────────────────────────────

    async def save(
        self,
        record: ModelRecord,
        *,
        validate: bool = True,
        transaction: bool | None = None,
        raise_errors: bool = True,
    ) -> LifecycleOutcome:
        """
        Create or update ``record``.

        Args:
            validate: ``False`` skips the validation stage entirely.
            transaction: Overrides the class's ``use_transactions``.
            raise_errors: ``False`` reports exceptions as a ``FAILED``
                outcome instead of raising them.

        Returns:
            ``SUCCESS``, or ``ABORTED`` when a before-hook halted or the
            record was invalid.

        Raises:
            InvalidRecordStateError: The record was destroyed.
        """
        return await self._instrumented(
            "lifecycle.save",
            record,
            lambda: self._save(record, validate, transaction, raise_errors),
        )

    async def destroy(
        self,
        record: ModelRecord,
        *,
        transaction: bool | None = None,
        raise_errors: bool = True,
    ) -> LifecycleOutcome:
        """
        Delete ``record``'s row, running ``before_destroy``/``after_destroy``.

        Raises:
            InvalidRecordStateError: The record is not persisted.
        """
        return await self._instrumented(
            "lifecycle.destroy",
            record,
            lambda: self._destroy(record, transaction, raise_errors),
        )

    async def validate(self, record: ModelRecord) -> bool:
        """
        Run ``before_validation``, field and business-rule checks, then
        ``after_validation``. Errors end up in ``record.errors``.

        A halted ``before_validation`` counts as invalid.
        """
        try:
            return await self._validate(record)
        except HookAbortedError as exc:
            logger.debug("Validation of %s halted: %s", type(record).__name__, exc)
            return False

    # ── Hook-free escape hatches ─────────────────────────────────

    async def raw_insert(
        self,
        target: ModelRecord | str,
        values: Mapping[str, Any] | None = None,
        *,
        transaction: bool = False,
    ) -> ExecutionResult:
        """INSERT without hooks or validation; a record is marked persisted."""
        if isinstance(target, ModelRecord):
            statement = insert(target.table_name(), values or target.insert_values())
        else:
            statement = insert(target, values)
        result = await self._instrumented(
            "lifecycle.raw_insert",
            target,
            lambda: self._in_scope(transaction, lambda _uow: self._execute(statement)),
        )
        if isinstance(target, ModelRecord):
            _assign_generated_key(target, result)
            target.mark_persisted()
        return result

    async def raw_update(
        self,
        target: ModelRecord | str,
        values: Mapping[str, Any] | None = None,
        where: Any = None,
        *,
        transaction: bool = False,
    ) -> ExecutionResult:
        """
        UPDATE without hooks or validation.

        For a record, ``values`` defaults to its changed columns and the
        statement is filtered by its primary key.
        """
        if isinstance(target, ModelRecord):
            if values is None:
                values = target.column_values(_settable(target))
            if not values:
                return ExecutionResult(rowcount=0)
            statement = update(target.table_name(), values, target.primary_key("update"))
        else:
            if not values:
                raise ValueError("raw_update needs values for a table name")
            statement = update(target, values, where)
        result = await self._instrumented(
            "lifecycle.raw_update",
            target,
            lambda: self._in_scope(transaction, lambda _uow: self._execute(statement)),
        )
        if isinstance(target, ModelRecord):
            target.mark_persisted()
        return result

    async def raw_delete(
        self,
        target: ModelRecord | str,
        where: Any = None,
        *,
        transaction: bool = False,
    ) -> ExecutionResult:
        """
        DELETE without ``before_destroy``/``after_destroy`` hooks.

        A record is deleted by primary key and marked destroyed; a table
        name deletes the rows matching ``where`` (all rows when omitted).
        """
        if isinstance(target, ModelRecord):
            statement = delete(target.table_name(), target.primary_key("delete"))
        else:
            statement = delete(target, where)
        result = await self._instrumented(
            "lifecycle.raw_delete",
            target,
            lambda: self._in_scope(transaction, lambda _uow: self._execute(statement)),
        )
        if isinstance(target, ModelRecord):
            target.mark_destroyed()
        return result

    # ── State machine ────────────────────────────────────────────

    async def _save(
        self,
        record: ModelRecord,
        validate: bool,
        transaction: bool | None,
        raise_errors: bool,
    ) -> LifecycleOutcome:
        if record.state is PersistenceState.DESTROYED:
            raise InvalidRecordStateError("save", record.state.value)
        use_transaction = _use_transaction(record, transaction)
        trail = _Trail("save", record)
        snapshot = record._snapshot()

        async def steps(uow: UnitOfWork | None) -> ExecutionResult:
            self._schedule_completion_hooks(record, uow)
            await self._before(HookStage.BEFORE_SAVE, record)
            if creating:
                trail.enter(LifecycleStage.PRE_CREATE)
                await self._before(HookStage.BEFORE_CREATE, record)
                trail.enter(LifecycleStage.EXECUTING)
                result = await self._insert(record)
                trail.enter(LifecycleStage.POST_CREATE)
                await self._after(HookStage.AFTER_CREATE, record)
            else:
                trail.enter(LifecycleStage.PRE_UPDATE)
                await self._before(HookStage.BEFORE_UPDATE, record)
                trail.enter(LifecycleStage.EXECUTING)
                result = await self._update(record)
                trail.enter(LifecycleStage.POST_UPDATE)
                await self._after(HookStage.AFTER_UPDATE, record)
            trail.enter(LifecycleStage.POST_SAVE)
            await self._after(HookStage.AFTER_SAVE, record)
            return result

        try:
            if validate:
                trail.enter(LifecycleStage.VALIDATING)
                if not await self._validate(record):
                    raise ValidationFailedError(dict(record.errors.errors))
            trail.enter(LifecycleStage.PRE_SAVE)
            creating = record.is_new
            result = await self._in_scope(use_transaction, steps)
        except (HookAbortedError, ValidationFailedError) as exc:
            record._restore(snapshot)
            logger.info("save of %s aborted: %s", type(record).__name__, exc)
            return trail.outcome(OutcomeStatus.ABORTED, exc)
        except Exception as exc:
            record._restore(snapshot)
            if raise_errors:
                raise
            logger.warning(
                "save of %s failed at %s: %s",
                type(record).__name__,
                trail.stages[-1].value,
                exc,
                exc_info=True,
            )
            return trail.outcome(OutcomeStatus.FAILED, exc)

        if not use_transaction:
            await self._run_completion_hooks(HookStage.AFTER_COMMIT, record)
        trail.enter(LifecycleStage.DONE)
        return trail.outcome(OutcomeStatus.SUCCESS, result=result)

    async def _destroy(
        self,
        record: ModelRecord,
        transaction: bool | None,
        raise_errors: bool,
    ) -> LifecycleOutcome:
        if record.state is not PersistenceState.PERSISTED:
            raise InvalidRecordStateError("destroy", record.state.value)
        use_transaction = _use_transaction(record, transaction)
        trail = _Trail("destroy", record)
        snapshot = record._snapshot()

        async def steps(uow: UnitOfWork | None) -> ExecutionResult:
            self._schedule_completion_hooks(record, uow)
            trail.enter(LifecycleStage.PRE_DESTROY)
            await self._before(HookStage.BEFORE_DESTROY, record)
            trail.enter(LifecycleStage.EXECUTING)
            result = await self._delete(record)
            trail.enter(LifecycleStage.POST_DESTROY)
            await self._after(HookStage.AFTER_DESTROY, record)
            return result

        try:
            result = await self._in_scope(use_transaction, steps)
        except HookAbortedError as exc:
            record._restore(snapshot)
            logger.info("destroy of %s aborted: %s", type(record).__name__, exc)
            return trail.outcome(OutcomeStatus.ABORTED, exc)
        except Exception as exc:
            record._restore(snapshot)
            if raise_errors:
                raise
            logger.warning(
                "destroy of %s failed at %s: %s",
                type(record).__name__,
                trail.stages[-1].value,
                exc,
                exc_info=True,
            )
            return trail.outcome(OutcomeStatus.FAILED, exc)

        if not use_transaction:
            await self._run_completion_hooks(HookStage.AFTER_COMMIT, record)
        trail.enter(LifecycleStage.DONE)
        return trail.outcome(OutcomeStatus.SUCCESS, result=result)

    async def _validate(self, record: ModelRecord) -> bool:
        await self._before(HookStage.BEFORE_VALIDATION, record)
        record.errors.clear()
        result = await self.validator.validate(record)
        for field_name, messages in result.errors.items():
            for message in messages:
                record.errors.add_error(field_name, message)
        record.validate_record()
        await self._after(HookStage.AFTER_VALIDATION, record)
        return record.errors.is_valid

    # ── Statements ───────────────────────────────────────────────

    async def _insert(self, record: ModelRecord) -> ExecutionResult:
        result = await self._execute(insert(record.table_name(), record.insert_values()))
        _assign_generated_key(record, result)
        record.mark_persisted()
        return result

    async def _update(self, record: ModelRecord) -> ExecutionResult:
        columns = _settable(record)
        if not columns:
            logger.debug("No changed columns on %s; skipping UPDATE", type(record).__name__)
            return ExecutionResult(rowcount=0)
        key = record.primary_key("update")
        result = await self._execute(
            update(record.table_name(), record.column_values(columns), key)
        )
        _check_modified(record, key, result)
        record.mark_persisted()
        return result

    async def _delete(self, record: ModelRecord) -> ExecutionResult:
        key = record.primary_key("delete")
        result = await self._execute(delete(record.table_name(), key))
        _check_modified(record, key, result)
        record.mark_destroyed()
        return result

    async def _execute(self, statement: Expression) -> ExecutionResult:
        compiled = self.compiler.compile(statement)
        logger.debug("Executing %s %r", compiled.sql, compiled.params)
        try:
            return await self.executor.execute(compiled.sql, compiled.params)
        except SqlWeaveError:
            raise
        except Exception as exc:
            raise ExecutorError(str(exc), compiled.sql) from exc

    # ── Plumbing ─────────────────────────────────────────────────

    async def _in_scope(
        self,
        use_transaction: bool,
        work: Callable[[UnitOfWork | None], Awaitable[ExecutionResult]],
    ) -> ExecutionResult:
        if not use_transaction:
            return await work(None)
        async with self.executor.transaction() as uow:
            return await work(uow)

    async def _before(self, stage: HookStage, record: ModelRecord) -> None:
        if await type(record).__hooks__.run(stage, record) is HookOutcome.HALT:
            raise HookAbortedError(stage.value)

    async def _after(self, stage: HookStage, record: ModelRecord) -> None:
        await type(record).__hooks__.run(stage, record)

    def _schedule_completion_hooks(
        self, record: ModelRecord, uow: UnitOfWork | None
    ) -> None:
        if uow is None:
            return
        uow.on_commit(lambda: self._after(HookStage.AFTER_COMMIT, record))
        uow.on_rollback(lambda: self._after(HookStage.AFTER_ROLLBACK, record))

    async def _run_completion_hooks(self, stage: HookStage, record: ModelRecord) -> None:
        try:
            await self._after(stage, record)
        except Exception as exc:
            logger.error("Error in %s hook: %s", stage.value, exc, exc_info=True)

    async def _instrumented(
        self,
        operation: str,
        target: ModelRecord | str,
        handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        record_type = type(target).__name__ if isinstance(target, ModelRecord) else None
        table = target.table_name() if isinstance(target, ModelRecord) else target
        attributes = {
            "record_type": record_type,
            "table": table,
            "dialect": self.dialect.name,
        }
        return await get_hook_registry().execute_all(operation, attributes, handler)


def _use_transaction(record: ModelRecord, transaction: bool | None) -> bool:
    return type(record).use_transactions if transaction is None else transaction


def _settable(record: ModelRecord) -> tuple[str, ...]:
    """Changed columns that may appear in SET; primary key columns never do."""
    key = set(type(record).__primary_key__)
    return tuple(name for name in record.changed_columns if name not in key)


def _assign_generated_key(record: ModelRecord, result: ExecutionResult) -> None:
    key = type(record).__primary_key__
    if len(key) == 1 and getattr(record, key[0], None) is None:
        if result.lastrowid is not None:
            setattr(record, key[0], result.lastrowid)


def _check_modified(
    record: ModelRecord, key: dict[str, Any], result: ExecutionResult
) -> None:
    if type(record).require_modification and result.rowcount == 0:
        raise NoExistingObjectError(record.table_name(), key)
