"""ModelRecord: a pydantic model that knows its table, state and hooks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, ClassVar, NoReturn, TypeVar

from pydantic import BaseModel, ConfigDict, PrivateAttr

from sqlweave_core.primitives.exceptions import HookAbortedError, InvalidRecordStateError
from sqlweave_core.validation import REVALIDATION_CONTEXT_KEY, ValidationResult

from .hooks import HookLayer, HookStage, LayeredHookRegistry

LOADED_CONTEXT_KEY = "sqlweave_loaded"

R = TypeVar("R", bound="ModelRecord")


class PersistenceState(str, Enum):
    """Where a record stands relative to its row."""

    NEW = "NEW"
    PERSISTED = "PERSISTED"
    DESTROYED = "DESTROYED"


class ModelRecord(BaseModel):
    """
    Base class for records saved through a
    :class:`~sqlweave_lifecycle.machine.Lifecycle`.

    Hook methods are looked up by stage name in each class body and become
    one hook layer per class; plugins add further layers::

        class Item(ModelRecord):
            __table__ = "items"

            id: int | None = None
            name: str

            def before_create(self) -> HookOutcome | None:
                if not self.name.strip():
                    return HookOutcome.HALT
                return None

        Item.plugin(Timestamps)

    Class-level configuration:

    - ``__table__``: table name (required before persisting).
    - ``__primary_key__``: primary key columns, ``("id",)`` by default.
    - ``use_transactions``: wrap save/destroy in a transaction.
    - ``require_modification``: an UPDATE/DELETE touching no row raises
      :class:`~sqlweave_core.primitives.exceptions.NoExistingObjectError`.

    Assigning a field marks it changed; an update writes only changed
    columns.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    __table__: ClassVar[str | None] = None
    __primary_key__: ClassVar[tuple[str, ...]] = ("id",)
    __hooks__: ClassVar[LayeredHookRegistry] = LayeredHookRegistry()

    use_transactions: ClassVar[bool] = True
    require_modification: ClassVar[bool] = False

    _state: PersistenceState = PrivateAttr(default=PersistenceState.NEW)
    _changed: set[str] = PrivateAttr(default_factory=set)
    _errors: ValidationResult = PrivateAttr(default_factory=ValidationResult)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        hooks = cls.__hooks__.copy()
        own = {
            stage: getattr(cls, stage.value)
            for stage in HookStage
            if stage.value in cls.__dict__
        }
        if own:
            hooks.add_layer(HookLayer.from_source(own, name=cls.__qualname__))
        cls.__hooks__ = hooks

    def model_post_init(self, __context: Any) -> None:
        context = __context if isinstance(__context, Mapping) else {}
        if context.get(REVALIDATION_CONTEXT_KEY):
            return
        if context.get(LOADED_CONTEXT_KEY):
            self._state = PersistenceState.PERSISTED
        type(self).__hooks__.run_sync(HookStage.AFTER_INITIALIZE, self)
        self._changed.clear()

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        if name in type(self).model_fields:
            self._changed.add(name)

    # ── Class-level API ──────────────────────────────────────────

    @classmethod
    def plugin(cls, source: Any, *, name: str | None = None) -> None:
        """
        Apply a hook plugin to this class (see :meth:`HookLayer.from_source`).

        Subclasses copy their parent's layers when they are defined, so a
        plugin applied later does not reach existing subclasses.
        """
        cls.__hooks__.add_layer(HookLayer.from_source(source, name))

    @classmethod
    def table_name(cls) -> str:
        if not cls.__table__:
            raise TypeError(f"{cls.__name__} does not declare __table__")
        return cls.__table__

    @classmethod
    def from_row(cls: type[R], row: Mapping[str, Any]) -> R:
        """A persisted record built from a fetched row; unknown columns are ignored."""
        return cls.model_validate(dict(row), context={LOADED_CONTEXT_KEY: True})

    # ── State ────────────────────────────────────────────────────

    @property
    def state(self) -> PersistenceState:
        return self._state

    @property
    def is_new(self) -> bool:
        return self._state is PersistenceState.NEW

    @property
    def changed_columns(self) -> tuple[str, ...]:
        """Assigned fields since the last save, in declaration order."""
        return tuple(name for name in type(self).model_fields if name in self._changed)

    @property
    def errors(self) -> ValidationResult:
        """Errors collected by the last validation run."""
        return self._errors

    def primary_key(self, operation: str = "update") -> dict[str, Any]:
        key = {name: getattr(self, name) for name in type(self).__primary_key__}
        if any(value is None for value in key.values()):
            raise InvalidRecordStateError(operation, "missing primary key")
        return key

    def column_values(self, columns: Iterable[str] | None = None) -> dict[str, Any]:
        include = set(type(self).model_fields if columns is None else columns)
        return self.model_dump(include=include)

    def insert_values(self) -> dict[str, Any]:
        """Every column, without primary key columns that are still None."""
        values = self.column_values()
        for name in type(self).__primary_key__:
            if values.get(name) is None:
                values.pop(name, None)
        return values

    def mark_persisted(self) -> None:
        self._state = PersistenceState.PERSISTED
        self._changed.clear()

    def mark_destroyed(self) -> None:
        self._state = PersistenceState.DESTROYED

    def _snapshot(self) -> tuple[PersistenceState, set[str], dict[str, Any]]:
        key = {name: getattr(self, name) for name in type(self).__primary_key__}
        return self._state, set(self._changed), key

    def _restore(
        self,
        snapshot: tuple[PersistenceState, set[str], dict[str, Any]],
    ) -> None:
        state, changed, key = snapshot
        self.__dict__.update(key)
        self._state = state
        self._changed = set(changed)

    # ── Hook helpers ─────────────────────────────────────────────

    def cancel_action(self, reason: str | None = None) -> NoReturn:
        """Halt the running before-hook stage from inside a hook."""
        raise HookAbortedError(None, reason)

    def validate_record(self) -> None:
        """Business rules; add to :attr:`errors`. Called after field validation."""
