"""
Layered lifecycle hooks.

Every record class owns a :class:`LayeredHookRegistry`: an ordered list of
:class:`HookLayer` objects, one per contributing source (the body of each
record class in the inheritance chain, then every applied plugin). Layers
are appended as sources are applied, and the registry alone decides the
invocation order of a stage::

    before_*   most recently applied layer first, base-most layer last
    after_*    base-most layer first, most recently applied layer last

So for a base layer ``L1`` and a plugin ``L2`` applied on top of it, a save
runs ``L2.before_save, L1.before_save, <INSERT>, L1.after_save,
L2.after_save``. Hooks never call ``super()``: the chain is the registry.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlweave_core.primitives.exceptions import HookAbortedError

logger = logging.getLogger("sqlweave.lifecycle")

Hook = Callable[[Any], "HookOutcome | None | Awaitable[HookOutcome | None]"]


class HookStage(str, Enum):
    """Named hook points; the value is also the hook method name."""

    AFTER_INITIALIZE = "after_initialize"
    BEFORE_VALIDATION = "before_validation"
    AFTER_VALIDATION = "after_validation"
    BEFORE_SAVE = "before_save"
    AFTER_SAVE = "after_save"
    BEFORE_CREATE = "before_create"
    AFTER_CREATE = "after_create"
    BEFORE_UPDATE = "before_update"
    AFTER_UPDATE = "after_update"
    BEFORE_DESTROY = "before_destroy"
    AFTER_DESTROY = "after_destroy"
    AFTER_COMMIT = "after_commit"
    AFTER_ROLLBACK = "after_rollback"

    @property
    def is_before(self) -> bool:
        return self.value.startswith("before_")


class HookOutcome(str, Enum):
    """What a hook returns. ``None`` means ``PROCEED``."""

    PROCEED = "PROCEED"
    HALT = "HALT"


@dataclass(frozen=True)
class HookLayer:
    """The hooks one source contributes, keyed by stage."""

    name: str
    hooks: Mapping[HookStage, tuple[Hook, ...]] = field(default_factory=dict)

    def for_stage(self, stage: HookStage) -> tuple[Hook, ...]:
        return self.hooks.get(stage, ())

    @property
    def stages(self) -> tuple[HookStage, ...]:
        return tuple(stage for stage in HookStage if stage in self.hooks)

    @classmethod
    def from_source(cls, source: Any, name: str | None = None) -> HookLayer:
        """
        Build a layer from a plugin.

        ``source`` is either a mapping of stage (or stage name) to a hook or
        a list of hooks, or any object whose stage-named attributes are
        callables taking the record. A class is instantiated first.

        Raises:
            ValueError: A mapping key is not a stage name.
            TypeError: A hook is not callable.
        """
        layer_name = name or getattr(source, "__name__", None) or type(source).__name__
        if isinstance(source, type):
            source = source()

        hooks: dict[HookStage, tuple[Hook, ...]] = {}
        if isinstance(source, Mapping):
            for key, found in source.items():
                try:
                    stage = HookStage(key)
                except ValueError:
                    raise ValueError(
                        f"Unknown hook stage {key!r} in layer '{layer_name}'"
                    ) from None
                hooks[stage] = _as_hooks(found, stage)
        else:
            for stage in HookStage:
                found = getattr(source, stage.value, None)
                if found is not None:
                    hooks[stage] = _as_hooks(found, stage)
        return cls(name=layer_name, hooks=hooks)


def _as_hooks(found: Any, stage: HookStage) -> tuple[Hook, ...]:
    candidates = (found,) if callable(found) else tuple(found)
    for hook in candidates:
        if not callable(hook):
            raise TypeError(f"Hook for {stage.value} is not callable: {hook!r}")
    return candidates


class LayeredHookRegistry:
    """Ordered hook layers of one record class."""

    def __init__(self, layers: Iterable[HookLayer] = ()) -> None:
        self._layers: list[HookLayer] = list(layers)

    @property
    def layers(self) -> tuple[HookLayer, ...]:
        return tuple(self._layers)

    def add_layer(self, layer: HookLayer) -> None:
        """Apply ``layer`` on top of the existing ones."""
        self._layers.append(layer)
        logger.debug(
            "Applied hook layer '%s' (%s)",
            layer.name,
            ", ".join(stage.value for stage in layer.stages) or "no hooks",
        )

    def copy(self) -> LayeredHookRegistry:
        return LayeredHookRegistry(self._layers)

    def hooks_for(self, stage: HookStage) -> list[Hook]:
        """Hooks of ``stage`` in invocation order."""
        layers = reversed(self._layers) if stage.is_before else iter(self._layers)
        return [hook for layer in layers for hook in layer.for_stage(stage)]

    async def run(self, stage: HookStage, record: Any) -> HookOutcome:
        """
        Run the hooks of ``stage`` against ``record``.

        The first ``HALT`` from a before-hook stops the chain and is
        returned. ``HALT`` from any other stage is ignored. A
        :class:`HookAbortedError` raised through ``record.cancel_action()``
        is re-raised naming ``stage``.
        """
        for hook in self.hooks_for(stage):
            try:
                result = hook(record)
                if inspect.isawaitable(result):
                    result = await result
            except HookAbortedError as exc:
                if exc.stage is None:
                    raise HookAbortedError(stage.value, exc.reason) from None
                raise
            if result is HookOutcome.HALT:
                if stage.is_before:
                    logger.debug("%s halted by %r", stage.value, hook)
                    return HookOutcome.HALT
                logger.warning("Ignoring HALT returned by %s hook %r", stage.value, hook)
        return HookOutcome.PROCEED

    def run_sync(self, stage: HookStage, record: Any) -> None:
        """Run informational hooks that cannot be awaited (``after_initialize``)."""
        for hook in self.hooks_for(stage):
            result = hook(record)
            if inspect.isawaitable(result):
                close = getattr(result, "close", None)
                if close is not None:
                    close()
                raise TypeError(f"{stage.value} hooks must be synchronous: {hook!r}")
