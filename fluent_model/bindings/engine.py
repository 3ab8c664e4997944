"""Property/attribute synchronization engine.

One SyncEngine is held by each bound entity. It keeps the entity's typed
instance fields and the host model's attribute store consistent across
construction, bulk replacement (retrieval, refresh), single attribute
assignment and class-cast merging.

State: CONSTRUCTING -> HYDRATED -> MUTATING (transient) -> HYDRATED.
While MUTATING, single attribute assignments are suppressed: the host
has just written the authoritative data itself.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from fluent_model.core.enums import SyncState
from fluent_model.core.registry import CompiledEntity
from fluent_model.mapping.defaults import seed_defaults
from fluent_model.mapping.plan import ManagedProperty

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyState:
    """A managed property and whether the instance currently holds a value."""

    name: str
    initialized: bool


class SyncEngine:
    """Synchronizes an entity's managed properties with its attribute store.

    Args:
        model: The bound entity (a HostModel).
        compiled: The entity class's compiled metadata.
    """

    def __init__(self, model: Any, compiled: CompiledEntity) -> None:
        self._model = model
        self._compiled = compiled
        self._state = SyncState.CONSTRUCTING

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def properties(self) -> tuple[ManagedProperty, ...]:
        return self._compiled.schema.properties

    @property
    def is_suppressed(self) -> bool:
        return self._state is SyncState.MUTATING

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        """Guarded region in which single attribute writes are no-ops."""
        previous = self._state
        self._state = SyncState.MUTATING
        try:
            yield
        finally:
            self._state = previous

    # --- Instance fields ---

    def has(self, name: str) -> bool:
        return self._compiled.schema.has(name)

    def is_initialized(self, name: str) -> bool:
        return name in vars(self._model)

    def _assign(self, name: str, value: Any) -> None:
        object.__setattr__(self._model, name, value)

    def _clear(self, name: str) -> None:
        vars(self._model).pop(name, None)

    def _initialized_names(self) -> list[str]:
        return [prop.name for prop in self.properties if self.is_initialized(prop.name)]

    def managed_properties(self) -> list[PropertyState]:
        """Managed properties in declaration order, with their presence."""
        return [PropertyState(prop.name, self.is_initialized(prop.name)) for prop in self.properties]

    # --- Lifecycle ---

    def prepare(self) -> None:
        """Install guard and cast policies and seed defaults before construction."""
        model = self._model
        guards = self._compiled.guards
        model.set_fillable(list(guards.fillable))
        model.set_guarded(list(guards.guarded))
        model.merge_casts(self._compiled.casts.casts)
        model.attribute_store.update(seed_defaults(self.properties))

    def hydrate(self) -> None:
        """Assign every managed property whose name is in the attribute store.

        A null stored value is skipped for a non-nullable property, which
        stays uninitialized.
        """
        model = self._model
        for prop in self.properties:
            if prop.name not in model.attribute_store:
                continue
            self._assign_from_store(prop)
        if self._state is SyncState.CONSTRUCTING:
            self._state = SyncState.HYDRATED

    def _assign_from_store(self, prop: ManagedProperty) -> None:
        value = self._model.get_attribute(prop.name)
        if value is None and not prop.allows_null:
            logger.debug(
                "Leaving %s.%s uninitialized: stored value is null",
                type(self._model).__name__,
                prop.name,
            )
            return
        self._assign(prop.name, value)

    def set_raw_attributes(
        self,
        attributes: Mapping[str, Any],
        sync: bool,
        base: Callable[[Mapping[str, Any], bool], Any],
    ) -> None:
        """Replace the attribute store, then re-hydrate from it.

        Current property values are cleared first so they never take
        precedence over the freshly loaded attributes.
        """
        for name in self._initialized_names():
            self._clear(name)

        base(attributes, sync)

        with self.suppressed():
            self.hydrate()

    def set_attribute(self, key: str, value: Any, base: Callable[[str, Any], Any]) -> None:
        """Set a single attribute and mirror the stored result into the property."""
        if self.is_suppressed:
            return

        managed = self._compiled.schema.get(key)
        if managed is not None:
            # A stale value would be merged back over the new attribute.
            self._clear(key)

        base(key, value)

        if managed is not None:
            self._assign_from_store(managed)

    def merge_attributes_from_class_casts(
        self,
        base_set: Callable[[str, Any], Any],
        base_merge: Callable[[], None],
    ) -> None:
        """Push current property values into the store, then let the host merge."""
        model = self._model
        for name in self._initialized_names():
            base_set(name, vars(model)[name])
        base_merge()
