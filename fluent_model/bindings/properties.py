"""Typed property bindings for host models.

HasProperties is mixed in ahead of a host model class. It lets an entity
declare its persisted fields as annotated attributes and keeps them in
sync with the host's attribute store through a per-instance SyncEngine.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from fluent_model.adapters.model import Model
from fluent_model.bindings.engine import PropertyState, SyncEngine
from fluent_model.core.registry import SchemaRegistry, default_registry
from fluent_model.mapping.discovery import CLASS_FILLABLE_ATTR, CLASS_GUARDED_ATTR, class_markers
from fluent_model.mapping.plan import EntitySchema, ManagedProperty


def _hydrate_on_retrieve(model: Any) -> None:
    model.hydrate_fluent_properties()


class HasProperties:
    """Bind annotated class attributes to the host model's attribute store.

    Class keyword arguments ``fillable`` and ``guarded`` declare the
    class-level Fillable/Guarded markers::

        class Post(FluentModel, fillable=Fillable.INCLUDE_DATES):
            id: int
            title: str
            body: Annotated[str, Guarded()]
    """

    fluent_registry: ClassVar[SchemaRegistry] = default_registry

    def __init_subclass__(cls, *, fillable: Any = None, guarded: Any = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        class_fillable, class_guarded = class_markers(fillable, guarded)
        if class_fillable is not None:
            setattr(cls, CLASS_FILLABLE_ATTR, class_fillable)
        if class_guarded is not None:
            setattr(cls, CLASS_GUARDED_ATTR, class_guarded)
        cls.listen("retrieved", _hydrate_on_retrieve)  # type: ignore[attr-defined]

    def __init__(self, attributes: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        compiled = type(self).fluent_registry.get(type(self))
        self._init_state()  # type: ignore[attr-defined]
        self._fluent = SyncEngine(self, compiled)
        self._fluent.prepare()

        super().__init__(attributes, **kwargs)  # type: ignore[call-arg]

        self._fluent.hydrate()

    @classmethod
    def register_schema(cls, schema: EntitySchema) -> None:
        """Register an explicitly built schema instead of discovering one."""
        cls.fluent_registry.register(schema)

    def get_fluent_properties(self) -> tuple[ManagedProperty, ...]:
        """Managed properties of this entity, in declaration order."""
        return type(self).fluent_registry.get(type(self)).schema.properties

    def has_fluent_property(self, key: str) -> bool:
        return type(self).fluent_registry.get(type(self)).schema.has(key)

    def managed_properties(self) -> list[PropertyState]:
        """Managed properties with whether each currently holds a value."""
        return self._fluent.managed_properties()

    def _is_field(self, name: str) -> bool:
        return self.has_fluent_property(name)

    def __getattr__(self, name: str) -> Any:
        # Only reached when the instance field is absent.
        if not name.startswith("_") and self.has_fluent_property(name):
            raise AttributeError(f"{type(self).__name__}.{name} is not initialized")
        return super().__getattr__(name)  # type: ignore[misc]

    def hydrate_fluent_properties(self) -> None:
        """Hydrate managed properties from the attribute store."""
        self._fluent.hydrate()

    def set_raw_attributes(self, attributes: Mapping[str, Any], sync: bool = False) -> Any:
        self._fluent.set_raw_attributes(
            attributes, sync, super().set_raw_attributes  # type: ignore[misc]
        )
        return self

    def set_attribute(self, key: str, value: Any) -> Any:
        self._fluent.set_attribute(key, value, super().set_attribute)  # type: ignore[misc]
        return self

    def merge_attributes_from_class_casts(self) -> None:
        self._fluent.merge_attributes_from_class_casts(
            super().set_attribute,  # type: ignore[misc]
            super().merge_attributes_from_class_casts,  # type: ignore[misc]
        )


class FluentModel(HasProperties, Model):
    """Model whose annotated attributes are managed typed properties."""
