"""Schema registry - compiles and caches entity metadata per class.

Each entity class is compiled once, on its first construction: its
managed properties are discovered and its guard and cast policies are
computed against the class's own fillable/guarded/casts configuration.
The result is immutable and shared read-only by every instance.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from fluent_model.adapters.model import Model
from fluent_model.core.config import ModelConfig
from fluent_model.mapping.casts import compile_casts
from fluent_model.mapping.discovery import discover_schema, strip_class_defaults
from fluent_model.mapping.guards import compile_guards
from fluent_model.mapping.plan import ALL_GUARDED, CastPolicy, EntitySchema, GuardPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledEntity:
    """Everything computed once for an entity class."""

    schema: EntitySchema
    config: ModelConfig
    guards: GuardPolicy
    casts: CastPolicy


def compile_entity(model_class: type, schema: EntitySchema) -> CompiledEntity:
    """Compile the guard and cast policies of a registered schema."""
    config = ModelConfig.for_model(model_class)
    guards = compile_guards(
        schema.properties,
        config,
        fillable=getattr(model_class, "fillable", ()),
        guarded=getattr(model_class, "guarded", ALL_GUARDED),
        class_fillable=schema.class_fillable,
        class_guarded=schema.class_guarded,
    )
    casts = compile_casts(schema.properties, config)
    return CompiledEntity(schema=schema, config=config, guards=guards, casts=casts)


class SchemaRegistry:
    """Memoized per-class entity metadata.

    Compilation runs under a lock so concurrent first constructions of
    the same class reflect over it only once.

    Args:
        entity_base: Base class of entities; properties typed as one of
                     its subclasses are relations and never managed.
    """

    def __init__(self, entity_base: type | None = None) -> None:
        self._entity_base = entity_base
        self._entities: dict[type, CompiledEntity] = {}
        self._lock = threading.Lock()

    def get(self, model_class: type) -> CompiledEntity:
        """Return the compiled metadata of ``model_class``, compiling it if needed.

        Raises:
            ConfigurationError: If the class's metadata is malformed.
        """
        compiled = self._entities.get(model_class)
        if compiled is not None:
            return compiled

        with self._lock:
            compiled = self._entities.get(model_class)
            if compiled is None:
                schema = discover_schema(model_class, self._entity_base)
                compiled = compile_entity(model_class, schema)
                self._entities[model_class] = compiled
                logger.debug(
                    "Compiled %s: fillable=%s guarded=%s casts=%s",
                    model_class.__name__,
                    list(compiled.guards.fillable),
                    list(compiled.guards.guarded),
                    dict(compiled.casts.casts),
                )
            return compiled

    def register(self, schema: EntitySchema) -> CompiledEntity:
        """Register an explicitly built schema, replacing any discovered one."""
        compiled = compile_entity(schema.target_class, schema)
        with self._lock:
            strip_class_defaults(schema.target_class, schema.properties)
            self._entities[schema.target_class] = compiled
        return compiled

    def has(self, model_class: type) -> bool:
        """Check if a class has been compiled or registered."""
        return model_class in self._entities

    def forget(self, model_class: type) -> None:
        """Drop the cached metadata of a class."""
        with self._lock:
            self._entities.pop(model_class, None)

    @property
    def entity_classes(self) -> list[type]:
        """Registered classes, sorted by name."""
        return sorted(self._entities, key=lambda cls: cls.__qualname__)

    def __len__(self) -> int:
        """Number of compiled entity classes."""
        return len(self._entities)


default_registry = SchemaRegistry(Model)
