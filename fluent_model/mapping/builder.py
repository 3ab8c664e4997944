"""Entity schema registration DSL.

Provides a fluent builder for registering the managed properties of an
entity class. Annotation-based discovery builds its result through the
same builder.
"""

from __future__ import annotations

import datetime
import inspect
import types
from typing import Annotated, Any, Union, get_args, get_origin

from fluent_model.core.enums import TypeKind
from fluent_model.core.exceptions import (
    CastDeclarationError,
    SchemaCompilationError,
    UntypedPropertyError,
)
from fluent_model.mapping.metadata import CastMarker, Fillable, Guarded, Relation
from fluent_model.mapping.plan import MISSING, DeclaredType, EntitySchema, ManagedProperty

STRUCTURED_TYPES: tuple[type, ...] = (list, tuple, set, frozenset)
TEMPORAL_TYPES: tuple[type, ...] = (datetime.datetime, datetime.date, datetime.time)

_MARKER_TYPES = (CastMarker, Fillable, Guarded, Relation)


def _normalize_marker(marker: Any) -> Any:
    """Allow bare marker classes (``Guarded``) in place of instances."""
    if inspect.isclass(marker) and issubclass(marker, _MARKER_TYPES):
        return marker()
    return marker


def _unwrap_annotated(annotation: Any) -> tuple[Any, list[Any]]:
    """Strip ``Annotated`` layers, collecting their metadata in order."""
    metadata: list[Any] = []
    while get_origin(annotation) is Annotated:
        metadata.extend(annotation.__metadata__)
        annotation = annotation.__origin__
    return annotation, metadata


def _type_name(tp: Any) -> str:
    origin = get_origin(tp) or tp
    return getattr(origin, "__name__", None) or repr(origin)


def declared_type(annotation: Any, entity_base: type | None = None) -> tuple[DeclaredType, list[Any]]:
    """Resolve an annotation into a DeclaredType plus any attached markers."""
    annotation, metadata = _unwrap_annotated(annotation)

    nullable = False
    members = [annotation]
    if get_origin(annotation) in (Union, types.UnionType):
        members = []
        for member in get_args(annotation):
            member, inner = _unwrap_annotated(member)
            metadata.extend(inner)
            if member is type(None):
                nullable = True
            else:
                members.append(member)

    if len(members) != 1:
        name = "|".join(_type_name(member) for member in members)
        return DeclaredType(name=name, nullable=nullable, kind=TypeKind.PRIMITIVE), metadata

    base = members[0]
    origin = get_origin(base) or base
    if entity_base is not None and inspect.isclass(origin) and issubclass(origin, entity_base):
        kind = TypeKind.ENTITY
    elif inspect.isclass(origin) and issubclass(origin, STRUCTURED_TYPES):
        kind = TypeKind.STRUCTURED
    elif inspect.isclass(origin) and issubclass(origin, TEMPORAL_TYPES):
        kind = TypeKind.TEMPORAL
    else:
        kind = TypeKind.PRIMITIVE

    return (
        DeclaredType(name=_type_name(base), nullable=nullable, kind=kind, python_type=origin),
        metadata,
    )


def schema(target_class: type, entity_base: type | None = None) -> SchemaBuilder:
    """Entry point for the schema registration DSL.

    Args:
        target_class: The entity class being registered.
        entity_base: Base class of entities; properties typed as one of
                     its subclasses are relations and never managed.

    Returns:
        A builder for chaining property declarations.
    """
    return SchemaBuilder(target_class, entity_base)


class SchemaBuilder:
    """Fluent builder for entity schema definitions."""

    def __init__(self, target_class: type, entity_base: type | None = None) -> None:
        self._target_class = target_class
        self._entity_base = entity_base
        self._class_fillable: Fillable | None = None
        self._class_guarded: Guarded | None = None
        # name, annotation, default, markers
        self._fields: list[tuple[str, Any, Any, list[Any]]] = []

    def fillable(self, flags: int | Fillable = 0) -> SchemaBuilder:
        """Declare the class-level Fillable marker."""
        self._class_fillable = flags if isinstance(flags, Fillable) else Fillable(flags)
        return self

    def guarded(self, marker: Guarded | None = None) -> SchemaBuilder:
        """Declare the class-level Guarded marker."""
        self._class_guarded = marker or Guarded()
        return self

    def field(
        self,
        name: str,
        annotation: Any = None,
        *,
        default: Any = MISSING,
        casts: tuple[CastMarker, ...] | list[CastMarker] = (),
        guard: Fillable | Guarded | None = None,
        relation: bool | Relation = False,
    ) -> SchemaBuilder:
        """Declare a single property."""
        markers: list[Any] = list(casts)
        if guard is not None:
            markers.append(guard)
        if relation:
            markers.append(relation if isinstance(relation, Relation) else Relation())
        self._fields.append((name, annotation, default, markers))
        return self

    def build(self) -> EntitySchema:
        """Compile and validate the declarations into an EntitySchema."""
        entity = self._target_class.__name__
        seen: set[str] = set()
        properties: list[ManagedProperty] = []

        for name, annotation, default, extra in self._fields:
            if name in seen:
                raise SchemaCompilationError(f"Duplicate property '{name}' on {entity}")
            seen.add(name)
            if name.startswith("_"):
                raise SchemaCompilationError(
                    f"Property '{name}' on {entity} is not public and cannot be managed"
                )
            if annotation is None or annotation is Any:
                raise UntypedPropertyError(entity, name)

            declared, metadata = declared_type(annotation, self._entity_base)
            markers = [_normalize_marker(m) for m in [*metadata, *extra]]

            if declared.kind is TypeKind.ENTITY or any(isinstance(m, Relation) for m in markers):
                continue

            casts = tuple(m for m in markers if isinstance(m, CastMarker))
            for cast in casts:
                tag = cast.as_type()
                if tag is not None and (not isinstance(tag, str) or not tag):
                    raise CastDeclarationError(name, cast)

            guard: Fillable | Guarded | None = None
            if any(isinstance(m, Guarded) for m in markers):
                guard = Guarded()
            elif any(isinstance(m, Fillable) for m in markers):
                guard = next(m for m in markers if isinstance(m, Fillable))

            properties.append(
                ManagedProperty(
                    name=name,
                    type=declared,
                    default=default,
                    casts=casts,
                    guard=guard,
                )
            )

        return EntitySchema(
            target_class=self._target_class,
            properties=tuple(properties),
            class_fillable=self._class_fillable,
            class_guarded=self._class_guarded,
        )
