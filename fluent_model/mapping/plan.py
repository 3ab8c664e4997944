"""Compiled entity metadata.

Frozen dataclasses computed once per entity class and shared by every
instance of that class.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from fluent_model.core.enums import TypeKind
from fluent_model.mapping.metadata import CastMarker, Fillable, Guarded

ALL_GUARDED: tuple[str, ...] = ("*",)


class _Missing:
    """Sentinel for 'no default value'."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class DeclaredType:
    """A property's declared type, with ``Optional`` unwrapped."""

    name: str
    nullable: bool
    kind: TypeKind
    python_type: Any = None


@dataclass(frozen=True)
class ManagedProperty:
    """One entity property kept in sync with the attribute store."""

    name: str
    type: DeclaredType
    default: Any = MISSING
    casts: tuple[CastMarker, ...] = ()
    guard: Fillable | Guarded | None = None
    is_relation: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def allows_null(self) -> bool:
        return self.type.nullable


@dataclass(frozen=True)
class GuardPolicy:
    """Final fillable and guarded lists for an entity class."""

    fillable: tuple[str, ...] = ()
    guarded: tuple[str, ...] = ALL_GUARDED

    @property
    def is_all_guarded(self) -> bool:
        return self.guarded == ALL_GUARDED


@dataclass(frozen=True)
class CastPolicy:
    """Property name to cast type-tag mapping for an entity class."""

    casts: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def merged_into(self, existing: Mapping[str, Any]) -> dict[str, Any]:
        """Layer these casts on top of an entity's existing cast configuration."""
        return {**existing, **self.casts}


@dataclass(frozen=True)
class EntitySchema:
    """Registered metadata of one entity class."""

    target_class: type
    properties: tuple[ManagedProperty, ...] = ()
    class_fillable: Fillable | None = None
    class_guarded: Guarded | None = None

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(prop.name for prop in self.properties)

    def has(self, name: str) -> bool:
        return any(prop.name == name for prop in self.properties)

    def get(self, name: str) -> ManagedProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None
