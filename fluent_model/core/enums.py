"""Enumerations shared across the package."""

from __future__ import annotations

from enum import Enum


class TypeKind(Enum):
    """Base kind of a declared property type."""

    PRIMITIVE = "primitive"
    STRUCTURED = "structured"
    TEMPORAL = "temporal"
    ENTITY = "entity"


class SyncState(Enum):
    """Lifecycle state of a bound entity instance."""

    CONSTRUCTING = "constructing"
    HYDRATED = "hydrated"
    MUTATING = "mutating"
