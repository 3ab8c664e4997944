"""Mapping layer - entity metadata discovery and policy compilation."""

from __future__ import annotations

from fluent_model.mapping.builder import SchemaBuilder, schema
from fluent_model.mapping.casts import compile_casts, resolve_cast_type
from fluent_model.mapping.defaults import seed_defaults
from fluent_model.mapping.discovery import discover, discover_schema
from fluent_model.mapping.guards import compile_guards
from fluent_model.mapping.model import ModelMapper
from fluent_model.mapping.plan import (
    ALL_GUARDED,
    MISSING,
    CastPolicy,
    DeclaredType,
    EntitySchema,
    GuardPolicy,
    ManagedProperty,
)

__all__ = [
    "ModelMapper",
    "SchemaBuilder",
    "schema",
    "discover",
    "discover_schema",
    "compile_guards",
    "compile_casts",
    "resolve_cast_type",
    "seed_defaults",
    "ALL_GUARDED",
    "MISSING",
    "DeclaredType",
    "ManagedProperty",
    "GuardPolicy",
    "CastPolicy",
    "EntitySchema",
]
