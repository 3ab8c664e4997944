"""FluentModel - typed property bindings for attribute-store entities."""

from __future__ import annotations

from fluent_model.adapters.model import Model
from fluent_model.adapters.protocol import HostModel
from fluent_model.bindings import FluentModel, HasProperties, PropertyState, SyncEngine
from fluent_model.core.config import ModelConfig
from fluent_model.core.enums import SyncState, TypeKind
from fluent_model.core.exceptions import (
    CastDeclarationError,
    ConfigurationError,
    FluentModelError,
    MappingError,
    MassAssignmentError,
    SchemaCompilationError,
    UnresolvableTypeError,
    UntypedPropertyError,
)
from fluent_model.core.registry import SchemaRegistry, default_registry
from fluent_model.mapping.builder import schema
from fluent_model.mapping.metadata import (
    AsDate,
    AsDecimal,
    BelongsTo,
    BelongsToMany,
    Cast,
    CastMarker,
    Fillable,
    FillableFlag,
    Guarded,
    HasMany,
    HasOne,
    Relation,
)
from fluent_model.mapping.model import ModelMapper

__all__ = [
    # Models
    "Model",
    "FluentModel",
    "HasProperties",
    "HostModel",
    # Engine
    "SyncEngine",
    "SyncState",
    "PropertyState",
    # Registry
    "SchemaRegistry",
    "default_registry",
    "schema",
    # Config
    "ModelConfig",
    "TypeKind",
    # Markers
    "Cast",
    "CastMarker",
    "AsDate",
    "AsDecimal",
    "Fillable",
    "FillableFlag",
    "Guarded",
    "Relation",
    "BelongsTo",
    "BelongsToMany",
    "HasOne",
    "HasMany",
    # Mapping
    "ModelMapper",
    # Exceptions
    "FluentModelError",
    "ConfigurationError",
    "SchemaCompilationError",
    "UntypedPropertyError",
    "UnresolvableTypeError",
    "CastDeclarationError",
    "MappingError",
    "MassAssignmentError",
]
