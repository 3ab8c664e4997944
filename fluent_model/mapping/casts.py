"""Cast policy compiler.

Infers a cast type-tag for every managed property from its declared
type, letting the first explicit cast marker override the inference.
Timestamp-role properties are left to the host model.
"""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from fluent_model.core.config import ModelConfig
from fluent_model.core.enums import TypeKind
from fluent_model.mapping.plan import CastPolicy, ManagedProperty

_NATIVE_TAGS: dict[type, str] = {
    bool: "boolean",
    int: "integer",
}


def native_cast_type(prop: ManagedProperty) -> str:
    """Cast tag inferred from the declared type alone."""
    declared = prop.type
    if declared.kind is TypeKind.STRUCTURED:
        return "collection"
    if declared.kind is TypeKind.TEMPORAL:
        return "datetime"
    return _NATIVE_TAGS.get(declared.python_type, declared.name)


def resolve_cast_type(prop: ManagedProperty) -> str:
    """Cast tag of a property; the first cast marker wins over inference."""
    if prop.casts:
        tag = prop.casts[0].as_type()
        if tag is not None:
            return tag
    return native_cast_type(prop)


def compile_casts(properties: Iterable[ManagedProperty], config: ModelConfig) -> CastPolicy:
    """Compute the cast mapping of an entity class, timestamp roles excluded."""
    timestamp_columns = set(config.timestamp_columns)
    return CastPolicy(
        casts=MappingProxyType(
            {
                prop.name: resolve_cast_type(prop)
                for prop in properties
                if prop.name not in timestamp_columns
            }
        )
    )
