"""Managed property discovery.

Reads the annotations an entity class declares itself and registers
them through the schema builder. Names contributed by a mixin, private
names, ClassVars, untyped names and relations are never managed.
"""

from __future__ import annotations

import inspect
import logging
import typing
from collections.abc import Iterable
from typing import Any, ClassVar, get_origin

from fluent_model.core.exceptions import UnresolvableTypeError
from fluent_model.mapping.builder import SchemaBuilder, schema
from fluent_model.mapping.metadata import Fillable, Guarded
from fluent_model.mapping.plan import MISSING, EntitySchema, ManagedProperty

logger = logging.getLogger(__name__)

# Class-level defaults are moved here so an unset instance attribute
# never falls back to the class value.
_DEFAULTS_ATTR = "__fluent_defaults__"
CLASS_FILLABLE_ATTR = "__fluent_fillable__"
CLASS_GUARDED_ATTR = "__fluent_guarded__"


def _own_annotation_names(cls: type) -> list[str]:
    try:
        return list(inspect.get_annotations(cls))
    except NameError as e:
        raise UnresolvableTypeError(cls.__name__, str(e)) from e


def _mixin_annotation_names(cls: type, entity_base: type | None) -> set[str]:
    """Names annotated by non-entity bases (mixins) of ``cls``."""
    names: set[str] = set()
    for base in cls.__mro__[1:]:
        if base is object:
            continue
        if entity_base is not None and issubclass(base, entity_base):
            continue
        try:
            names.update(inspect.get_annotations(base))
        except NameError as e:
            raise UnresolvableTypeError(base.__name__, str(e)) from e
    return names


def _is_class_var(annotation: Any) -> bool:
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _captured_defaults(cls: type) -> dict[str, Any]:
    captured = cls.__dict__.get(_DEFAULTS_ATTR)
    if captured is None:
        captured = {}
        setattr(cls, _DEFAULTS_ATTR, captured)
    return captured


def _class_default(cls: type, name: str, captured: dict[str, Any]) -> Any:
    if name in captured:
        return captured[name]
    value = cls.__dict__.get(name, MISSING)
    if value is MISSING or inspect.isroutine(value) or isinstance(value, property):
        return MISSING
    return value


def strip_class_defaults(cls: type, properties: Iterable[ManagedProperty]) -> None:
    """Move plain class values of managed properties into the captured defaults.

    Afterwards reading an unset managed property on an instance raises
    AttributeError instead of returning the class value.
    """
    captured = _captured_defaults(cls)
    for prop in properties:
        value = cls.__dict__.get(prop.name, MISSING)
        if value is MISSING or inspect.isroutine(value) or isinstance(value, property):
            continue
        captured[prop.name] = value
        delattr(cls, prop.name)


def _builder_for(cls: type, entity_base: type | None) -> SchemaBuilder:
    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        raise UnresolvableTypeError(cls.__name__, str(e)) from e

    builder = schema(cls, entity_base)

    class_fillable = cls.__dict__.get(CLASS_FILLABLE_ATTR)
    if class_fillable is not None:
        builder.fillable(class_fillable)
    class_guarded = cls.__dict__.get(CLASS_GUARDED_ATTR)
    if class_guarded is not None:
        builder.guarded(class_guarded)

    mixin_names = _mixin_annotation_names(cls, entity_base)
    captured = _captured_defaults(cls)

    for name in _own_annotation_names(cls):
        if name.startswith("_") or name in mixin_names:
            continue
        annotation = hints.get(name)
        if annotation is None or annotation is Any or _is_class_var(annotation):
            logger.debug("Skipping unmanaged property %s.%s", cls.__name__, name)
            continue
        builder.field(name, annotation, default=_class_default(cls, name, captured))

    return builder


def discover_schema(cls: type, entity_base: type | None = None) -> EntitySchema:
    """Build the EntitySchema of ``cls`` from its own annotations.

    Args:
        cls: The concrete entity class.
        entity_base: Base class of entities; properties typed as a subclass
                     are relations.

    Raises:
        UnresolvableTypeError: If the annotations cannot be evaluated.
        ConfigurationError: If a marker is malformed.
    """
    result = _builder_for(cls, entity_base).build()
    strip_class_defaults(cls, result.properties)

    logger.debug(
        "Discovered %d managed properties on %s: %s",
        len(result.properties),
        cls.__name__,
        ", ".join(result.names),
    )
    return result


def discover(cls: type, entity_base: type | None = None) -> tuple[ManagedProperty, ...]:
    """Ordered managed properties of ``cls``, in declaration order."""
    return discover_schema(cls, entity_base).properties


def class_markers(fillable: Any, guarded: Any) -> tuple[Fillable | None, Guarded | None]:
    """Normalize class keyword arguments into class-level markers."""
    if fillable is True:
        fillable = Fillable()
    elif isinstance(fillable, int) and not isinstance(fillable, bool):
        fillable = Fillable(fillable)
    elif fillable is False:
        fillable = None
    if guarded is True:
        guarded = Guarded()
    elif guarded is False:
        guarded = None
    return fillable, guarded
