"""FluentModel exception hierarchy.

Configuration errors are raised when an entity class is first compiled
(its first construction), never deferred to a later mutation. Errors
raised by the host model propagate unchanged.
"""

from __future__ import annotations


class FluentModelError(Exception):
    """Base exception for all FluentModel errors."""


# --- Configuration ---


class ConfigurationError(FluentModelError):
    """Base for entity metadata configuration errors."""


class SchemaCompilationError(ConfigurationError):
    """Raised when an EntitySchema fails validation during build()."""


class UntypedPropertyError(SchemaCompilationError):
    """Raised when a property is registered for management without a type."""

    def __init__(self, entity: str, property_name: str) -> None:
        self.entity = entity
        self.property_name = property_name
        super().__init__(f"Property '{property_name}' on {entity} has no declared type")


class UnresolvableTypeError(ConfigurationError):
    """Raised when the annotations of an entity class cannot be resolved."""

    def __init__(self, entity: str, detail: str) -> None:
        self.entity = entity
        super().__init__(f"Cannot resolve property types of {entity}: {detail}")


class CastDeclarationError(ConfigurationError):
    """Raised when a cast marker does not resolve to a usable type tag."""

    def __init__(self, property_name: str, marker: object) -> None:
        self.property_name = property_name
        self.marker = marker
        super().__init__(
            f"Cast {marker!r} on property '{property_name}' does not resolve to a type tag"
        )


# --- Mapping ---


class MappingError(FluentModelError):
    """Raised when rows cannot be mapped to the requested class."""


# --- Host model ---


class MassAssignmentError(FluentModelError):
    """Raised when fill() receives a key on a totally guarded model."""

    def __init__(self, key: str, model: str) -> None:
        self.key = key
        self.model = model
        super().__init__(
            f"Add [{key}] to fillable property to allow mass assignment on [{model}]"
        )
