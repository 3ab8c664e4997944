"""Host model protocol.

The binding layer only talks to its host entity base through this
interface. Model implements it; any other attribute-store base class
can be bound by implementing the same methods.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class HostModel(Protocol):
    """Attribute-store entity protocol consumed by the synchronization engine."""

    @property
    def attribute_store(self) -> dict[str, Any]:
        """The raw name -> value store, inspectable without side effects."""
        ...

    def get_attribute(self, key: str) -> Any:
        """Cast value of an attribute, or None if it is not set."""
        ...

    def set_attribute(self, key: str, value: Any) -> Any:
        """Set a single attribute; returns the model."""
        ...

    def set_raw_attributes(self, attributes: Mapping[str, Any], sync: bool = False) -> Any:
        """Replace the attribute store; returns the model."""
        ...

    def merge_attributes_from_class_casts(self) -> None:
        """Write class-cast values back into the attribute store."""
        ...

    def set_fillable(self, fillable: list[str]) -> Any:
        """Replace the instance's fillable list."""
        ...

    def set_guarded(self, guarded: list[str]) -> Any:
        """Replace the instance's guarded list."""
        ...

    def get_casts(self) -> dict[str, Any]:
        """The instance's cast configuration."""
        ...

    def merge_casts(self, casts: Mapping[str, Any]) -> Any:
        """Layer casts on top of the instance's cast configuration."""
        ...

    @classmethod
    def listen(cls, event: str, callback: Callable[[Any], None]) -> None:
        """Register a model event listener."""
        ...
