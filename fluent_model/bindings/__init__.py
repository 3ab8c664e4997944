"""Bindings - keep typed properties in sync with the attribute store."""

from __future__ import annotations

from fluent_model.bindings.engine import PropertyState, SyncEngine
from fluent_model.bindings.properties import FluentModel, HasProperties

__all__ = [
    "HasProperties",
    "FluentModel",
    "SyncEngine",
    "PropertyState",
]
