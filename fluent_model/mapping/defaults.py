"""Default value seeding."""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any

from fluent_model.mapping.plan import ManagedProperty


def seed_defaults(properties: Iterable[ManagedProperty]) -> dict[str, Any]:
    """Map each property with a declared default to a fresh copy of it.

    Mutable defaults are shallow-copied so instances never share them.
    """
    return {prop.name: copy.copy(prop.default) for prop in properties if prop.has_default}
