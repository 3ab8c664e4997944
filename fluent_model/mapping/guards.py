"""Fillable/guarded policy compiler.

Folds class-level and property-level Fillable/Guarded markers into the
entity's own fillable and guarded lists. Per property, in order of
precedence:

1. property-level Guarded  -> guarded
2. class-level Fillable, unless the name is excluded -> fillable
3. property-level Fillable -> fillable
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from fluent_model.core.config import ModelConfig
from fluent_model.mapping.metadata import Fillable, Guarded
from fluent_model.mapping.plan import ALL_GUARDED, GuardPolicy, ManagedProperty


def _excluded_by(class_fillable: Fillable, config: ModelConfig) -> set[str]:
    """Names a class-level Fillable leaves out unless its flags include them."""
    excluded: set[str] = set()
    if not class_fillable.includes_primary_key():
        excluded.add(config.primary_key)
    if not class_fillable.includes_dates():
        excluded.update(config.timestamp_columns)
    return excluded


class _GuardLists:
    def __init__(self, fillable: Sequence[str], guarded: Sequence[str]) -> None:
        self.fillable = list(fillable)
        self.guarded = list(guarded)

    @property
    def all_guarded(self) -> bool:
        return tuple(self.guarded) == ALL_GUARDED

    def mark_fillable(self, name: str) -> None:
        if name not in self.fillable:
            self.fillable.append(name)
        if not self.all_guarded and name in self.guarded:
            self.guarded.remove(name)

    def mark_guarded(self, name: str) -> None:
        if name in self.fillable:
            self.fillable.remove(name)
        if not self.all_guarded and name not in self.guarded:
            self.guarded.append(name)

    def policy(self) -> GuardPolicy:
        return GuardPolicy(fillable=tuple(self.fillable), guarded=tuple(self.guarded))


def compile_guards(
    properties: Iterable[ManagedProperty],
    config: ModelConfig,
    fillable: Sequence[str] = (),
    guarded: Sequence[str] = ALL_GUARDED,
    class_fillable: Fillable | None = None,
    class_guarded: Guarded | None = None,
) -> GuardPolicy:
    """Compute the final fillable and guarded lists of an entity class.

    Args:
        properties: Managed properties, in declaration order.
        config: Primary key and timestamp-role names of the entity.
        fillable: The entity's pre-existing fillable list.
        guarded: The entity's pre-existing guarded list.
        class_fillable: Class-level Fillable marker, if any.
        class_guarded: Class-level Guarded marker, if any.

    Returns:
        The compiled GuardPolicy.
    """
    lists = _GuardLists(fillable, guarded)

    if class_guarded is not None:
        lists.guarded = list(ALL_GUARDED)

    excluded = _excluded_by(class_fillable, config) if class_fillable is not None else set()

    for prop in properties:
        if isinstance(prop.guard, Guarded):
            lists.mark_guarded(prop.name)
        elif class_fillable is not None and prop.name not in excluded:
            lists.mark_fillable(prop.name)
        elif isinstance(prop.guard, Fillable):
            lists.mark_fillable(prop.name)

    return lists.policy()
