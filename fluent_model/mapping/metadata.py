"""Declarative markers for entity classes and properties.

Property-level markers are attached with ``typing.Annotated``::

    price: Annotated[Decimal, AsDecimal(2)]
    secret: Annotated[str, Guarded()]

Class-level Fillable/Guarded markers are passed as class keyword
arguments::

    class Product(FluentModel, fillable=Fillable(Fillable.INCLUDE_DATES)):
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag
from typing import Any, ClassVar

CAST_SEPARATOR = ":"


def _join_tag(*parts: Any) -> str:
    return CAST_SEPARATOR.join(str(part) for part in parts if part is not None)


# --- Casts ---


class CastMarker:
    """Base for markers that override a property's inferred cast type.

    ``as_type`` may return ``None`` to keep the natively inferred type.
    """

    def as_type(self) -> str | None:
        raise NotImplementedError


@dataclass(frozen=True)
class Cast(CastMarker):
    """Explicit cast to the given type tag."""

    type: str

    def as_type(self) -> str:
        return self.type


@dataclass(frozen=True)
class AsDate(CastMarker):
    """Cast to ``datetime``, optionally with a format modifier."""

    TYPE_NAME: ClassVar[str] = "datetime"

    modifier: str | None = None

    def as_type(self) -> str:
        return _join_tag(self.TYPE_NAME, self.modifier)


@dataclass(frozen=True)
class AsDecimal(CastMarker):
    """Cast to ``decimal`` with a fixed number of places."""

    TYPE_NAME: ClassVar[str] = "decimal"

    precision: int | None = 2

    def as_type(self) -> str:
        return _join_tag(self.TYPE_NAME, self.precision)


# --- Guards ---


class FillableFlag(IntFlag):
    """Inclusion flags for a class-level Fillable marker."""

    NONE = 0
    INCLUDE_PRIMARY_KEY = 1
    INCLUDE_DATES = 2
    INCLUDE_ALL = INCLUDE_PRIMARY_KEY | INCLUDE_DATES


@dataclass(frozen=True)
class Fillable:
    """Mark a property, or every managed property of a class, as mass-assignable.

    At class level the primary key and the timestamp-role columns are
    excluded unless INCLUDE_PRIMARY_KEY / INCLUDE_DATES are passed. A
    property-level Guarded marker always wins over a class-level Fillable.

    At property level the flags have no effect; the property is added to
    the fillable list and removed from an explicit guarded list.
    """

    INCLUDE_PRIMARY_KEY: ClassVar[FillableFlag] = FillableFlag.INCLUDE_PRIMARY_KEY
    INCLUDE_DATES: ClassVar[FillableFlag] = FillableFlag.INCLUDE_DATES
    INCLUDE_ALL: ClassVar[FillableFlag] = FillableFlag.INCLUDE_ALL

    flags: int = FillableFlag.NONE

    def includes_primary_key(self) -> bool:
        return (self.flags & FillableFlag.INCLUDE_PRIMARY_KEY) != 0

    def includes_dates(self) -> bool:
        return (self.flags & FillableFlag.INCLUDE_DATES) != 0


@dataclass(frozen=True)
class Guarded:
    """Mark a property, or a whole class, as not mass-assignable.

    At class level the guarded list is reset to ``["*"]``. At property
    level the property is removed from fillable and appended to guarded,
    unless guarded is already ``["*"]``.
    """


# --- Relations ---


@dataclass(frozen=True)
class Relation:
    """Mark a property as a relationship; it is never managed."""

    related: type | None = None


class BelongsTo(Relation):
    pass


class HasOne(Relation):
    pass


class HasMany(Relation):
    pass


class BelongsToMany(Relation):
    pass


GuardMarker = Fillable | Guarded
