"""Reference host model - an in-process attribute-store entity base.

Model keeps an entity's data in a generic attribute store and exposes the
lifecycle operations the binding layer interposes on: single and bulk
attribute assignment, class-cast merging and the ``retrieved`` event. It
applies mass-assignment rules (fillable/guarded), value casts on read,
and tracks original, dirty and changed attributes. It performs no I/O.
"""

from __future__ import annotations

import datetime
import json
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any, ClassVar

from fluent_model.core.exceptions import MassAssignmentError

ALL_GUARDED: tuple[str, ...] = ("*",)


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, (int, float)):
        return datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
    return datetime.datetime.fromisoformat(str(value))


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


def _to_decimal(value: Any, places: str) -> Decimal:
    result = Decimal(str(value))
    if places:
        result = result.quantize(Decimal(1).scaleb(-int(places)))
    return result


def _decode_json(value: Any) -> Any:
    return json.loads(value) if isinstance(value, (str, bytes)) else value


# cast name -> (value, modifier) -> cast value
_CASTERS: dict[str, Callable[[Any, str], Any]] = {
    "int": lambda v, _: int(v),
    "integer": lambda v, _: int(v),
    "bool": lambda v, _: bool(v),
    "boolean": lambda v, _: bool(v),
    "float": lambda v, _: float(v),
    "double": lambda v, _: float(v),
    "real": lambda v, _: float(v),
    "str": lambda v, _: str(v),
    "string": lambda v, _: str(v),
    "decimal": _to_decimal,
    "collection": lambda v, _: list(_decode_json(v)),
    "array": lambda v, _: _decode_json(v),
    "json": lambda v, _: _decode_json(v),
    "dict": lambda v, _: dict(_decode_json(v)),
    "datetime": lambda v, _: _to_datetime(v),
    "date": lambda v, _: _to_date(v),
}


def cast_value(cast_type: str, value: Any) -> Any:
    """Convert a raw stored value by cast tag; unknown tags pass through."""
    if value is None:
        return None
    name, _, modifier = cast_type.partition(":")
    caster = _CASTERS.get(name)
    if caster is None:
        return value
    return caster(value, modifier)


def _is_class_cast(cast: Any) -> bool:
    return hasattr(cast, "get") and hasattr(cast, "set") and not isinstance(cast, str)


def _is_value_object(value: Any) -> bool:
    return value is not None and not isinstance(value, (str, bytes, int, float, bool))


class Model:
    """Base class for attribute-store entities.

    Class-level configuration::

        primary_key  name of the primary key attribute
        CREATED_AT   created-at column, or None
        UPDATED_AT   updated-at column, or None
        DELETED_AT   soft-delete column, or None
        fillable     mass-assignable attribute names
        guarded      non-mass-assignable names; ["*"] guards everything
        casts        attribute name -> cast tag or class cast object
        attributes   default attribute values

    A class cast object implements ``get(model, key, value, attributes)``
    and ``set(model, key, value, attributes)``; ``set`` returns either a
    plain value or a mapping of attributes to store.
    """

    primary_key: ClassVar[str] = "id"
    CREATED_AT: ClassVar[str | None] = "created_at"
    UPDATED_AT: ClassVar[str | None] = "updated_at"
    DELETED_AT: ClassVar[str | None] = "deleted_at"

    fillable: ClassVar[list[str]] = []
    guarded: ClassVar[list[str]] = list(ALL_GUARDED)
    casts: ClassVar[dict[str, Any]] = {}
    attributes: ClassVar[dict[str, Any]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._listeners = {}

    def __init__(self, attributes: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._init_state()
        self.sync_original()
        self.fill({**(attributes or {}), **kwargs})

    def _init_state(self) -> None:
        """Create the per-instance stores, unless a subclass already did."""
        if "_attributes" in self.__dict__:
            return
        cls = type(self)
        self._attributes: dict[str, Any] = dict(cls.attributes)
        self._original: dict[str, Any] = {}
        self._changes: dict[str, Any] = {}
        self._fillable: list[str] = list(cls.fillable)
        self._guarded: list[str] = list(cls.guarded)
        self._casts: dict[str, Any] = dict(cls.casts)
        self._class_cast_cache: dict[str, Any] = {}
        self._exists = False

    # --- Dynamic attribute access ---

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self.__dict__.get("_attributes", {}) or _is_class_cast(
            self.__dict__.get("_casts", {}).get(name)
        ):
            return self.get_attribute(name)
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if (
            name.startswith("_")
            or isinstance(getattr(type(self), name, None), property)
            or self._is_field(name)
        ):
            object.__setattr__(self, name, value)
        else:
            self.set_attribute(name, value)

    def _is_field(self, name: str) -> bool:
        """Whether ``name`` is a plain instance field rather than an attribute."""
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._attributes!r})"

    # --- Events ---

    _listeners: ClassVar[dict[str, list[Callable[[Any], None]]]] = {}

    @classmethod
    def listen(cls, event: str, callback: Callable[[Any], None]) -> None:
        """Register a model event listener on this exact class."""
        cls._listeners.setdefault(event, []).append(callback)

    @classmethod
    def retrieved(cls, callback: Callable[[Any], None]) -> None:
        """Register a listener fired after a model is loaded from storage."""
        cls.listen("retrieved", callback)

    def fire_model_event(self, event: str) -> None:
        for callback in type(self)._listeners.get(event, []):
            callback(self)

    # --- Configuration ---

    def get_key_name(self) -> str:
        return type(self).primary_key

    def get_fillable(self) -> list[str]:
        return list(self._fillable)

    def set_fillable(self, fillable: list[str]) -> Model:
        self._fillable = list(fillable)
        return self

    def get_guarded(self) -> list[str]:
        return list(self._guarded)

    def set_guarded(self, guarded: list[str]) -> Model:
        self._guarded = list(guarded)
        return self

    def get_casts(self) -> dict[str, Any]:
        return dict(self._casts)

    def merge_casts(self, casts: Mapping[str, Any]) -> Model:
        self._casts = {**self._casts, **casts}
        return self

    def get_dates(self) -> list[str]:
        """Timestamp-role columns, cast to datetime unless configured otherwise."""
        cls = type(self)
        return [name for name in (cls.CREATED_AT, cls.UPDATED_AT, cls.DELETED_AT) if name]

    def get_cast_type(self, key: str) -> Any:
        cast = self._casts.get(key)
        if cast is None and key in self.get_dates():
            return "datetime"
        return cast

    # --- Mass assignment ---

    def is_guarded(self, key: str) -> bool:
        if not self._guarded:
            return False
        return tuple(self._guarded) == ALL_GUARDED or key in self._guarded

    def is_fillable(self, key: str) -> bool:
        if key in self._fillable:
            return True
        if self.is_guarded(key):
            return False
        return not self._fillable and not key.startswith("_")

    def totally_guarded(self) -> bool:
        return not self._fillable and tuple(self._guarded) == ALL_GUARDED

    def fill(self, attributes: Mapping[str, Any]) -> Model:
        """Mass-assign attributes, honouring fillable and guarded.

        Raises:
            MassAssignmentError: If the model is totally guarded.
        """
        totally_guarded = self.totally_guarded()
        for key, value in attributes.items():
            if self.is_fillable(key):
                self.set_attribute(key, value)
            elif totally_guarded:
                raise MassAssignmentError(key, type(self).__name__)
        return self

    def force_fill(self, attributes: Mapping[str, Any]) -> Model:
        """Assign attributes without mass-assignment checks."""
        for key, value in attributes.items():
            self.set_attribute(key, value)
        return self

    # --- Attribute store ---

    @property
    def attribute_store(self) -> dict[str, Any]:
        """The raw attribute store, without merging class casts."""
        return self._attributes

    @property
    def exists(self) -> bool:
        return self._exists

    @exists.setter
    def exists(self, value: bool) -> None:
        self._exists = value

    def get_attribute(self, key: str) -> Any:
        """Cast value of an attribute, or None if it is not set."""
        attributes = self.get_attributes()
        cast = self.get_cast_type(key)
        if _is_class_cast(cast):
            return self._get_class_castable_attribute(key, cast, attributes)
        if key not in attributes:
            return None
        if cast is None:
            return attributes[key]
        return cast_value(cast, attributes[key])

    def _get_class_castable_attribute(self, key: str, cast: Any, attributes: dict[str, Any]) -> Any:
        if key in self._class_cast_cache:
            return self._class_cast_cache[key]
        value = cast.get(self, key, attributes.get(key), attributes)
        if _is_value_object(value):
            self._class_cast_cache[key] = value
        return value

    def set_attribute(self, key: str, value: Any) -> Model:
        cast = self._casts.get(key)
        if _is_class_cast(cast):
            self._set_class_castable_attribute(key, cast, value)
        else:
            self._attributes[key] = value
        return self

    def _set_class_castable_attribute(self, key: str, cast: Any, value: Any) -> None:
        stored = cast.set(self, key, value, self._attributes)
        if isinstance(stored, Mapping):
            self._attributes.update(stored)
        else:
            self._attributes[key] = stored
        if _is_value_object(value):
            self._class_cast_cache[key] = value
        else:
            self._class_cast_cache.pop(key, None)

    def set_raw_attributes(self, attributes: Mapping[str, Any], sync: bool = False) -> Model:
        """Replace the attribute store wholesale. No checking is done."""
        self._attributes = dict(attributes)
        self._class_cast_cache = {}
        if sync:
            self.sync_original()
        return self

    def merge_attributes_from_class_casts(self) -> None:
        """Write cached class-cast values back into the attribute store."""
        for key, value in self._class_cast_cache.items():
            stored = self._casts[key].set(self, key, value, self._attributes)
            if isinstance(stored, Mapping):
                self._attributes.update(stored)
            else:
                self._attributes[key] = stored

    def get_attributes(self) -> dict[str, Any]:
        self.merge_attributes_from_class_casts()
        return dict(self._attributes)

    # --- Change tracking ---

    def sync_original(self) -> Model:
        self._original = self.get_attributes()
        return self

    def sync_changes(self) -> Model:
        self._changes = self.get_dirty()
        return self

    def get_original(self, key: str | None = None) -> Any:
        if key is None:
            return dict(self._original)
        return self._original.get(key)

    def _original_is_equivalent(self, key: str) -> bool:
        if key not in self._original:
            return False
        attribute = self._attributes.get(key)
        original = self._original[key]
        if attribute == original:
            return True
        if attribute is None or original is None:
            return False
        cast = self.get_cast_type(key)
        if cast is None or _is_class_cast(cast):
            return False
        return cast_value(cast, attribute) == cast_value(cast, original)

    def get_dirty(self) -> dict[str, Any]:
        attributes = self.get_attributes()
        return {
            key: value for key, value in attributes.items() if not self._original_is_equivalent(key)
        }

    def is_dirty(self, key: str | None = None) -> bool:
        dirty = self.get_dirty()
        return bool(dirty) if key is None else key in dirty

    def get_changes(self) -> dict[str, Any]:
        return dict(self._changes)

    def was_changed(self, key: str | None = None) -> bool:
        return bool(self._changes) if key is None else key in self._changes

    # --- Lifecycle ---

    def save(self) -> bool:
        """Mark the model as persisted and record what changed."""
        if self._exists:
            self.sync_changes()
        else:
            self._changes = {}
            self._exists = True
        self.sync_original()
        return True

    def update(self, attributes: Mapping[str, Any]) -> bool:
        return self.fill(attributes).save()

    @classmethod
    def create(cls, attributes: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
        model = cls(attributes, **kwargs)
        model.save()
        return model

    def new_instance(self, attributes: Mapping[str, Any] | None = None, exists: bool = False) -> Any:
        model = type(self)(attributes)
        model.exists = exists
        return model

    def new_from_builder(self, attributes: Mapping[str, Any]) -> Any:
        """Build an existing model from a storage row and fire ``retrieved``."""
        model = self.new_instance({}, exists=True)
        model.set_raw_attributes(attributes, sync=True)
        model.fire_model_event("retrieved")
        return model

    def to_dict(self) -> dict[str, Any]:
        """Serialize the model's attributes with their cast values."""
        return {key: self.get_attribute(key) for key in self.get_attributes()}
