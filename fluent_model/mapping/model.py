"""Row-to-entity mapper.

Builds host models from row dicts through the retrieval path, so bound
entities hydrate exactly as they do when loaded by the ORM.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from fluent_model.adapters.model import Model
from fluent_model.core.exceptions import MappingError

M = TypeVar("M", bound=Model)


class ModelMapper(Generic[M]):
    """Simple row-to-entity mapper.

    Each row goes through ``new_from_builder(row)`` on a prototype
    instance, which replaces the attribute store wholesale and fires
    ``retrieved``.

    Args:
        target_class: The Model subclass to construct from row data.
        aliases: Optional column-name to attribute-name mapping.

    Raises:
        MappingError: If target_class is not a Model subclass.
    """

    def __init__(
        self,
        target_class: type[M],
        aliases: dict[str, str] | None = None,
    ) -> None:
        if not (isinstance(target_class, type) and issubclass(target_class, Model)):
            raise MappingError(f"Cannot map rows to {target_class!r}: not a Model subclass")
        self._target_class = target_class
        self._aliases = aliases
        self._prototype: M | None = None

    def _apply_aliases(self, row: dict[str, Any]) -> dict[str, Any]:
        """Apply column aliases to the row."""
        if not self._aliases:
            return row
        return {self._aliases.get(key, key): value for key, value in row.items()}

    def map_one(self, row: dict[str, Any]) -> M:
        """Map a single row to a target_class instance."""
        if self._prototype is None:
            self._prototype = self._target_class()
        return self._prototype.new_from_builder(self._apply_aliases(row))  # type: ignore[no-any-return]

    def map_many(self, rows: list[dict[str, Any]]) -> list[M]:
        """Map all rows via map_one."""
        return [self.map_one(row) for row in rows]
