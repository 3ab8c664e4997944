"""Entity configuration.

ModelConfig is a Pydantic model describing the columns a host model
treats specially: the primary key and the timestamp-role columns.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ModelConfig(BaseModel):
    """Primary key and timestamp-role configuration of an entity class.

    Any timestamp role may be ``None`` to disable it.
    """

    model_config = ConfigDict(frozen=True)

    primary_key: str = "id"
    created_at: str | None = "created_at"
    updated_at: str | None = "updated_at"
    deleted_at: str | None = "deleted_at"

    @classmethod
    def for_model(cls, model_class: type[Any]) -> ModelConfig:
        """Read the configuration from an entity class's attributes."""
        return cls(
            primary_key=getattr(model_class, "primary_key", "id"),
            created_at=getattr(model_class, "CREATED_AT", "created_at"),
            updated_at=getattr(model_class, "UPDATED_AT", "updated_at"),
            deleted_at=getattr(model_class, "DELETED_AT", "deleted_at"),
        )

    @property
    def timestamp_columns(self) -> tuple[str, ...]:
        """Names of the enabled timestamp-role columns."""
        names = (self.created_at, self.updated_at, self.deleted_at)
        return tuple(name for name in names if name is not None)
