"""Unit tests for ModelConfig."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from fluent_model.adapters.model import Model
from fluent_model.core.config import ModelConfig


class Ticket(Model):
    primary_key = "ticket_id"
    UPDATED_AT = "modified_at"
    DELETED_AT = None


class TestModelConfig:
    def test_defaults(self) -> None:
        config = ModelConfig()
        assert config.primary_key == "id"
        assert config.timestamp_columns == ("created_at", "updated_at", "deleted_at")

    def test_for_model(self) -> None:
        config = ModelConfig.for_model(Ticket)
        assert config.primary_key == "ticket_id"
        assert config.created_at == "created_at"
        assert config.updated_at == "modified_at"
        assert config.deleted_at is None

    def test_disabled_roles_left_out(self) -> None:
        config = ModelConfig.for_model(Ticket)
        assert config.timestamp_columns == ("created_at", "modified_at")

    def test_for_plain_class_uses_defaults(self) -> None:
        assert ModelConfig.for_model(object) == ModelConfig()

    def test_frozen(self) -> None:
        config = ModelConfig()
        with pytest.raises(ValidationError):
            config.primary_key = "uuid"  # type: ignore[misc]
