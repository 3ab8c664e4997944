"""Unit tests for SyncEngine."""

from __future__ import annotations

import pytest

from fluent_model.adapters.model import Model
from fluent_model.bindings.engine import SyncEngine
from fluent_model.core.enums import SyncState
from fluent_model.core.registry import CompiledEntity, SchemaRegistry
from fluent_model.mapping.builder import schema


class Note(Model):
    guarded = []


@pytest.fixture
def compiled(registry: SchemaRegistry) -> CompiledEntity:
    return registry.register(
        schema(Note, Model)
        .field("id", int)
        .field("body", str | None, default=None)
        .field("pinned", bool, default=False)
        .build()
    )


@pytest.fixture
def note() -> Note:
    return Note()


@pytest.fixture
def engine(note: Note, compiled: CompiledEntity) -> SyncEngine:
    return SyncEngine(note, compiled)


class TestSyncEngineState:
    def test_starts_constructing(self, engine: SyncEngine) -> None:
        assert engine.state is SyncState.CONSTRUCTING
        assert not engine.is_suppressed

    def test_hydrate_moves_to_hydrated(self, engine: SyncEngine) -> None:
        engine.hydrate()
        assert engine.state is SyncState.HYDRATED

    def test_suppressed_region(self, engine: SyncEngine) -> None:
        engine.hydrate()
        with engine.suppressed():
            assert engine.state is SyncState.MUTATING
            assert engine.is_suppressed
        assert engine.state is SyncState.HYDRATED

    def test_suppression_released_on_error(self, engine: SyncEngine) -> None:
        engine.hydrate()
        with pytest.raises(ValueError, match="boom"), engine.suppressed():
            raise ValueError("boom")
        assert engine.state is SyncState.HYDRATED

    def test_nested_regions_restore_outer_state(self, engine: SyncEngine) -> None:
        engine.hydrate()
        with engine.suppressed():
            with engine.suppressed():
                pass
            assert engine.is_suppressed
        assert not engine.is_suppressed


class TestSyncEngineLifecycle:
    def test_prepare_installs_policies_and_defaults(self, note: Note, engine: SyncEngine) -> None:
        engine.prepare()
        assert note.get_guarded() == []
        assert note.get_casts() == {"id": "integer", "body": "str", "pinned": "boolean"}
        assert note.attribute_store == {"body": None, "pinned": False}

    def test_hydrate_assigns_stored_values(self, note: Note, engine: SyncEngine) -> None:
        engine.prepare()
        note.set_raw_attributes({"id": "4", "pinned": 1})
        engine.hydrate()
        assert vars(note)["id"] == 4
        assert vars(note)["pinned"] is True
        assert not engine.is_initialized("body")

    def test_hydrate_skips_null_for_non_nullable(self, note: Note, engine: SyncEngine) -> None:
        note.set_raw_attributes({"id": None, "body": None})
        engine.hydrate()
        assert not engine.is_initialized("id")
        assert engine.is_initialized("body")
        assert vars(note)["body"] is None

    def test_set_attribute_mirrors_stored_value(self, note: Note, engine: SyncEngine) -> None:
        engine.prepare()
        engine.set_attribute("id", "9", note.set_attribute)
        assert note.attribute_store["id"] == "9"
        assert vars(note)["id"] == 9

    def test_set_attribute_suppressed(self, note: Note, engine: SyncEngine) -> None:
        with engine.suppressed():
            engine.set_attribute("id", 1, note.set_attribute)
        assert "id" not in note.attribute_store
        assert not engine.is_initialized("id")

    def test_set_attribute_unmanaged_key(self, note: Note, engine: SyncEngine) -> None:
        engine.set_attribute("color", "red", note.set_attribute)
        assert note.attribute_store["color"] == "red"
        assert "color" not in vars(note)

    def test_set_raw_attributes_rehydrates(self, note: Note, engine: SyncEngine) -> None:
        engine.prepare()
        engine.hydrate()
        assert engine.is_initialized("pinned")

        engine.set_raw_attributes({"id": 2}, True, note.set_raw_attributes)

        assert vars(note)["id"] == 2
        assert not engine.is_initialized("pinned")
        assert note.get_original() == {"id": 2}
        assert engine.state is SyncState.HYDRATED

    def test_merge_pushes_initialized_properties(self, note: Note, engine: SyncEngine) -> None:
        engine.prepare()
        engine.hydrate()
        object.__setattr__(note, "body", "edited")
        merged: list[bool] = []

        engine.merge_attributes_from_class_casts(note.set_attribute, lambda: merged.append(True))

        assert note.attribute_store["body"] == "edited"
        assert merged == [True]

    def test_managed_properties(self, engine: SyncEngine) -> None:
        engine.prepare()
        engine.hydrate()
        assert [(state.name, state.initialized) for state in engine.managed_properties()] == [
            ("id", False),
            ("body", True),
            ("pinned", True),
        ]
