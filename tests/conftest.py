"""Shared test fixtures."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator

import pytest

from fluent_model.adapters.model import Model
from fluent_model.core.config import ModelConfig
from fluent_model.core.registry import SchemaRegistry


@pytest.fixture
def registry() -> SchemaRegistry:
    """An empty registry, isolated from the process-wide default."""
    return SchemaRegistry(Model)


@pytest.fixture
def config() -> ModelConfig:
    """Default primary key and timestamp-role configuration."""
    return ModelConfig()


@pytest.fixture
def sqlite_conn() -> Iterator[sqlite3.Connection]:
    """SQLite in-memory connection returning name-addressable rows."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def fetch_rows(sqlite_conn: sqlite3.Connection):
    """Helper to run a query and return its rows as dicts.

    Usage:
        fetch_rows("SELECT * FROM posts WHERE id = :id", {"id": 1})
    """

    def _fetch(sql: str, params: dict | None = None) -> list[dict]:
        cursor = sqlite_conn.execute(sql, params or {})
        return [dict(row) for row in cursor.fetchall()]

    return _fetch
