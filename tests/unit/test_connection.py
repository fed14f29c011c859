"""Unit tests for configuration models and ConnectionManager."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from inherit_map.adapters.sqlite import SqliteSyncAdapter
from inherit_map.core.connection import (
    ConnectionConfig,
    ConnectionManager,
    StoreConfig,
    load_adapter,
)
from inherit_map.core.enums import IdentifierKind, MappingStrategyKind
from inherit_map.core.exceptions import AdapterError


class TestConnectionConfig:
    def test_defaults(self, sqlite_config: ConnectionConfig) -> None:
        assert sqlite_config.driver == "sqlite"
        assert sqlite_config.pool_size == 1
        assert sqlite_config.pragmas == {}

    def test_driver_normalized(self) -> None:
        assert ConnectionConfig(driver=" SQLite ", database=":memory:").driver == "sqlite"

    def test_pool_size_positive(self) -> None:
        with pytest.raises(ValidationError):
            ConnectionConfig(database=":memory:", pool_size=0)

    def test_pragma_names_checked(self) -> None:
        with pytest.raises(ValidationError):
            ConnectionConfig(database=":memory:", pragmas={"foreign_keys; DROP": 1})


class TestStoreConfig:
    def test_defaults(self, sqlite_config: ConnectionConfig) -> None:
        config = StoreConfig(connection=sqlite_config)
        assert config.strategy is MappingStrategyKind.SINGLE_TABLE
        assert config.identifiers is IdentifierKind.SEQUENCE
        assert config.identifier_start == 1

    def test_strategy_from_string(self, sqlite_config: ConnectionConfig) -> None:
        config = StoreConfig(
            connection=sqlite_config, strategy="concrete_table", identifiers="uuid"
        )
        assert config.strategy is MappingStrategyKind.CONCRETE_TABLE
        assert config.identifiers is IdentifierKind.UUID

    def test_from_dict(self) -> None:
        config = StoreConfig.model_validate(
            {"connection": {"database": ":memory:"}, "strategy": "joined_table"}
        )
        assert config.connection.database == ":memory:"
        assert config.strategy is MappingStrategyKind.JOINED_TABLE

    def test_unknown_strategy(self, sqlite_config: ConnectionConfig) -> None:
        with pytest.raises(ValidationError):
            StoreConfig(connection=sqlite_config, strategy="table_per_whim")


class TestConnectionManager:
    def test_loads_sqlite_adapter(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        assert isinstance(manager.adapter, SqliteSyncAdapter)

    def test_unsupported_driver(self) -> None:
        with pytest.raises(AdapterError, match="supported: sqlite"):
            load_adapter("oracle")

    def test_pool_created_lazily(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        assert not manager.is_open
        pool = manager.pool()
        assert manager.pool() is pool
        assert repr(manager).endswith("open>")
        manager.close()
        assert not manager.is_open

    def test_connection_borrowed_and_returned(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        with manager.connection() as conn:
            assert manager.pool().idle == 0
            assert conn.execute("SELECT 1").fetchone()[0] == 1
        assert manager.pool().idle == 1
        manager.close()

    def test_pragmas_applied(self) -> None:
        manager = ConnectionManager(
            ConnectionConfig(database=":memory:", pragmas={"cache_size": 500})
        )
        with manager.connection() as conn:
            assert conn.execute("PRAGMA cache_size").fetchone()[0] == 500
            assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        manager.close()
