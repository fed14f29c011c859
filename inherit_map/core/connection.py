"""Connection configuration and management.

ConnectionConfig and StoreConfig are Pydantic models, so a store can be
described by a plain dict (``StoreConfig.model_validate``) as well as in
code. ConnectionManager resolves the driver to a SyncAdapter, owns the pool
and hands out connections and transactions on it.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel, Field, field_validator

from inherit_map.core.enums import IdentifierKind, MappingStrategyKind
from inherit_map.core.exceptions import AdapterError
from inherit_map.core.transaction import TransactionManager

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Where the tables live and how connections to them are opened."""

    driver: str = "sqlite"
    database: str
    # One connection keeps a ":memory:" database shared by every operation.
    pool_size: int = Field(default=1, ge=1)
    pool_timeout: float = Field(default=30.0, ge=0)
    pragmas: dict[str, str | int] = {}

    @field_validator("driver")
    @classmethod
    def _normalize_driver(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("pragmas")
    @classmethod
    def _check_pragma_names(cls, value: dict[str, str | int]) -> dict[str, str | int]:
        for name in value:
            if not name.isidentifier():
                raise ValueError(f"Invalid pragma name: {name!r}")
        return value


class StoreConfig(BaseModel):
    """Everything needed to build an EntityStore for a hierarchy."""

    connection: ConnectionConfig
    strategy: MappingStrategyKind = MappingStrategyKind.SINGLE_TABLE
    identifiers: IdentifierKind = IdentifierKind.SEQUENCE
    identifier_start: int = Field(default=1, ge=1)


# driver name -> "module:ClassName", imported on first use
_ADAPTERS: dict[str, str] = {
    "sqlite": "inherit_map.adapters.sqlite:SqliteSyncAdapter",
}


def load_adapter(driver: str) -> Any:
    """Instantiate the adapter registered for *driver*.

    Raises:
        AdapterError: If no adapter is registered or it cannot be imported.
    """
    target = _ADAPTERS.get(driver)
    if target is None:
        supported = ", ".join(sorted(_ADAPTERS))
        raise AdapterError(f"Unsupported database driver: {driver} (supported: {supported})")
    module_path, _, cls_name = target.partition(":")
    try:
        adapter_cls = getattr(importlib.import_module(module_path), cls_name)
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e
    return adapter_cls()


class ConnectionManager:
    """Owns the adapter and its pool for one ConnectionConfig."""

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self._adapter = load_adapter(config.driver)
        self._pool: Any = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def pool(self) -> Any:
        """The connection pool, created on first use."""
        if self._pool is None:
            logger.debug(
                "Opening %d connection(s) to %s", self.config.pool_size, self.config.database
            )
            self._pool = self._adapter.create_pool(self.config)
        return self._pool

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Borrow a pooled connection for the duration of the block."""
        pool = self.pool()
        conn = self._adapter.acquire_connection(pool)
        try:
            yield conn
        finally:
            self._adapter.release_connection(conn, pool)

    def transaction(self) -> TransactionManager:
        """A transaction on a borrowed connection, returned to the pool on exit."""
        pool = self.pool()
        return TransactionManager(self._adapter.acquire_connection(pool), self._adapter, pool)

    def close(self) -> None:
        if self._pool is not None:
            self._adapter.close_pool(self._pool)
            self._pool = None

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<ConnectionManager {self.config.driver}:{self.config.database} {state}>"
