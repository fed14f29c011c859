"""Storage adapter protocol.

The entity store only ever talks to a driver through this surface: it
renders SQL with ``:name`` placeholders, hands it to :meth:`execute`, and
reads results back through the adapter so that row shape and generated
keys stay driver specific.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from inherit_map.core.connection import ConnectionConfig


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous storage adapter."""

    name: str

    def connect(self, config: ConnectionConfig) -> Any:
        """Open one connection with foreign keys enforced."""
        ...

    def create_pool(self, config: ConnectionConfig) -> Any: ...

    def acquire_connection(self, pool: Any) -> Any: ...

    def release_connection(self, connection: Any, pool: Any) -> None: ...

    def close_pool(self, pool: Any) -> None: ...

    def execute(self, connection: Any, sql: str, params: dict[str, Any] | None = None) -> Any:
        """Run one statement with named parameters and return its cursor."""
        ...

    def fetch_rows(self, cursor: Any) -> list[dict[str, Any]]:
        """Drain *cursor* into column-name keyed rows."""
        ...

    def inserted_identifier(self, cursor: Any) -> Any:
        """The key the database generated for the row *cursor* inserted."""
        ...

    def affected_rows(self, cursor: Any) -> int: ...
