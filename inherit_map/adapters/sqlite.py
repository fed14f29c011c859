"""SQLite adapter (sqlite3 stdlib)."""

from __future__ import annotations

import logging
import queue
import sqlite3
from typing import Any

from inherit_map.core.connection import ConnectionConfig
from inherit_map.core.exceptions import ConnectionError, PoolError  # noqa: A004

logger = logging.getLogger(__name__)


class SqlitePool:
    """A fixed set of connections to one database.

    Connections are handed out most recently used first. :meth:`take` waits up
    to ``timeout`` seconds for one to come back before giving up.
    """

    def __init__(self, connections: list[sqlite3.Connection], timeout: float) -> None:
        self._connections = list(connections)
        self._idle: queue.LifoQueue[sqlite3.Connection] = queue.LifoQueue()
        for conn in self._connections:
            self._idle.put(conn)
        self._timeout = timeout

    def __len__(self) -> int:
        return len(self._connections)

    @property
    def idle(self) -> int:
        return self._idle.qsize()

    def take(self) -> sqlite3.Connection:
        if not self._connections:
            raise PoolError("Pool is closed")
        try:
            return self._idle.get(timeout=self._timeout)
        except queue.Empty:
            raise PoolError(
                f"No connection returned to the pool within {self._timeout}s"
            ) from None

    def give(self, connection: sqlite3.Connection) -> None:
        if connection in self._connections:
            self._idle.put(connection)

    def close(self) -> None:
        for conn in self._connections:
            conn.close()
        self._connections.clear()
        while not self._idle.empty():
            self._idle.get_nowait()


class SqliteSyncAdapter:
    """Synchronous SQLite adapter using stdlib sqlite3.

    Rows come back as :class:`sqlite3.Row` and every connection runs with
    ``PRAGMA foreign_keys=ON`` plus any pragmas named in the configuration.
    """

    name = "sqlite"

    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(
                config.database, timeout=config.pool_timeout, check_same_thread=False
            )
        except sqlite3.Error as e:
            raise ConnectionError(f"Cannot open '{config.database}': {e}") from e
        conn.row_factory = sqlite3.Row
        pragmas = {"foreign_keys": "ON", **config.pragmas}
        for pragma, value in pragmas.items():
            conn.execute(f"PRAGMA {pragma}={value}")
        logger.debug("Opened %s with pragmas %s", config.database, pragmas)
        return conn

    def create_pool(self, config: ConnectionConfig) -> SqlitePool:
        return SqlitePool(
            [self.connect(config) for _ in range(config.pool_size)], config.pool_timeout
        )

    def acquire_connection(self, pool: SqlitePool) -> sqlite3.Connection:
        return pool.take()

    def release_connection(self, connection: sqlite3.Connection, pool: SqlitePool) -> None:
        pool.give(connection)

    def close_pool(self, pool: SqlitePool) -> None:
        pool.close()

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> sqlite3.Cursor:
        return connection.execute(sql, params or {})

    def fetch_rows(self, cursor: sqlite3.Cursor) -> list[dict[str, Any]]:
        if cursor.description is None:
            return []
        return [dict(row) for row in cursor.fetchall()]

    def inserted_identifier(self, cursor: sqlite3.Cursor) -> int | None:
        return cursor.lastrowid

    def affected_rows(self, cursor: sqlite3.Cursor) -> int:
        # sqlite3 reports -1 for statements that do not modify rows
        return max(cursor.rowcount, 0)
