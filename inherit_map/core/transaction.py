"""Transaction scope for multi-table writes.

Every write plan runs inside one TransactionManager. The scope commits when
its block exits cleanly. It rolls back when the block raises, and when the
commit fails, which is reported as TransactionError. A rollback that fails
leaves the database holding an unknown part of the plan, which surfaces as
InconsistentStateError. The borrowed connection goes back to its pool on
every exit path.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from inherit_map.core.exceptions import (
    InconsistentStateError,
    TransactionError,
    TransactionStateError,
)

logger = logging.getLogger(__name__)


class TxState(Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionManager:
    """Synchronous transaction context manager.

    Args:
        connection: A connection with no open transaction.
        adapter: The adapter that opened *connection*.
        pool: When given, *connection* is released to it on exit.

    ``writes`` counts the statements run through :meth:`write` so far, which
    lets a caller tell a failed first write from a failure part way through.
    """

    def __init__(self, connection: Any, adapter: Any, pool: Any = None) -> None:
        self._connection = connection
        self._adapter = adapter
        self._pool = pool
        self._state = TxState.PENDING
        self.writes = 0

    @property
    def state(self) -> str:
        return self._state.value

    def __enter__(self) -> TransactionManager:
        self._state = TxState.ACTIVE
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        try:
            if self._state is TxState.ACTIVE:
                if exc_type is None:
                    self._finish()
                else:
                    self._abort(exc_val)
        finally:
            if self._pool is not None:
                self._adapter.release_connection(self._connection, self._pool)

    def _finish(self) -> None:
        try:
            self._connection.commit()
        except Exception as e:
            logger.error("Commit failed: %s", e)
            self._abort(e)
            raise TransactionError(f"Commit failed and was rolled back: {e}") from e
        self._state = TxState.COMMITTED

    def _abort(self, cause: BaseException | None) -> None:
        logger.warning(
            "Rolling back after %s (%d write(s) undone)", type(cause).__name__, self.writes
        )
        try:
            self._connection.rollback()
        except Exception as e:
            logger.error("Rollback failed: %s", e)
            raise InconsistentStateError(f"{e} (while handling: {cause})") from e
        self._state = TxState.ROLLED_BACK

    def _require_active(self, action: str) -> None:
        if self._state is not TxState.ACTIVE:
            raise TransactionStateError(self._state.value, action)

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> Any:
        """Run a statement in this transaction and return the cursor."""
        self._require_active("execute")
        logger.debug("SQL: %s | params: %s", sql, params)
        return self._adapter.execute(self._connection, sql, params)

    def write(self, sql: str, params: dict[str, Any] | None = None) -> Any:
        """Like :meth:`execute`, but counted in ``writes`` once it succeeds."""
        cursor = self.execute(sql, params)
        self.writes += 1
        return cursor

    def fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        return self._adapter.fetch_rows(self.execute(sql, params))

    def commit(self) -> None:
        self._require_active("commit")
        self._connection.commit()
        self._state = TxState.COMMITTED

    def rollback(self) -> None:
        """Discard every write so far. The scope then exits without committing."""
        self._require_active("rollback")
        self._connection.rollback()
        self._state = TxState.ROLLED_BACK
