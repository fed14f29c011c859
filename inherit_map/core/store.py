"""Entity store.

The SQLite-backed executor of translated plans. It asks the
OperationTranslator for table actions, renders them through
:mod:`inherit_map.core.sql`, runs writes inside one TransactionManager
scope and rebuilds entities from read results.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from inherit_map.core.connection import ConnectionManager, StoreConfig
from inherit_map.core.enums import ActionKind, MappingStrategyKind, ScalarKind
from inherit_map.core.exceptions import (
    EntityNotFoundError,
    ExecutionError,
    IdentifierCollisionError,
    InheritMapError,
    PartialWriteError,
)
from inherit_map.core.identity import (
    IdentifierGenerator,
    SequenceIdentifierGenerator,
    create_generator,
)
from inherit_map.core.sql import compile_action, from_db, quote
from inherit_map.core.transaction import TransactionManager
from inherit_map.model.hierarchy import EntityInstance, Hierarchy
from inherit_map.schema.ddl import render_ddl
from inherit_map.schema.table import TableSchema
from inherit_map.strategy import MappingStrategy
from inherit_map.translate.actions import GENERATED_IDENTIFIER, OrderBy, WritePlan
from inherit_map.translate.predicate import Predicate, prop
from inherit_map.translate.translator import OperationTranslator

logger = logging.getLogger(__name__)


class EntityStore:
    """Persists a type hierarchy under one mapping strategy.

    The strategy is fixed at construction. A single identifier generator is
    owned by the store and shared by all of its tables.
    """

    def __init__(
        self,
        hierarchy: Hierarchy,
        strategy: MappingStrategy | MappingStrategyKind,
        connection_manager: ConnectionManager,
        identifier_generator: IdentifierGenerator | None = None,
    ) -> None:
        self._hierarchy = hierarchy
        self._generator = identifier_generator or SequenceIdentifierGenerator()
        self._translator = OperationTranslator(hierarchy, strategy, self._generator.kind)
        self._connection_manager = connection_manager
        self._kinds: dict[tuple[str, str], ScalarKind] = {
            (type_name, p.name): p.kind
            for type_name in hierarchy.type_names
            for p in hierarchy.applicable_properties(type_name)
        }

    @classmethod
    def from_config(cls, hierarchy: Hierarchy, config: StoreConfig) -> EntityStore:
        """Create an EntityStore from a StoreConfig."""
        return cls(
            hierarchy,
            config.strategy,
            ConnectionManager(config.connection),
            create_generator(config.identifiers, config.identifier_start),
        )

    @property
    def hierarchy(self) -> Hierarchy:
        return self._hierarchy

    @property
    def strategy(self) -> MappingStrategy:
        return self._translator.strategy

    @property
    def translator(self) -> OperationTranslator:
        return self._translator

    @property
    def tables(self) -> list[TableSchema]:
        return self._translator.tables

    @property
    def identifier_generator(self) -> IdentifierGenerator:
        return self._generator

    # --- lifecycle ---

    def create_schema(self) -> None:
        """Create all derived tables (idempotent)."""
        with self.transaction() as tx:
            for table in self.tables:
                try:
                    tx.execute(render_ddl(table))
                except Exception as e:
                    raise ExecutionError(table.name, "create", str(e)) from e

        if self.strategy.uses_global_identifiers and self._generator.kind is ScalarKind.INTEGER:
            with self._connection_manager.connection() as conn:
                for table in self.tables:
                    key = quote(table.primary_key)
                    sql = f"SELECT MAX({key}) AS top FROM {quote(table.name)}"
                    self._generator.observe(self._fetch(conn, table.name, sql, {})[0]["top"])

        logger.info(
            "Created schema for '%s' (%s): %s",
            self._hierarchy.root.name,
            self.strategy.kind.value,
            ", ".join(t.name for t in self.tables),
        )

    def transaction(self) -> TransactionManager:
        """Create a new transaction scope on a pooled connection."""
        return self._connection_manager.transaction()

    def close(self) -> None:
        self._connection_manager.close()

    def __enter__(self) -> EntityStore:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    # --- writes ---

    def insert(self, instance: EntityInstance) -> EntityInstance:
        """Insert a new entity and return it with its identifier assigned."""
        if instance.identifier is None:
            if not self._translator.generates_identifiers:
                instance = instance.with_identifier(self._generator.next_id())
        elif self.strategy.uses_global_identifiers:
            self._generator.observe(instance.identifier)

        plan = self._translator.insert(instance)
        identifier, _ = self._apply(plan)
        values = self._hierarchy.validate_values(instance.type_name, instance.values)
        return EntityInstance(instance.type_name, identifier, values)

    def update(self, instance: EntityInstance, changed: Iterable[str] | None = None) -> None:
        """Write the *changed* properties (all, when omitted) of an existing entity.

        Raises:
            EntityNotFoundError: If no entity of that type has the identifier.
        """
        plan = self._translator.update(instance, changed)
        if plan.actions:
            self._apply(plan)

    def delete(self, identifier: Any, type_name: str) -> bool:
        """Delete an entity. Returns False when there was nothing to delete."""
        plan = self._translator.delete(identifier, type_name)
        _, affected = self._apply(plan)
        return affected > 0

    def _apply(self, plan: WritePlan) -> tuple[Any, int]:
        """Run a write plan in one transaction.

        Returns the entity identifier and the total affected row count.
        """
        identifier = None if plan.identifier is GENERATED_IDENTIFIER else plan.identifier
        adapter = self._connection_manager.adapter
        affected = 0

        with self.transaction() as tx:
            for action in plan.actions:
                sql, params = compile_action(action, identifier)
                check = action.kind is ActionKind.EXISTS
                try:
                    result = tx.fetch_all(sql, params) if check else tx.write(sql, params)
                except Exception as e:
                    if tx.writes:
                        raise PartialWriteError(
                            action.table, action.kind.value, tx.writes, str(e)
                        ) from e
                    raise ExecutionError(action.table, action.kind.value, str(e)) from e

                if check:
                    if len(result) != action.expect_rows:
                        raise IdentifierCollisionError(plan.identifier, action.table)
                    continue

                if action.returns_identifier:
                    identifier = adapter.inserted_identifier(result)
                rowcount = adapter.affected_rows(result)
                if action.expect_rows is not None and rowcount != action.expect_rows:
                    raise EntityNotFoundError(plan.type_name, plan.identifier)
                affected += rowcount

        logger.debug(
            "%s %s id=%r on %s", plan.operation.value, plan.type_name, identifier, plan.tables
        )
        return identifier, affected

    # --- reads ---

    def read(
        self,
        target: str,
        predicate: Predicate | None = None,
        order_by: OrderBy | str | None = None,
    ) -> list[EntityInstance]:
        """Read entities of *target* (all concrete types when it is the root)."""
        plan = self._translator.read(target, predicate, order_by)
        with self._connection_manager.connection() as conn:
            rows_per_branch = [
                self._fetch(conn, branch.action.table, *compile_action(branch.action))
                for branch in plan.branches
            ]
        return plan.reconstruct(rows_per_branch, decode=self._decode)

    def get(self, identifier: Any, type_name: str) -> EntityInstance | None:
        """Read one entity by identifier, or None when not found."""
        found = self.read(type_name, prop(self._hierarchy.identifier) == identifier)
        return found[0] if found else None

    def count(self, target: str, predicate: Predicate | None = None) -> int:
        plan = self._translator.count(target, predicate)
        total = 0
        with self._connection_manager.connection() as conn:
            for action in plan.actions:
                rows = self._fetch(conn, action.table, *compile_action(action))
                total += int(next(iter(rows[0].values())))
        return total

    def scan_table(self, table_name: str) -> list[dict[str, Any]]:
        """Read raw rows of one physical table, in primary key order."""
        table = next((t for t in self.tables if t.name == table_name), None)
        if table is None:
            raise ExecutionError(table_name, "scan", "no such table in the derived schema")
        sql = f"SELECT * FROM {quote(table.name)} ORDER BY {quote(table.primary_key)}"
        with self._connection_manager.connection() as conn:
            return self._fetch(conn, table.name, sql, {})

    def _fetch(
        self, conn: Any, table: str, sql: str, params: dict[str, Any]
    ) -> list[dict[str, Any]]:
        adapter = self._connection_manager.adapter
        logger.debug("SQL: %s | params: %s", sql, params)
        try:
            return adapter.fetch_rows(adapter.execute(conn, sql, params))
        except InheritMapError:
            raise
        except Exception as e:
            raise ExecutionError(table, "select", str(e)) from e

    def _decode(self, type_name: str, name: str, raw: Any) -> Any:
        return from_db(self._kinds[(type_name, name)], raw)
