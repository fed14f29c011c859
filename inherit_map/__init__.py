"""InheritMap - persist class hierarchies in a relational database.

Single-table, joined-table and concrete-table inheritance mapping behind one
operation translator and a SQLite-backed entity store.
"""

from __future__ import annotations

from inherit_map.core.connection import ConnectionConfig, ConnectionManager, StoreConfig
from inherit_map.core.enums import (
    ActionKind,
    IdentifierKind,
    MappingStrategyKind,
    Operator,
    ScalarKind,
)
from inherit_map.core.exceptions import (
    AdapterError,
    AmbiguousOrderingError,
    ConnectionError,  # noqa: A004
    EntityNotFoundError,
    ExecutionError,
    HierarchyError,
    IdentifierCollisionError,
    InconsistentStateError,
    InheritMapError,
    InvalidIdentifierError,
    MissingIdentifierError,
    MissingPropertyError,
    ModelError,
    PartialWriteError,
    PoolError,
    PropertyValueError,
    SchemaDerivationError,
    TransactionError,
    TransactionStateError,
    TranslationError,
    UnknownPropertyError,
    UnknownTypeError,
    WriteError,
)
from inherit_map.core.identity import (
    IdentifierGenerator,
    SequenceIdentifierGenerator,
    UuidIdentifierGenerator,
    create_generator,
)
from inherit_map.core.store import EntityStore
from inherit_map.core.transaction import TransactionManager
from inherit_map.model import (
    Describer,
    EntityInstance,
    EntityType,
    Hierarchy,
    HierarchyBuilder,
    Property,
    hierarchy,
)
from inherit_map.repository import Repository
from inherit_map.schema import ColumnSchema, ForeignKeySchema, TableSchema, render_ddl
from inherit_map.schema.deriver import derive_schema
from inherit_map.strategy import (
    ConcreteTableStrategy,
    JoinedTableStrategy,
    MappingStrategy,
    SingleTableStrategy,
    get_strategy,
)
from inherit_map.translate import (
    CountPlan,
    OrderBy,
    Predicate,
    ReadPlan,
    TableAction,
    WritePlan,
    prop,
)
from inherit_map.translate.translator import OperationTranslator

__all__ = [
    # Model
    "hierarchy",
    "HierarchyBuilder",
    "Hierarchy",
    "EntityType",
    "Property",
    "EntityInstance",
    "Describer",
    # Schema
    "TableSchema",
    "ColumnSchema",
    "ForeignKeySchema",
    "derive_schema",
    "render_ddl",
    # Strategies
    "MappingStrategy",
    "SingleTableStrategy",
    "JoinedTableStrategy",
    "ConcreteTableStrategy",
    "get_strategy",
    # Translation
    "OperationTranslator",
    "TableAction",
    "WritePlan",
    "ReadPlan",
    "CountPlan",
    "OrderBy",
    "Predicate",
    "prop",
    # Identity
    "IdentifierGenerator",
    "SequenceIdentifierGenerator",
    "UuidIdentifierGenerator",
    "create_generator",
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    "StoreConfig",
    # Store
    "EntityStore",
    "TransactionManager",
    # Repository
    "Repository",
    # Enums
    "ScalarKind",
    "MappingStrategyKind",
    "IdentifierKind",
    "ActionKind",
    "Operator",
    # Exceptions
    "InheritMapError",
    "ModelError",
    "HierarchyError",
    "UnknownTypeError",
    "UnknownPropertyError",
    "MissingPropertyError",
    "PropertyValueError",
    "SchemaDerivationError",
    "TranslationError",
    "MissingIdentifierError",
    "InvalidIdentifierError",
    "AmbiguousOrderingError",
    "WriteError",
    "ExecutionError",
    "PartialWriteError",
    "InconsistentStateError",
    "IdentifierCollisionError",
    "EntityNotFoundError",
    "TransactionError",
    "TransactionStateError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
