"""Enumerations shared across the mapping engine."""

from __future__ import annotations

from enum import Enum


class ScalarKind(Enum):
    """Scalar kinds a property or column can hold."""

    INTEGER = "integer"
    DECIMAL = "decimal"
    TEXT = "text"
    BOOLEAN = "boolean"


class MappingStrategyKind(Enum):
    """Supported inheritance mapping strategies."""

    SINGLE_TABLE = "single_table"
    JOINED_TABLE = "joined_table"
    CONCRETE_TABLE = "concrete_table"


class ActionKind(Enum):
    """Kinds of table-level actions a plan can contain."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    SELECT = "select"
    COUNT = "count"
    EXISTS = "exists"


class Operator(Enum):
    """Comparison operators usable in predicates."""

    EQ = "="
    NE = "<>"
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    IN = "IN"


class IdentifierKind(Enum):
    """Identifier generator flavours selectable from configuration."""

    SEQUENCE = "sequence"
    UUID = "uuid"
