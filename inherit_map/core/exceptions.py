"""InheritMap exception hierarchy.

All exceptions are InheritMap-specific. Raw driver exceptions are never
exposed to callers; they are chained as ``__cause__``.
"""

from __future__ import annotations

from typing import Any


class InheritMapError(Exception):
    """Base exception for all InheritMap errors."""


# --- Model ---


class ModelError(InheritMapError):
    """Base for type hierarchy model errors."""


class HierarchyError(ModelError):
    """Raised when a type hierarchy definition is invalid."""


class UnknownTypeError(ModelError):
    """Raised when an operation references a type not in the hierarchy."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unknown entity type: '{type_name}'")


class UnknownPropertyError(ModelError):
    """Raised when a property name is not applicable to the given type."""

    def __init__(self, type_name: str, property_name: str) -> None:
        self.type_name = type_name
        self.property_name = property_name
        super().__init__(f"Type '{type_name}' has no property '{property_name}'")


class MissingPropertyError(ModelError):
    """Raised when an entity is missing required property values."""

    def __init__(self, type_name: str, missing: list[str]) -> None:
        self.type_name = type_name
        self.missing = missing
        super().__init__(f"Entity of type '{type_name}' is missing properties {missing}")


class PropertyValueError(ModelError):
    """Raised when a property value does not match the declared scalar kind."""

    def __init__(self, property_name: str, kind: str, value: Any) -> None:
        self.property_name = property_name
        self.kind = kind
        self.value = value
        super().__init__(
            f"Property '{property_name}' expects {kind}, got {type(value).__name__}: {value!r}"
        )


# --- Schema ---


class SchemaDerivationError(InheritMapError):
    """Raised when a physical schema cannot be derived from a hierarchy."""


# --- Translation ---


class TranslationError(InheritMapError):
    """Base for operation translation errors."""


class MissingIdentifierError(TranslationError):
    """Raised when an operation needs an identifier that was not supplied."""

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        super().__init__(f"Identifier required for '{type_name}': {detail}")


class AmbiguousOrderingError(TranslationError):
    """Raised when an ordering key holds values of different kinds across types."""

    def __init__(self, type_name: str, property_name: str, kinds: list[str]) -> None:
        self.type_name = type_name
        self.property_name = property_name
        self.kinds = kinds
        super().__init__(
            f"Cannot order '{type_name}' by '{property_name}': "
            f"its kind differs across types ({', '.join(kinds)})"
        )


class InvalidIdentifierError(TranslationError):
    """Raised when an explicit identifier is not of the store's identifier kind."""

    def __init__(self, identifier: Any, expected: str) -> None:
        self.identifier = identifier
        self.expected = expected
        super().__init__(f"Identifier {identifier!r} is not a valid {expected} identifier")


# --- Writes ---


class WriteError(InheritMapError):
    """Base for errors raised while applying a write plan."""


class ExecutionError(WriteError):
    """Raised when a table action fails and nothing has been applied."""

    def __init__(self, table: str, action: str, detail: str) -> None:
        self.table = table
        self.action = action
        super().__init__(f"{action} on '{table}' failed: {detail}")


class PartialWriteError(WriteError):
    """Raised when a later action of a multi-table write failed.

    The earlier actions have been rolled back by the time this is raised.
    """

    def __init__(self, table: str, action: str, completed: int, detail: str) -> None:
        self.table = table
        self.action = action
        self.completed = completed
        super().__init__(
            f"{action} on '{table}' failed after {completed} completed action(s), "
            f"rolled back: {detail}"
        )


class InconsistentStateError(WriteError):
    """Raised when rolling back a failed write itself failed.

    The store may now hold a partially applied entity. This is fatal.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(f"Rollback failed, store may be inconsistent: {detail}")


class IdentifierCollisionError(WriteError):
    """Raised when an identifier is already used by another table of the hierarchy."""

    def __init__(self, identifier: Any, table: str) -> None:
        self.identifier = identifier
        self.table = table
        super().__init__(
            f"Identifier {identifier!r} already exists in '{table}'; "
            "the identifier generator must be shared across all concrete tables"
        )


class EntityNotFoundError(WriteError):
    """Raised when an update targets an entity that does not exist."""

    def __init__(self, type_name: str, identifier: Any) -> None:
        self.type_name = type_name
        self.identifier = identifier
        super().__init__(f"No '{type_name}' entity with identifier {identifier!r}")


# --- Transaction ---


class TransactionError(InheritMapError):
    """Base for transaction errors."""


class TransactionStateError(TransactionError):
    """Raised on invalid transaction state transitions."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")


# --- Adapter ---


class AdapterError(InheritMapError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
