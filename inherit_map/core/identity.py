"""Identifier generators.

Concrete-table mapping has no shared table to draw identifiers from, so a
single generator instance is shared by every table of a store. Generators
are created once, never reset, and safe to call from several threads.
"""

from __future__ import annotations

import threading
import uuid
from typing import Any, Protocol, runtime_checkable

from inherit_map.core.enums import IdentifierKind, ScalarKind
from inherit_map.core.exceptions import InvalidIdentifierError


@runtime_checkable
class IdentifierGenerator(Protocol):
    """Source of identifiers unique across a whole hierarchy."""

    @property
    def kind(self) -> ScalarKind:
        """Scalar kind of the identifiers produced."""
        ...

    def next_id(self) -> Any:
        """Return a fresh identifier."""
        ...

    def observe(self, value: Any) -> None:
        """Record an identifier assigned elsewhere so it is never handed out."""
        ...


class SequenceIdentifierGenerator:
    """Monotonically increasing integers guarded by a lock."""

    def __init__(self, start: int = 1) -> None:
        self._next = start
        self._lock = threading.Lock()

    @property
    def kind(self) -> ScalarKind:
        return ScalarKind.INTEGER

    def next_id(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def observe(self, value: Any) -> None:
        """Raises InvalidIdentifierError unless *value* is an integer."""
        if value is None:
            return
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidIdentifierError(value, self.kind.value)
        with self._lock:
            if value >= self._next:
                self._next = value + 1

    def peek(self) -> int:
        """The identifier the next call will return."""
        with self._lock:
            return self._next


class UuidIdentifierGenerator:
    """Random 128-bit identifiers rendered as hex strings."""

    @property
    def kind(self) -> ScalarKind:
        return ScalarKind.TEXT

    def next_id(self) -> str:
        return uuid.uuid4().hex

    def observe(self, value: Any) -> None:
        pass


def create_generator(kind: IdentifierKind, start: int = 1) -> IdentifierGenerator:
    """Create the generator selected in configuration."""
    if kind is IdentifierKind.UUID:
        return UuidIdentifierGenerator()
    return SequenceIdentifierGenerator(start)
