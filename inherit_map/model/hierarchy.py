"""Type hierarchy model.

Frozen dataclasses describing one root entity type, its direct derived
types, and the runtime entity instances built from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any

from inherit_map.core.enums import ScalarKind
from inherit_map.core.exceptions import (
    MissingPropertyError,
    PropertyValueError,
    UnknownPropertyError,
    UnknownTypeError,
)


@dataclass(frozen=True)
class Property:
    """A named scalar property owned by one level of the hierarchy."""

    name: str
    kind: ScalarKind
    nullable: bool = False
    max_length: int | None = None


@dataclass(frozen=True)
class EntityType:
    """One level of the hierarchy. The root has no parent."""

    name: str
    properties: tuple[Property, ...]
    table_name: str
    parent: str | None = None

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def property_names(self) -> list[str]:
        return [p.name for p in self.properties]

    def get_property(self, name: str) -> Property | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


def coerce_value(prop: Property, value: Any) -> Any:
    """Coerce *value* to the Python type of the property's scalar kind."""
    if value is None:
        if prop.nullable:
            return None
        raise PropertyValueError(prop.name, prop.kind.value, value)

    kind = prop.kind
    if kind is ScalarKind.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
    elif kind is ScalarKind.INTEGER:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif kind is ScalarKind.TEXT:
        if isinstance(value, str):
            return value
    elif kind is ScalarKind.DECIMAL:
        if isinstance(value, Decimal):
            return value
        if isinstance(value, (int, float, str)) and not isinstance(value, bool):
            try:
                return Decimal(str(value))
            except InvalidOperation:
                pass
    raise PropertyValueError(prop.name, kind.value, value)


def value_fits(kind: ScalarKind, value: Any) -> bool:
    """True when *value* coerces to *kind*. ``None`` always fits."""
    try:
        coerce_value(Property("value", kind, nullable=True), value)
    except PropertyValueError:
        return False
    return True


@dataclass(frozen=True)
class EntityInstance:
    """A runtime entity: concrete type tag, identifier and property values."""

    type_name: str
    identifier: Any
    values: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def with_identifier(self, identifier: Any) -> EntityInstance:
        return replace(self, identifier=identifier)

    def replace(self, **changes: Any) -> EntityInstance:
        """Return a copy with some property values replaced."""
        return replace(self, values={**self.values, **changes})


@dataclass(frozen=True)
class Hierarchy:
    """An immutable root type plus its direct derived (leaf) types.

    Built with :func:`inherit_map.model.builder.hierarchy`, which validates
    the definition before constructing it.
    """

    root: EntityType
    derived: tuple[EntityType, ...]
    identifier: str = "Id"
    discriminator: str = "Discriminator"

    def __post_init__(self) -> None:
        types = {self.root.name: self.root}
        types.update({t.name: t for t in self.derived})
        object.__setattr__(self, "_types", types)

    @property
    def type_names(self) -> list[str]:
        """Derived type names in declaration order."""
        return [t.name for t in self.derived]

    def get(self, type_name: str) -> EntityType:
        try:
            return self._types[type_name]  # type: ignore[attr-defined, no-any-return]
        except KeyError:
            raise UnknownTypeError(type_name) from None

    def has(self, type_name: str) -> bool:
        return type_name in self._types  # type: ignore[attr-defined]

    def is_root(self, type_name: str) -> bool:
        return self.get(type_name).is_root

    def get_leaf(self, type_name: str) -> EntityType:
        """Like :meth:`get`, but only concrete types are accepted."""
        entity_type = self.get(type_name)
        if entity_type.is_root:
            raise UnknownTypeError(type_name)
        return entity_type

    def type_index(self, type_name: str) -> int:
        return self.type_names.index(type_name)

    def applicable_properties(self, type_name: str) -> list[Property]:
        """Root properties followed by the type's own properties."""
        entity_type = self.get(type_name)
        if entity_type.is_root:
            return list(self.root.properties)
        return [*self.root.properties, *entity_type.properties]

    def find_property(self, type_name: str, name: str) -> Property:
        for prop in self.applicable_properties(type_name):
            if prop.name == name:
                return prop
        raise UnknownPropertyError(type_name, name)

    def owner_of(self, name: str) -> list[EntityType]:
        """All types in the hierarchy that declare a property called *name*."""
        return [
            t for t in (self.root, *self.derived) if t.get_property(name) is not None
        ]

    def validate_values(self, type_name: str, values: dict[str, Any]) -> dict[str, Any]:
        """Check names and kinds of *values* against *type_name*, returning coerced values."""
        coerced: dict[str, Any] = {}
        for name, value in values.items():
            prop = self.find_property(type_name, name)
            coerced[name] = coerce_value(prop, value)
        return coerced

    def new(self, type_name: str, identifier: Any = None, **values: Any) -> EntityInstance:
        """Create a fully populated, validated instance of a concrete type."""
        self.get_leaf(type_name)
        coerced = self.validate_values(type_name, values)
        missing = [
            p.name
            for p in self.applicable_properties(type_name)
            if p.name not in coerced and not p.nullable
        ]
        if missing:
            raise MissingPropertyError(type_name, missing)
        for prop in self.applicable_properties(type_name):
            coerced.setdefault(prop.name, None)
        ordered = {p.name: coerced[p.name] for p in self.applicable_properties(type_name)}
        return EntityInstance(type_name=type_name, identifier=identifier, values=ordered)
