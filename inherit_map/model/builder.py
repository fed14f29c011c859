"""Hierarchy definition DSL builder.

Provides a fluent builder for declaring a root type and its derived types.
"""

from __future__ import annotations

from inherit_map.core.enums import ScalarKind
from inherit_map.core.exceptions import HierarchyError
from inherit_map.model.hierarchy import EntityType, Hierarchy, Property


def hierarchy(root_name: str, table: str | None = None) -> HierarchyBuilder:
    """Entry point for the hierarchy DSL.

    Args:
        root_name: Name of the root (base) entity type.
        table: Table name for the root. Defaults to root_name + "s".

    Returns:
        A builder for chaining property and derived type declarations.
    """
    return HierarchyBuilder(root_name, table)


class HierarchyBuilder:
    """Fluent builder for type hierarchy definitions.

    ``property()`` declares on whichever type was opened last: the root until
    the first ``derived()`` call, then the most recent derived type.
    """

    def __init__(self, root_name: str, table: str | None = None) -> None:
        self._root_name = root_name
        self._root_table = table or root_name + "s"
        self._identifier = "Id"
        self._discriminator = "Discriminator"
        # (name, table, properties); index 0 is the root
        self._types: list[tuple[str, str, list[Property]]] = [
            (root_name, self._root_table, [])
        ]

    def identifier(self, name: str) -> HierarchyBuilder:
        """Set the identifier property/column name."""
        self._identifier = name
        return self

    def discriminator(self, name: str) -> HierarchyBuilder:
        """Set the discriminator column name used by single-table mapping."""
        self._discriminator = name
        return self

    def property(
        self,
        name: str,
        kind: ScalarKind,
        *,
        nullable: bool = False,
        max_length: int | None = None,
    ) -> HierarchyBuilder:
        """Declare a property on the type currently being defined."""
        if max_length is not None and kind is not ScalarKind.TEXT:
            raise HierarchyError(f"max_length is only valid for text properties ('{name}')")
        self._types[-1][2].append(Property(name, kind, nullable, max_length))
        return self

    def derived(self, name: str, table: str | None = None) -> HierarchyBuilder:
        """Open a new derived (concrete) type of the root."""
        self._types.append((name, table or name + "s", []))
        return self

    def build(self) -> Hierarchy:
        """Validate the definition and compile it into a Hierarchy."""
        if len(self._types) < 2:
            raise HierarchyError(f"Hierarchy '{self._root_name}' declares no derived types")

        seen_types: set[str] = set()
        seen_tables: set[str] = set()
        for type_name, table, props in self._types:
            if type_name in seen_types:
                raise HierarchyError(f"Duplicate type name '{type_name}'")
            if table in seen_tables:
                raise HierarchyError(f"Duplicate table name '{table}'")
            seen_types.add(type_name)
            seen_tables.add(table)

            names = [p.name for p in props]
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                raise HierarchyError(f"Type '{type_name}' declares {duplicates} more than once")
            if self._identifier in names:
                raise HierarchyError(
                    f"Type '{type_name}' declares a property named like the "
                    f"identifier '{self._identifier}'"
                )

        root_props = self._types[0][2]
        root_names = {p.name for p in root_props}
        for type_name, _, props in self._types[1:]:
            shadowed = sorted(root_names.intersection(p.name for p in props))
            if shadowed:
                raise HierarchyError(
                    f"Derived type '{type_name}' redeclares root properties {shadowed}"
                )

        root = EntityType(self._root_name, tuple(root_props), self._root_table)
        derived = tuple(
            EntityType(type_name, tuple(props), table, parent=self._root_name)
            for type_name, table, props in self._types[1:]
        )
        return Hierarchy(
            root=root,
            derived=derived,
            identifier=self._identifier,
            discriminator=self._discriminator,
        )
