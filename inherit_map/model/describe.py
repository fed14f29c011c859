"""Per-type description formatting.

A dispatch table keyed by type name replaces virtual ``describe`` methods:
the instance's type tag selects the formatter.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from inherit_map.model.hierarchy import EntityInstance, Hierarchy

BaseFormatter = Callable[[Mapping[str, Any]], str]
TypeFormatter = Callable[[Mapping[str, Any], str], str]


class Describer:
    """Renders human-readable descriptions of entity instances.

    Args:
        hierarchy: The hierarchy whose types may be described.
        base: Formatter for the root-level part of every description.
    """

    def __init__(self, hierarchy: Hierarchy, base: BaseFormatter) -> None:
        self._hierarchy = hierarchy
        self._base = base
        self._formatters: dict[str, TypeFormatter] = {}

    def register(self, type_name: str, formatter: TypeFormatter) -> Describer:
        """Register the formatter for a concrete type.

        The formatter receives the instance's values and the base text.
        """
        self._hierarchy.get_leaf(type_name)
        self._formatters[type_name] = formatter
        return self

    def describe(self, instance: EntityInstance) -> str:
        self._hierarchy.get_leaf(instance.type_name)
        base_text = self._base(instance.values)
        formatter = self._formatters.get(instance.type_name)
        if formatter is None:
            return base_text
        return formatter(instance.values, base_text)
