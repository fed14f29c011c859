"""Repository base class.

Thin wrapper over an EntityStore bound to one type of the hierarchy, for
DDD-oriented usage.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from inherit_map.core.exceptions import EntityNotFoundError
from inherit_map.core.store import EntityStore
from inherit_map.model.hierarchy import EntityInstance
from inherit_map.translate.actions import OrderBy
from inherit_map.translate.predicate import Predicate


class Repository:
    """Data access for one type of a hierarchy.

    Bound to the root type, reads are polymorphic. Writes always need a
    concrete type, taken from the instance itself.
    """

    def __init__(self, store: EntityStore, type_name: str) -> None:
        store.hierarchy.get(type_name)
        self.store = store
        self.type_name = type_name

    def all(self, order_by: OrderBy | str | None = None) -> list[EntityInstance]:
        return self.store.read(self.type_name, order_by=order_by)

    def filter(
        self, predicate: Predicate, order_by: OrderBy | str | None = None
    ) -> list[EntityInstance]:
        return self.store.read(self.type_name, predicate, order_by)

    def get(self, identifier: Any) -> EntityInstance:
        """Fetch by identifier.

        Raises:
            EntityNotFoundError: If no entity of this type has the identifier.
        """
        entity = self.store.get(identifier, self.type_name)
        if entity is None:
            raise EntityNotFoundError(self.type_name, identifier)
        return entity

    def add(self, instance: EntityInstance) -> EntityInstance:
        self._check(instance)
        return self.store.insert(instance)

    def save(self, instance: EntityInstance, changed: Iterable[str] | None = None) -> None:
        self._check(instance)
        self.store.update(instance, changed)

    def remove(self, instance: EntityInstance) -> bool:
        self._check(instance)
        return self.store.delete(instance.identifier, instance.type_name)

    def count(self, predicate: Predicate | None = None) -> int:
        return self.store.count(self.type_name, predicate)

    def _check(self, instance: EntityInstance) -> None:
        if self.store.hierarchy.is_root(self.type_name):
            return
        if instance.type_name != self.type_name:
            raise TypeError(
                f"{type(self).__name__} for '{self.type_name}' "
                f"cannot store a '{instance.type_name}'"
            )
