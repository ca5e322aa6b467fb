"""Entity records flowing between pipeline stages."""

from collections.abc import Mapping
from typing import Any, Dict, Iterator, List


class Entity(Mapping):
    """
    Immutable attribute mapping that always carries a non-null ``id``.

    Each stage receives a list of entities and produces new entities.
    An entity is never mutated in place: ``merge`` and ``without`` return
    new instances.

    Entities compare equal to any mapping with the same items, so
    ``Entity(id=5, name="X") == {"id": 5, "name": "X"}``.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping | None = None, **attributes: Any):
        values = dict(data or {})
        values.update(attributes)
        if values.get("id") is None:
            raise ValueError(f"Entity requires a non-null 'id', got {values!r}")
        object.__setattr__(self, "_data", values)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Entity is immutable")

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Entity({self._data!r})"

    @property
    def id(self) -> Any:
        return self._data["id"]

    def merge(self, update: Mapping) -> "Entity":
        """
        Return a new entity with ``update`` shallow-merged on top.

        Attributes not mentioned in ``update`` are kept unchanged.
        """
        new_data = self._data.copy()
        new_data.update(update)
        return Entity(new_data)

    def without(self, *keys: str) -> Dict[str, Any]:
        """Return the attributes minus ``keys`` as a plain dict."""
        return {k: v for k, v in self._data.items() if k not in keys}

    def to_dict(self) -> Dict[str, Any]:
        """Convert entity to dict (for serialization)."""
        return self._data.copy()


def as_entities(value: Any) -> List[Entity]:
    """
    Normalize stage input to a list of entities.

    Accepts a single entity, a mapping, a raw identifier, or a list/tuple
    of any of those. Raw identifiers become ``Entity(id=value)``.
    """
    items = list(value) if isinstance(value, (list, tuple)) else [value]
    return [_to_entity(item) for item in items]


def _to_entity(item: Any) -> Entity:
    if isinstance(item, Entity):
        return item
    if isinstance(item, Mapping):
        return Entity(item)
    return Entity(id=item)
