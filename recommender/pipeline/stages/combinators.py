"""List combinators: seed, set, set_val, take, dedupe, diversify, sort."""

import numbers
import random
from typing import Any, List, Optional

from ..base import Stage
from ..entity import Entity
from ..options import FlowConfigurationError


class SeedStage(Stage):
    """Wraps raw identifiers as entities. Entities pass through unchanged."""

    def __init__(self, kind: str = "entity"):
        self.kind = kind

    @property
    def name(self) -> str:
        return f"seed({self.kind})"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        # Stage.__call__ already normalized raw ids
        return list(entities)


class SetStage(Stage):
    """Copies attribute ``source`` to ``target`` on every entity."""

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target

    @property
    def name(self) -> str:
        return f"set({self.source}, {self.target})"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        result = []
        for entity in entities:
            if self.source in entity:
                result.append(entity.merge({self.target: entity[self.source]}))
            elif self.target == "id":
                # id is required, so a missing source leaves it as is
                result.append(entity)
            else:
                result.append(Entity(entity.without(self.target)))
        return result


class SetValStage(Stage):
    """Assigns a literal value to ``key`` on every entity."""

    def __init__(self, key: str, value: Any):
        self.key = key
        self.value = value

    @property
    def name(self) -> str:
        return f"set_val({self.key}, {self.value!r})"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        return [entity.merge({self.key: self.value}) for entity in entities]


class TakeStage(Stage):
    """Keeps the first ``limit`` entities in upstream order."""

    def __init__(self, limit: int):
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
            raise FlowConfigurationError(f"take() requires a non-negative integer, got {limit!r}")
        self.limit = limit

    @property
    def name(self) -> str:
        return f"take({self.limit})"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        return entities[: self.limit]


class DedupeStage(Stage):
    """Keeps the first entity for each distinct value of ``by`` (first-seen order)."""

    def __init__(self, by: str):
        self.by = by

    @property
    def name(self) -> str:
        return f"dedupe({self.by})"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        seen = set()
        result = []
        for entity in entities:
            key = entity.get(self.by)
            if key in seen:
                continue
            seen.add(key)
            result.append(entity)
        return result


class DiversifyStage(Stage):
    """
    Randomly permutes the entities.

    ``by`` names the attribute that similar items share (usually
    ``recommender``). It does not influence the permutation yet: the
    stage is a plain full shuffle.
    """

    def __init__(self, by: str, rng: Optional[random.Random] = None):
        self.by = by
        self._rng = rng or random.Random()

    @property
    def name(self) -> str:
        return f"diversify({self.by})"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        shuffled = list(entities)
        self._rng.shuffle(shuffled)
        return shuffled


def _sort_key(value: Any):
    if isinstance(value, numbers.Number):
        return (0, "", value)
    return (1, type(value).__name__, value)


class SortStage(Stage):
    """
    Stable ascending sort by ``by``; entities without the attribute go last.

    Numbers sort before other values, and values of other types are grouped
    by type name, so mixed attributes never fail to compare.
    """

    def __init__(self, by: str):
        self.by = by

    @property
    def name(self) -> str:
        return f"sort({self.by})"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        with_value = [e for e in entities if e.get(self.by) is not None]
        without_value = [e for e in entities if e.get(self.by) is None]
        return sorted(with_value, key=lambda e: _sort_key(e[self.by])) + without_value


def seed(kind: str = "entity") -> SeedStage:
    return SeedStage(kind)


def set_attr(source: str, target: str) -> SetStage:
    return SetStage(source, target)


def set_val(key: str, value: Any) -> SetValStage:
    return SetValStage(key, value)


def take(limit: int) -> TakeStage:
    return TakeStage(limit)


def dedupe(by: str) -> DedupeStage:
    return DedupeStage(by)


def diversify(by: str, rng: Optional[random.Random] = None) -> DiversifyStage:
    return DiversifyStage(by, rng=rng)


def sort(by: str) -> SortStage:
    return SortStage(by)
