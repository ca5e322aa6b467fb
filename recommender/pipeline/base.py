import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, List, Sequence

from .entity import Entity, as_entities
from .options import flow_invocation
from .results import collect_successes, settle

logger = logging.getLogger(__name__)


class Stage(ABC):
    """Base class for all pipeline stages. Must be async and return new entities (never mutate input)."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def execute(self, entities: List[Entity]) -> List[Entity]:
        """
        Execute stage logic on a normalized list of entities.

        NEVER mutate the input entities. Always return new ones.
        """
        pass

    async def __call__(self, value: Any) -> List[Entity]:
        """Run the stage on an entity, a raw id, or a list of either."""
        with flow_invocation():
            return await self.execute(as_entities(value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class Flow(Stage):
    """Chain of stages with sequential async execution. Immutable - then() returns new flow."""

    def __init__(self, stages: Sequence[Stage] = (), name: str | None = None):
        self.stages = tuple(stages)
        self._name = name

    @property
    def name(self) -> str:
        if self._name:
            return self._name
        return " -> ".join(s.name for s in self.stages) or "empty"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        current = entities
        for stage in self.stages:
            current = await stage.execute(current)
            logger.debug(f"{stage.name}: {len(current)} entities")
        return current

    def then(self, *stages: Stage) -> "Flow":
        """
        Return new flow with stages appended.

        Creates a new flow, leaves the original unchanged.
        """
        return Flow(self.stages + stages, name=self._name)

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        stage_names = [s.name for s in self.stages]
        return f"Flow(stages={stage_names})"


def flow(*stages: Stage, name: str | None = None) -> Flow:
    """Compose stages sequentially: the output of each stage feeds the next."""
    return Flow(stages, name=name)


async def merge_results(*branches: Awaitable[List[Entity]]) -> List[Entity]:
    """
    Fan-in combinator over branch computations already in flight.

    Waits for every branch to settle, drops the ones that failed, and
    concatenates the rest in declaration order (each branch's own order kept).
    """
    results = await settle(branches, label="merge branch")
    merged: List[Entity] = []
    for entities in collect_successes(results):
        merged.extend(entities)
    return merged


class Merge(Stage):
    """Applies every branch to the same upstream input and merges their outputs."""

    def __init__(self, branches: Sequence[Stage]):
        self.branches = tuple(branches)

    @property
    def name(self) -> str:
        return f"merge({', '.join(b.name for b in self.branches)})"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        return await merge_results(*(branch.execute(entities) for branch in self.branches))


def merge(*branches: Stage) -> Merge:
    return Merge(branches)
