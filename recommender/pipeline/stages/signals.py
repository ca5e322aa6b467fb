"""Signal stages: user entities fan out into the items they recently interacted with."""

import logging
from functools import partial
from typing import Any, Awaitable, Callable, List, Optional

from ..base import Stage
from ..entity import Entity
from ..options import OptionsProvider, SignalOptions
from ..results import Success, settle

logger = logging.getLogger(__name__)

SignalFetch = Callable[[Any], Awaitable[Optional[List[Any]]]]


async def extract_signals(entities: List[Entity], fetch: SignalFetch) -> List[Entity]:
    """
    Fan each parent entity out into one entity per child id returned by ``fetch``.

    Args:
        entities: Parent entities (usually users)
        fetch: Async lookup ``parent_id -> child ids`` (None or [] means no signals)

    Returns:
        Child entities ``{id: child, user: parent.id, **parent_attrs}`` grouped
        per parent in input order

    Notes:
        - All lookups run concurrently; a failing lookup drops only its parent,
          whether it raises while being awaited or when first called
        - The parent's id is kept under ``user`` because ``id`` is replaced
    """
    results = await settle([partial(fetch, entity.id) for entity in entities], label="signal lookup")

    children: List[Entity] = []
    for entity, result in zip(entities, results):
        if not isinstance(result, Success) or not result.value:
            continue
        rest = entity.without("id")
        for child_id in result.value:
            children.append(Entity({"id": child_id, "user": entity.id, **rest}))
    return children


class SignalStage(Stage):
    """
    Fan-out stage over a per-user signal lookup.

    Args:
        fetch: Async ``(parent_id, SignalOptions) -> child ids``
        options: SignalOptions, a mapping, or a zero-argument callable
            producing either (resolved once per flow invocation)
        name: Stage name for logs and repr
    """

    def __init__(
        self,
        fetch: Callable[[Any, SignalOptions], Awaitable[Optional[List[Any]]]],
        options: Any = None,
        name: str = "signals",
    ):
        self._fetch = fetch
        self.options = OptionsProvider(options, SignalOptions.parse)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        options = self.options.resolve()
        children = await extract_signals(entities, lambda parent_id: self._fetch(parent_id, options))
        logger.debug(f"{self.name}: {len(entities)} parents -> {len(children)} signals")
        return children


def liked(store, options: Any = None) -> SignalStage:
    """Recently liked songs for each user entity."""
    return SignalStage(store.get_recent_liked_ids, options, name="liked")


def saved(store, options: Any = None) -> SignalStage:
    """Recently saved songs for each user entity."""
    return SignalStage(store.get_recent_saved_ids, options, name="saved")


def liked_authors(store, options: Any = None) -> SignalStage:
    """Authors of recently liked songs for each user entity."""
    return SignalStage(store.get_recent_liked_author_ids, options, name="liked_authors")


def saved_authors(store, options: Any = None) -> SignalStage:
    """Authors of recently saved songs for each user entity."""
    return SignalStage(store.get_recent_saved_author_ids, options, name="saved_authors")
