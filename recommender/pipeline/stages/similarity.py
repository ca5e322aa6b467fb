"""Similarity expansion stage backed by a nearest-neighbor index."""

import logging
from typing import Any, List

from ..base import Stage
from ..entity import Entity
from ..options import OptionsProvider, SimilarityOptions

logger = logging.getLogger(__name__)


class SimilarStage(Stage):
    """
    Replaces every entity with its nearest neighbors from a named index.

    Each output entity is a copy of its parent with ``id`` replaced by a
    neighbor id, so attributes set earlier in the flow (``recommender``,
    ``index``, ...) survive the expansion. Entities without neighbors are
    dropped.

    Args:
        index: Object exposing ``async get_similar(ids, SimilarityOptions)``
        options: SimilarityOptions, a mapping with ``index_name``/``fan_out``,
            or a zero-argument callable producing either
    """

    def __init__(self, index, options: Any):
        self._index = index
        self.options = OptionsProvider(options, SimilarityOptions.parse)

    @property
    def name(self) -> str:
        if self.options.is_lazy:
            return "similar(lazy)"
        return f"similar({self.options.resolve().index_name})"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        options = self.options.resolve()
        if not entities:
            return []

        ids = list(dict.fromkeys(entity.id for entity in entities))
        similar_map = await self._index.get_similar(ids, options)

        expanded = [
            entity.merge({"id": neighbor_id})
            for entity in entities
            for neighbor_id in similar_map.get(entity.id) or []
        ]
        logger.debug(
            f"similar({options.index_name}): {len(entities)} entities -> {len(expanded)} neighbors"
        )
        return expanded


def similar(index, options: Any) -> SimilarStage:
    return SimilarStage(index, options)
