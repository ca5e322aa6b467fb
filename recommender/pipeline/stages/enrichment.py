"""Catalog enrichment stages."""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping

from ..base import Stage
from ..entity import Entity

logger = logging.getLogger(__name__)


class EnrichStage(Stage):
    """
    Joins entities against catalog records by id.

    One batch fetch per invocation; each entity gets its record merged on
    top (record fields overwrite same-named entity fields). Entities without
    a record are passed through unchanged.
    """

    def __init__(self, fetch: Callable[[List[Any]], Awaitable[List[Mapping]]], name: str = "enrich"):
        self._fetch = fetch
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        if not entities:
            return []

        ids = list(dict.fromkeys(entity.id for entity in entities))
        records = await self._fetch(ids)
        by_id: Dict[Any, Mapping] = {record["id"]: record for record in records}

        missing = len([i for i in ids if i not in by_id])
        if missing:
            logger.debug(f"{self.name}: {missing} of {len(ids)} ids have no catalog record")

        return [entity.merge(by_id[entity.id]) if entity.id in by_id else entity for entity in entities]


def enrich_song(catalog) -> EnrichStage:
    return EnrichStage(catalog.enrich_song_data, name="enrich_song")


def enrich_author(catalog) -> EnrichStage:
    return EnrichStage(catalog.enrich_author_data, name="enrich_author")
