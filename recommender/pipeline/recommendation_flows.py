"""Named recommendation flows built from the stage combinators."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base import Flow, flow, merge
from .entity import Entity
from .stages import (
    dedupe,
    diversify,
    enrich_author,
    enrich_song,
    liked,
    liked_authors,
    recent_songs,
    saved,
    saved_authors,
    seed,
    set_attr,
    set_val,
    similar,
    sort,
    take,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stores:
    """Collaborator handles shared by every flow."""

    signals: Any
    similarity: Any
    catalog: Any
    author_songs: Any


class RecommendationFlows:
    """
    Builds the recommendation flows once and exposes one entry point per flow.

    Flows:
    1. similar_authors: authors similar to seed authors, merged over several
       neighbor graphs
    2. songs_for_user: songs similar to a user's recent likes and saves
    3. authors_for_user: newest songs of authors similar to the ones a user
       recently liked or saved
    4. recommendations_for_user: 2 and 3 merged, enriched and sorted by length
    """

    def __init__(self, stores: Stores, config):
        self.stores = stores
        self.config = config

        signal_options = config.signals.options_provider()

        self.similar_authors_flow = self._build_similar_authors()
        self.songs_flow = self._build_songs(signal_options)
        self.authors_flow = self._build_authors(signal_options)
        self.recommendations_flow = flow(
            merge(self.songs_flow, self.authors_flow),
            dedupe("id"),
            enrich_song(stores.catalog),
            sort("length"),
            name="recommendations",
        )

    def _similar_branch(self, branch_name: str, options) -> Flow:
        return flow(
            set_val("index", branch_name),
            similar(self.stores.similarity, options),
            name=f"similar:{branch_name}",
        )

    def _build_similar_authors(self) -> Flow:
        cfg = self.config.similar_authors
        catalog = self.stores.catalog
        return flow(
            seed("author"),
            set_attr("id", "recommender"),
            enrich_author(catalog),
            set_attr("name", "recommender_name"),
            merge(*(self._similar_branch(name, options) for name, options in cfg.branches.items())),
            dedupe("id"),
            diversify("recommender"),
            take(cfg.take),
            enrich_author(catalog),
            name="similar_authors",
        )

    def _build_songs(self, signal_options) -> Flow:
        cfg = self.config.songs
        signals = self.stores.signals
        return flow(
            seed("user"),
            merge(liked(signals, signal_options), saved(signals, signal_options)),
            dedupe("id"),
            set_attr("id", "recommender"),
            set_val("flow", "song"),
            similar(self.stores.similarity, cfg.similarity),
            dedupe("id"),
            diversify("recommender"),
            take(cfg.take),
            name="songs_for_user",
        )

    def _build_authors(self, signal_options) -> Flow:
        cfg = self.config.authors
        signals = self.stores.signals
        return flow(
            seed("user"),
            merge(liked_authors(signals, signal_options), saved_authors(signals, signal_options)),
            dedupe("id"),
            set_attr("id", "recommender"),
            set_val("flow", "author"),
            similar(self.stores.similarity, cfg.similarity),
            dedupe("id"),
            recent_songs(self.stores.author_songs, cfg.recent_songs),
            diversify("recommender"),
            take(cfg.take),
            name="authors_for_user",
        )

    async def _run(self, named_flow: Flow, seed_ids: Any) -> List[Entity]:
        result = await named_flow(seed_ids)
        logger.info(f"{named_flow.name}: {len(result)} recommendations")
        return result

    async def similar_authors(self, author_ids: Any) -> List[Entity]:
        """Authors similar to the seed author id(s), enriched with author data."""
        return await self._run(self.similar_authors_flow, author_ids)

    async def songs_for_user(self, user_ids: Any) -> List[Entity]:
        return await self._run(self.songs_flow, user_ids)

    async def authors_for_user(self, user_ids: Any) -> List[Entity]:
        return await self._run(self.authors_flow, user_ids)

    async def recommendations_for_user(self, user_ids: Any) -> List[Entity]:
        """Song recommendations from both song and author signals, sorted by length."""
        return await self._run(self.recommendations_flow, user_ids)


def default_stores(redis=None) -> Stores:
    """Stores over the global asyncpg and Redis pools (pools must be initialized)."""
    from ..services import AuthorSongsStore, CatalogStore, SignalStore, SimilarityIndex

    return Stores(
        signals=SignalStore(),
        similarity=SimilarityIndex(redis),
        catalog=CatalogStore(),
        author_songs=AuthorSongsStore(),
    )


def summarize(entities: List[Entity], fields: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    """Plain dicts for printing; keeps only ``fields`` when given."""
    if not fields:
        return [entity.to_dict() for entity in entities]
    return [{k: entity.get(k) for k in ["id", *fields] if k in entity} for entity in entities]
