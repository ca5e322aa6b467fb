"""Catalog store: descriptive song and author records."""

import logging
from typing import Any, Dict, List, Sequence

from recommender.db.query_builders import SelectQuery
from recommender.db_helpers import fetch_all

logger = logging.getLogger(__name__)


class CatalogStore:
    """Batch lookups of catalog records keyed by ``id``."""

    async def enrich_song_data(self, song_ids: Sequence[Any]) -> List[Dict[str, Any]]:
        """
        Get song records (id, name, length, genre, author_id, created_at).

        Args:
            song_ids: Song ids (integers, or numeric strings)

        Returns:
            One record per known id; unknown ids are absent
        """
        if not song_ids:
            return []

        query, params = (SelectQuery("songs")
            .columns("id", "name", "length", "genre", "author_id", "created_at")
            .where("id = ANY($1::bigint[])", [int(i) for i in song_ids])
            .build())
        return await fetch_all(query, *params)

    async def enrich_author_data(self, author_ids: Sequence[Any]) -> List[Dict[str, Any]]:
        """Get author records (id, name); unknown ids are absent."""
        if not author_ids:
            return []

        query, params = (SelectQuery("authors")
            .columns("id", "name")
            .where("id = ANY($1::text[])", [str(i) for i in author_ids])
            .build())
        return await fetch_all(query, *params)
