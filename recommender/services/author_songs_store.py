"""Author-songs store: newest songs per author."""

from typing import Any, Dict, List, Optional, Sequence

from recommender.db.query_builders import SelectQuery
from recommender.db_helpers import fetch_all
from recommender.pipeline.options import AuthorSongsOptions


def group_songs_by_author(rows: List[Dict[str, Any]], fan_out: Optional[int] = None) -> Dict[Any, List[Any]]:
    """Group ``(song_id, author_id)`` rows per author, keeping row order, capped at ``fan_out``."""
    grouped: Dict[Any, List[Any]] = {}
    for row in rows:
        grouped.setdefault(row["author_id"], []).append(row["song_id"])

    if fan_out is not None:
        grouped = {author_id: songs[:fan_out] for author_id, songs in grouped.items()}
    return {author_id: songs for author_id, songs in grouped.items() if songs}


class AuthorSongsStore:
    async def get_recent_by_author(
        self, author_ids: Sequence[Any], options: Optional[AuthorSongsOptions] = None
    ) -> Dict[Any, List[Any]]:
        """
        Get the newest song ids of each author.

        Returns:
            Dict author_id -> song ids, newest first; authors without songs
            are omitted
        """
        if not author_ids:
            return {}

        options = options or AuthorSongsOptions()
        query, params = (SelectQuery("songs")
            .columns("id AS song_id", "author_id")
            .where("author_id = ANY($1::text[])", [str(i) for i in author_ids])
            .order_by("created_at DESC, id DESC")
            .build())

        rows = await fetch_all(query, *params)
        return group_songs_by_author(rows, options.fan_out)
