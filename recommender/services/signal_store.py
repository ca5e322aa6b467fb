"""Signal store: recent likes and saves per user."""

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from recommender.db.query_builders import SelectQuery
from recommender.db_helpers import fetch_all
from recommender.pipeline.options import SignalOptions

logger = logging.getLogger(__name__)

LIKED_TABLE = "users_liked_songs"
SAVED_TABLE = "users_saved_songs"


def _naive_utc(ts: Optional[datetime]) -> Optional[datetime]:
    # event_time is stored as naive UTC
    if ts is None or ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def build_song_signal_query(table: str, user_id: Any, options: SignalOptions):
    """Song ids from ``table`` for one user, most recent first."""
    return (SelectQuery(table)
        .columns("song_id AS id")
        .where("user_id = $1", user_id)
        .where_if(_naive_utc(options.since), "event_time >= $1")
        .order_by("event_time DESC")
        .limit(options.limit)
        .build())


def build_author_signal_query(table: str, user_id: Any, options: SignalOptions):
    """Author ids of the songs in ``table`` for one user, most recent first."""
    return (SelectQuery(f"{table} e JOIN songs s ON s.id = e.song_id")
        .columns("s.author_id AS id")
        .where("e.user_id = $1", user_id)
        .where_if(_naive_utc(options.since), "e.event_time >= $1")
        .order_by("e.event_time DESC")
        .limit(options.limit)
        .build())


class SignalStore:
    """
    Reads user interaction logs.

    Every method returns a list of ids (empty when the user has no
    activity), most recent first, filtered by ``options.since`` and capped
    at ``options.limit``.
    """

    async def _ids(self, query_and_params) -> List[Any]:
        query, params = query_and_params
        rows = await fetch_all(query, *params)
        return [row["id"] for row in rows]

    async def get_recent_liked_ids(self, user_id: Any, options: Optional[SignalOptions] = None) -> List[Any]:
        return await self._ids(build_song_signal_query(LIKED_TABLE, user_id, options or SignalOptions()))

    async def get_recent_saved_ids(self, user_id: Any, options: Optional[SignalOptions] = None) -> List[Any]:
        return await self._ids(build_song_signal_query(SAVED_TABLE, user_id, options or SignalOptions()))

    async def get_recent_liked_author_ids(self, user_id: Any, options: Optional[SignalOptions] = None) -> List[Any]:
        return await self._ids(build_author_signal_query(LIKED_TABLE, user_id, options or SignalOptions()))

    async def get_recent_saved_author_ids(self, user_id: Any, options: Optional[SignalOptions] = None) -> List[Any]:
        return await self._ids(build_author_signal_query(SAVED_TABLE, user_id, options or SignalOptions()))
