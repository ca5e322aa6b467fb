"""Redis-backed nearest-neighbor index.

Each named index is an independent neighbor graph. The neighbors of ``id``
in index ``name`` are stored as a Redis list under ``"{name}:{id}"``, best
match first.

Neighbor files loaded by ``populate`` hold one entry per line:

    <id> <neighbor> <neighbor> ...
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from recommender.pipeline.options import SimilarityOptions
from recommender.pipeline.results import Success, settle

logger = logging.getLogger(__name__)


def index_key(index_name: str, entity_id: Any) -> str:
    return f"{index_name}:{entity_id}"


def _coerce_like(raw: str, like: Any) -> Any:
    # Neighbors share the key type of the id they were looked up by
    if isinstance(like, int) and not isinstance(like, bool):
        try:
            return int(raw)
        except ValueError:
            return raw
    return raw


class SimilarityIndex:
    """
    Nearest-neighbor lookups against Redis lists.

    Args:
        redis: ``redis.asyncio`` client (decode_responses=True); defaults to
            the global pool from recommender.redis_client
    """

    def __init__(self, redis=None):
        if redis is None:
            from recommender.redis_client import get_redis_pool

            redis = get_redis_pool()
        self._redis = redis

    async def _neighbors(self, entity_id: Any, options: SimilarityOptions) -> List[Any]:
        raw = await self._redis.lrange(index_key(options.index_name, entity_id), 0, options.fan_out - 1)
        return [_coerce_like(value, entity_id) for value in raw]

    async def get_similar(self, ids: Sequence[Any], options: SimilarityOptions) -> Dict[Any, List[Any]]:
        """
        Fetch up to ``options.fan_out`` neighbors for every id.

        Returns:
            Dict id -> neighbor ids. Ids without neighbors, and ids whose
            lookup failed, are omitted.
        """
        ids = list(dict.fromkeys(ids))
        results = await settle(
            (self._neighbors(entity_id, options) for entity_id in ids),
            label=f"similarity lookup ({options.index_name})",
        )

        return {
            entity_id: result.value
            for entity_id, result in zip(ids, results)
            if isinstance(result, Success) and result.value
        }

    async def populate(self, index_name: str, similarity_map: Mapping[Any, Sequence[Any]], replace: bool = True) -> int:
        """
        Write neighbor lists for ``index_name``.

        Args:
            index_name: Index namespace
            similarity_map: id -> neighbors, best match first
            replace: Drop existing lists for these ids before writing

        Returns:
            Number of ids written
        """
        written = 0
        async with self._redis.pipeline(transaction=False) as pipe:
            for entity_id, neighbors in similarity_map.items():
                if not neighbors:
                    continue
                key = index_key(index_name, entity_id)
                if replace:
                    pipe.delete(key)
                pipe.rpush(key, *neighbors)
                written += 1
            await pipe.execute()

        logger.info(f"Populated index '{index_name}' with {written} ids")
        return written


def parse_neighbor_lines(lines) -> Dict[str, List[str]]:
    """Parse ``<id> <neighbor> ...`` lines; blank lines are skipped."""
    similarity_map: Dict[str, List[str]] = {}
    for line in lines:
        entries = line.split()
        if not entries:
            continue
        similarity_map[entries[0]] = entries[1:]
    return similarity_map


def read_neighbor_file(path: str | Path) -> Dict[str, List[str]]:
    with open(path) as f:
        return parse_neighbor_lines(f)
