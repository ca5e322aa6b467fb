"""Async query helpers over the shared asyncpg pool.

Usage:
    rows = await fetch_all("SELECT id, name FROM authors WHERE id = ANY($1::text[])", ids)

Notes:
    - Uses $1, $2, $3 parameter placeholders (asyncpg format)
    - Rows are returned as plain dicts
    - Errors are logged with the failing query and re-raised; callers decide
      whether a failure is recoverable
"""

import logging
from typing import Any, Dict, List

from recommender.db.pool import get_pool

logger = logging.getLogger(__name__)


async def fetch_all(query: str, *args) -> List[Dict[str, Any]]:
    """
    Fetch all rows from the database.

    Args:
        query: SQL query with $1, $2, ... placeholders
        *args: Query parameters

    Returns:
        List of dicts with column names as keys (empty list if no rows)
    """
    pool = get_pool()

    try:
        async with pool.acquire() as conn:
            rows = await conn.fetch(query, *args)
            return [dict(row) for row in rows]

    except Exception as e:
        logger.error(f"Error in fetch_all: {e}", exc_info=True)
        logger.error(f"Query: {query}")
        logger.error(f"Args: {args}")
        raise

