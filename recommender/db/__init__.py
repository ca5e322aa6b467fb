"""Database access layer for the recommender.

Main exports:
- DatabaseConfig: Pool configuration
- init_pool / get_pool / close_pool: asyncpg pool lifecycle
- check_pool_health: Health check for monitoring
- SelectQuery: Immutable SELECT builder used by the stores

Schema models live in recommender.db.schema (imported lazily by the CLI,
since it pulls in SQLAlchemy).
"""

from .pool import (
    DatabaseConfig,
    init_pool,
    get_pool,
    close_pool,
    get_config,
    check_pool_health,
)
from .query_builders import SelectQuery

__all__ = [
    "DatabaseConfig",
    "init_pool",
    "get_pool",
    "close_pool",
    "get_config",
    "check_pool_health",
    "SelectQuery",
]
