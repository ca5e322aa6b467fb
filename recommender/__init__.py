"""Entity flow recommender.

Recommendation lists are computed by composable async stages (see
recommender.pipeline) over a PostgreSQL catalog and a Redis neighbor index.
"""

__version__ = "0.1.0"
