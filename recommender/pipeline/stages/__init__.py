"""Pipeline stages for entity recommendation flows."""

from .combinators import (
    SeedStage,
    SetStage,
    SetValStage,
    TakeStage,
    DedupeStage,
    DiversifyStage,
    SortStage,
    seed,
    set_attr,
    set_val,
    take,
    dedupe,
    diversify,
    sort,
)
from .signals import SignalStage, extract_signals, liked, saved, liked_authors, saved_authors
from .similarity import SimilarStage, similar
from .enrichment import EnrichStage, enrich_song, enrich_author
from .author_songs import RecentSongsStage, recent_songs

__all__ = [
    "SeedStage",
    "SetStage",
    "SetValStage",
    "TakeStage",
    "DedupeStage",
    "DiversifyStage",
    "SortStage",
    "seed",
    "set_attr",
    "set_val",
    "take",
    "dedupe",
    "diversify",
    "sort",
    "SignalStage",
    "extract_signals",
    "liked",
    "saved",
    "liked_authors",
    "saved_authors",
    "SimilarStage",
    "similar",
    "EnrichStage",
    "enrich_song",
    "enrich_author",
    "RecentSongsStage",
    "recent_songs",
]
