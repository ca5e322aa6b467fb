"""Collaborator stores queried by the pipeline stages."""

from .signal_store import SignalStore
from .similarity_index import SimilarityIndex, read_neighbor_file, parse_neighbor_lines
from .catalog_store import CatalogStore
from .author_songs_store import AuthorSongsStore

__all__ = [
    "SignalStore",
    "SimilarityIndex",
    "read_neighbor_file",
    "parse_neighbor_lines",
    "CatalogStore",
    "AuthorSongsStore",
]
