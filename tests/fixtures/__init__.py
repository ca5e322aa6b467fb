"""Shared test fixtures for recommender tests.

This package provides:
- In-memory fake collaborators (signal store, similarity index, catalog,
  author songs) that record their calls
- Sample catalog records
"""

__all__ = [
    "fake_stores",
    "sample_data",
]
