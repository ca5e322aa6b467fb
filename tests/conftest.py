"""Pytest configuration and shared fixtures for recommender tests.

This module provides:
- Basic pytest configuration (markers)
- Fake collaborator fixtures wired with the sample catalog
- Environment isolation between tests
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path to allow imports of recommender and cli
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from recommender.config import SignalsConfig, SimilarAuthorsConfig, UserFlowConfig, RecsConfig  # noqa: E402
from recommender.pipeline import AuthorSongsOptions, SimilarityOptions  # noqa: E402
from recommender.pipeline.recommendation_flows import Stores  # noqa: E402
from tests.fixtures.fake_stores import (  # noqa: E402
    FakeAuthorSongs,
    FakeCatalog,
    FakeSignalStore,
    FakeSimilarityIndex,
)
from tests.fixtures.sample_data import AUTHORS, JOE, MIKE, SONGS  # noqa: E402


# ==================== Pytest Configuration ====================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "unit: mark test as a unit test (fast, isolated)"
    )
    config.addinivalue_line(
        "markers",
        "integration: mark test as an integration test (multiple components)"
    )


# ==================== Environment Fixtures ====================

@pytest.fixture(scope="function", autouse=True)
def isolate_environment():
    """Restore environment variables after every test."""
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


# ==================== Collaborator Fixtures ====================

@pytest.fixture
def signal_store() -> FakeSignalStore:
    return FakeSignalStore(
        liked={JOE: [20000], MIKE: [20005]},
        saved={JOE: [20002]},
        liked_authors={JOE: ["disturbed"], MIKE: ["eminem"]},
        saved_authors={JOE: ["metallica"]},
    )


@pytest.fixture
def similarity_index() -> FakeSimilarityIndex:
    return FakeSimilarityIndex({
        "songs_collab_v1": {
            20000: [20001, 20002],
            20002: [20004, 20000],
            20005: [20006],
        },
        "authors_collab_v1": {
            "disturbed": ["godsmack", "metallica"],
            "metallica": ["acdc"],
            "eminem": ["yelawolf"],
        },
        "artist:negative": {"disturbed": ["godsmack"]},
        "artist:partial": {"disturbed": ["metallica", "godsmack"]},
        "artist:full": {"disturbed": ["acdc"], "eminem": ["yelawolf"]},
    })


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog(songs=SONGS, authors=AUTHORS)


@pytest.fixture
def author_songs() -> FakeAuthorSongs:
    return FakeAuthorSongs({
        "disturbed": [20001, 20000],
        "metallica": [20002],
        "godsmack": [20003],
        "acdc": [20004],
        "eminem": [20005],
        "yelawolf": [20006],
    })


@pytest.fixture
def stores(signal_store, similarity_index, catalog, author_songs) -> Stores:
    return Stores(
        signals=signal_store,
        similarity=similarity_index,
        catalog=catalog,
        author_songs=author_songs,
    )


@pytest.fixture
def recs_config() -> RecsConfig:
    return RecsConfig(
        signals=SignalsConfig(window_days=2, limit=50),
        similar_authors=SimilarAuthorsConfig(
            branches={
                "negative": SimilarityOptions("artist:negative", 20),
                "partial": SimilarityOptions("artist:partial", 20),
                "full": SimilarityOptions("artist:full", 20),
            },
            take=20,
        ),
        songs=UserFlowConfig(similarity=SimilarityOptions("songs_collab_v1", 5), take=5),
        authors=UserFlowConfig(
            similarity=SimilarityOptions("authors_collab_v1", 3),
            take=5,
            recent_songs=AuthorSongsOptions(fan_out=2),
        ),
    )
