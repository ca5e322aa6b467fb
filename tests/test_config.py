"""Unit tests for flow configuration loading (recommender/config.py)."""

from datetime import datetime, timezone

import pytest

from recommender.config import (
    DEFAULT_CONFIG_PATH,
    SignalsConfig,
    load_recs_config,
    parse_recs_config,
)
from recommender.pipeline import FlowConfigurationError, SimilarityOptions


MINIMAL = {
    "similar_authors": {"branches": {"only": {"index_name": "artist:only"}}},
    "songs": {"similarity": {"index_name": "songs_v2", "fan_out": 7}},
    "authors": {"similarity": {"indexName": "authors_v2", "fanOut": 2}, "take": 3},
}


@pytest.mark.unit
def test_load_default_config():
    config = load_recs_config()

    assert list(config.similar_authors.branches) == ["negative", "partial", "full"]
    assert config.similar_authors.branches["full"] == SimilarityOptions("artist:collab:nn:full:big", 20)
    assert config.similar_authors.take == 20
    assert config.songs.similarity == SimilarityOptions("songs_collab_v1", 5)
    assert config.authors.recent_songs.fan_out == 2
    assert config.signals == SignalsConfig(window_days=2, limit=50)


@pytest.mark.unit
def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "recs.yaml"
    path.write_text(
        "similar_authors:\n"
        "  branches:\n"
        "    main: {index_name: 'artist:main'}\n"
        "songs:\n"
        "  similarity: {index_name: songs_v9}\n"
        "authors:\n"
        "  similarity: {index_name: authors_v9}\n"
    )
    monkeypatch.setenv("RECS_CONFIG_PATH", str(path))

    config = load_recs_config()

    assert config.songs.similarity == SimilarityOptions("songs_v9", 10)
    assert config.similar_authors.branches == {"main": SimilarityOptions("artist:main", 10)}


@pytest.mark.unit
def test_parse_defaults():
    config = parse_recs_config(MINIMAL)

    assert config.signals.window_days == 2
    assert config.signals.limit is None
    assert config.songs.take == 5
    assert config.songs.recent_songs is None
    assert config.authors.similarity == SimilarityOptions("authors_v2", 2)
    assert config.authors.take == 3


@pytest.mark.unit
@pytest.mark.parametrize("section", ["similar_authors", "songs", "authors"])
def test_missing_section_raises(section):
    data = {k: v for k, v in MINIMAL.items() if k != section}

    with pytest.raises(FlowConfigurationError, match=section):
        parse_recs_config(data)


@pytest.mark.unit
def test_similarity_without_index_name_raises():
    data = dict(MINIMAL, songs={"similarity": {"fan_out": 5}})

    with pytest.raises(FlowConfigurationError):
        parse_recs_config(data)


@pytest.mark.unit
def test_signal_options_provider_uses_window():
    now = datetime(2024, 5, 3, tzinfo=timezone.utc)
    provide = SignalsConfig(window_days=2, limit=10).options_provider(now=lambda: now)

    options = provide()

    assert options.since == datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert options.limit == 10


@pytest.mark.unit
def test_default_config_path_exists():
    assert DEFAULT_CONFIG_PATH.exists()
