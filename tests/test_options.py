"""Unit tests for stage options and options providers.

This module tests:
- Typed options validation (SimilarityOptions, SignalOptions, AuthorSongsOptions)
- Parsing of mapping options with both naming conventions
- OptionsProvider literal vs lazy sources
- Once-per-invocation resolution of lazy sources
"""

import asyncio
from datetime import datetime, timezone

import pytest

from recommender.pipeline import (
    AuthorSongsOptions,
    Entity,
    FlowConfigurationError,
    OptionsProvider,
    SignalOptions,
    SimilarityOptions,
    flow,
    flow_invocation,
    merge,
)
from recommender.pipeline.stages import SignalStage, similar
from tests.fixtures.fake_stores import FakeSimilarityIndex


# ==================== Typed Options ====================


@pytest.mark.unit
def test_similarity_options_parse_accepts_both_spellings():
    assert SimilarityOptions.parse({"indexName": "idx", "fanOut": 3}) == SimilarityOptions("idx", 3)
    assert SimilarityOptions.parse({"index_name": "idx", "fan_out": 4}) == SimilarityOptions("idx", 4)


@pytest.mark.unit
def test_similarity_options_default_fan_out():
    assert SimilarityOptions.parse({"index_name": "idx"}).fan_out == 10


@pytest.mark.unit
@pytest.mark.parametrize("value", [
    {"fan_out": 3},
    {"index_name": "", "fan_out": 3},
    {"index_name": "idx", "fan_out": 0},
    {"index_name": "idx", "fan_out": -2},
    {"index_name": "idx", "fan_out": "5"},
    "idx",
    None,
])
def test_similarity_options_rejects_invalid(value):
    with pytest.raises(FlowConfigurationError):
        SimilarityOptions.parse(value)


@pytest.mark.unit
def test_flow_configuration_error_is_value_error():
    assert issubclass(FlowConfigurationError, ValueError)


@pytest.mark.unit
def test_signal_options_parse_unix_timestamp():
    options = SignalOptions.parse({"last_ts": 0, "limit": 10})

    assert options.since == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert options.limit == 10


@pytest.mark.unit
def test_signal_options_parse_none_is_unfiltered():
    assert SignalOptions.parse(None) == SignalOptions()


@pytest.mark.unit
@pytest.mark.parametrize("value", [{"since": "yesterday"}, {"limit": -1}, 42])
def test_signal_options_rejects_invalid(value):
    with pytest.raises(FlowConfigurationError):
        SignalOptions.parse(value)


@pytest.mark.unit
def test_author_songs_options():
    assert AuthorSongsOptions.parse(None).fan_out is None
    assert AuthorSongsOptions.parse({"fanOut": 2}).fan_out == 2

    with pytest.raises(FlowConfigurationError):
        AuthorSongsOptions.parse({"fan_out": -1})


# ==================== OptionsProvider ====================


@pytest.mark.unit
def test_literal_provider_is_validated_eagerly():
    with pytest.raises(FlowConfigurationError):
        OptionsProvider({"index_name": "idx", "fan_out": 0}, SimilarityOptions.parse)


@pytest.mark.unit
def test_literal_provider_resolves_to_parsed_value():
    provider = OptionsProvider({"index_name": "idx", "fan_out": 2}, SimilarityOptions.parse)

    assert not provider.is_lazy
    assert provider.resolve() == SimilarityOptions("idx", 2)


@pytest.mark.unit
def test_lazy_provider_outside_invocation_evaluates_every_time():
    calls = []

    def source():
        calls.append(1)
        return {"index_name": "idx", "fan_out": len(calls)}

    provider = OptionsProvider(source, SimilarityOptions.parse)

    assert provider.is_lazy
    assert provider.resolve().fan_out == 1
    assert provider.resolve().fan_out == 2


@pytest.mark.unit
def test_lazy_provider_is_cached_within_invocation():
    calls = []

    def source():
        calls.append(1)
        return {"index_name": "idx", "fan_out": len(calls)}

    provider = OptionsProvider(source, SimilarityOptions.parse)

    with flow_invocation():
        first = provider.resolve()
        with flow_invocation():
            nested = provider.resolve()
        assert provider.resolve() is first

    assert nested is first
    assert len(calls) == 1


@pytest.mark.unit
def test_lazy_provider_invalid_value_raises_on_resolve():
    provider = OptionsProvider(lambda: {"fan_out": 3}, SimilarityOptions.parse)

    with pytest.raises(FlowConfigurationError):
        provider.resolve()


# ==================== Per-Invocation Resolution in Flows ====================


@pytest.mark.asyncio
@pytest.mark.unit
async def test_lazy_options_resolved_once_per_invocation_across_branches():
    """A thunk shared by concurrent merge branches is evaluated once per flow call."""
    evaluations = []
    seen_options = []

    def window():
        evaluations.append(1)
        return {"last_ts": 1_700_000_000 + len(evaluations), "limit": 5}

    async def fetch(user_id, options):
        await asyncio.sleep(0)
        seen_options.append(options)
        return [user_id * 10]

    shared = OptionsProvider(window, SignalOptions.parse)
    pipeline = flow(merge(SignalStage(fetch, shared, name="a"), SignalStage(fetch, shared, name="b")))

    await pipeline([1, 2])
    assert len(evaluations) == 1
    assert len(seen_options) == 4
    assert all(o is seen_options[0] for o in seen_options)

    await pipeline([1])
    assert len(evaluations) == 2
    assert seen_options[-1].since != seen_options[0].since


@pytest.mark.asyncio
@pytest.mark.unit
async def test_one_thunk_given_to_several_stages_is_evaluated_once():
    evaluations = []

    def window():
        evaluations.append(1)
        return {"limit": 5}

    async def fetch(user_id, options):
        return [user_id]

    pipeline = flow(
        merge(SignalStage(fetch, window, name="a"), SignalStage(fetch, window, name="b")),
        SignalStage(fetch, window, name="c"),
    )

    result = await pipeline([7])

    assert [e.id for e in result] == [7, 7]
    assert len(evaluations) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_lazy_similarity_options_pick_index_at_call_time():
    index = FakeSimilarityIndex({"a": {1: [2]}, "b": {1: [3]}})
    current = {"index_name": "a"}
    stage = similar(index, lambda: dict(current))

    assert stage.name == "similar(lazy)"
    assert await stage([Entity(id=1)]) == [{"id": 2}]

    current["index_name"] = "b"
    assert await stage([Entity(id=1)]) == [{"id": 3}]
