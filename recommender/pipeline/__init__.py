"""Composable entity pipeline for recommendation flows.

This module provides a pipeline abstraction where:
- Each Stage is an async transform from a list of entities to a list of entities
- Stages are chained with flow() and fanned in with merge()
- Entities are immutable; stages return new entities
- Failed fan-out lookups and merge branches count as empty results
"""

from .entity import Entity, as_entities
from .options import (
    FlowConfigurationError,
    OptionsProvider,
    SimilarityOptions,
    SignalOptions,
    AuthorSongsOptions,
    flow_invocation,
)
from .results import Success, Failure, BranchResult, settle, collect_successes
from .base import Stage, Flow, Merge, flow, merge, merge_results

__all__ = [
    "Entity",
    "as_entities",
    "FlowConfigurationError",
    "OptionsProvider",
    "SimilarityOptions",
    "SignalOptions",
    "AuthorSongsOptions",
    "flow_invocation",
    "Success",
    "Failure",
    "BranchResult",
    "settle",
    "collect_successes",
    "Stage",
    "Flow",
    "Merge",
    "flow",
    "merge",
    "merge_results",
]
