"""Flow configuration loaded from config/recommendations.yaml."""

import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from dotenv import load_dotenv

from recommender.pipeline.options import (
    AuthorSongsOptions,
    FlowConfigurationError,
    SignalOptions,
    SimilarityOptions,
)

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "recommendations.yaml"


@dataclass(frozen=True)
class SignalsConfig:
    window_days: float = 2
    limit: Optional[int] = 50

    def options_provider(self, now: Callable[[], datetime] = lambda: datetime.now(timezone.utc)) -> Callable[[], SignalOptions]:
        """Thunk producing signal options with a fresh ``since`` on every flow invocation."""

        def provide() -> SignalOptions:
            return SignalOptions(since=now() - timedelta(days=self.window_days), limit=self.limit)

        return provide


@dataclass(frozen=True)
class SimilarAuthorsConfig:
    branches: Dict[str, SimilarityOptions]
    take: int = 20


@dataclass(frozen=True)
class UserFlowConfig:
    similarity: SimilarityOptions
    take: int = 5
    recent_songs: Optional[AuthorSongsOptions] = None


@dataclass(frozen=True)
class RecsConfig:
    signals: SignalsConfig
    similar_authors: SimilarAuthorsConfig
    songs: UserFlowConfig
    authors: UserFlowConfig


def _load_yaml(path: str | Path) -> Dict[str, Any]:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise FlowConfigurationError(f"Missing or invalid '{key}' section in flow config")
    return value


def _parse_signals(data: Dict[str, Any]) -> SignalsConfig:
    return SignalsConfig(
        window_days=data.get("window_days", 2),
        limit=data.get("limit"),
    )


def _parse_similar_authors(data: Dict[str, Any]) -> SimilarAuthorsConfig:
    branches = _section(data, "branches")
    return SimilarAuthorsConfig(
        branches={name: SimilarityOptions.parse(options) for name, options in branches.items()},
        take=data.get("take", 20),
    )


def _parse_user_flow(data: Dict[str, Any]) -> UserFlowConfig:
    recent_songs = data.get("recent_songs")
    return UserFlowConfig(
        similarity=SimilarityOptions.parse(_section(data, "similarity")),
        take=data.get("take", 5),
        recent_songs=AuthorSongsOptions.parse(recent_songs) if recent_songs is not None else None,
    )


def parse_recs_config(data: Dict[str, Any]) -> RecsConfig:
    return RecsConfig(
        signals=_parse_signals(data.get("signals") or {}),
        similar_authors=_parse_similar_authors(_section(data, "similar_authors")),
        songs=_parse_user_flow(_section(data, "songs")),
        authors=_parse_user_flow(_section(data, "authors")),
    )


def load_recs_config(path: str | Path | None = None) -> RecsConfig:
    """
    Load flow configuration.

    Args:
        path: YAML file; defaults to $RECS_CONFIG_PATH, then
            config/recommendations.yaml in the project root

    Raises:
        FlowConfigurationError: If a section or similarity option is invalid
    """
    path = path or os.getenv("RECS_CONFIG_PATH") or DEFAULT_CONFIG_PATH
    return parse_recs_config(_load_yaml(path))
