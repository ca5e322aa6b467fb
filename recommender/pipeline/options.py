"""Stage options and per-invocation options providers.

Stage options may be given either as a literal value or as a zero-argument
callable producing one (for example a signal window computed from the
current time). An OptionsProvider resolves such a source at most once per
flow invocation: the outermost stage call opens an invocation scope, and
every resolve inside it, including concurrently running merge branches,
sees the same value.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, Iterator, Mapping, Optional, TypeVar, Union

T = TypeVar("T")


class FlowConfigurationError(ValueError):
    """Raised when a flow is built or invoked with invalid configuration."""


_invocation_cache: ContextVar[Optional[Dict[Any, Any]]] = ContextVar(
    "invocation_cache", default=None
)


@contextmanager
def flow_invocation() -> Iterator[None]:
    """
    Open an invocation scope unless one is already active.

    Nested stage calls (sub-flows, merge branches) reuse the outer scope.
    """
    if _invocation_cache.get() is not None:
        yield
        return

    token = _invocation_cache.set({})
    try:
        yield
    finally:
        _invocation_cache.reset(token)


class OptionsProvider(Generic[T]):
    """
    Value-or-thunk options source.

    Args:
        source: Literal options, a mapping, or a zero-argument callable
            returning either
        parse: Converts the raw source value into typed options; raises
            FlowConfigurationError on invalid input
    """

    def __init__(self, source: Union[T, Mapping, Callable[[], Any], None], parse: Callable[[Any], T]):
        if isinstance(source, OptionsProvider):
            source = source._source
        self._parse = parse
        self._source = source
        self._lazy = callable(source) and not isinstance(source, type)
        # Literal options are parsed at construction
        self._value: Optional[T] = None if self._lazy else parse(source)

    @property
    def is_lazy(self) -> bool:
        return self._lazy

    def resolve(self) -> T:
        if not self._lazy:
            return self._value

        cache = _invocation_cache.get()
        if cache is None:
            return self._parse(self._source())
        # Stages sharing one thunk share one entry
        key = (self._source, self._parse)
        if key not in cache:
            cache[key] = self._parse(self._source())
        return cache[key]

    def __repr__(self) -> str:
        kind = "lazy" if self._lazy else repr(self._value)
        return f"OptionsProvider({kind})"


def _pick(data: Mapping, *names: str, default: Any = None) -> Any:
    for name in names:
        if name in data:
            return data[name]
    return default


@dataclass(frozen=True)
class SimilarityOptions:
    """Similarity lookup options: index namespace and max neighbors per id."""

    index_name: str
    fan_out: int = 10

    def __post_init__(self):
        if not self.index_name:
            raise FlowConfigurationError("Similarity options require an index_name")
        if not isinstance(self.fan_out, int) or isinstance(self.fan_out, bool) or self.fan_out < 1:
            raise FlowConfigurationError(
                f"fan_out must be a positive integer, got {self.fan_out!r} for index '{self.index_name}'"
            )

    @classmethod
    def parse(cls, value: Any) -> "SimilarityOptions":
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise FlowConfigurationError(f"Invalid similarity options: {value!r}")
        fan_out = _pick(value, "fan_out", "fanOut", default=10)
        return cls(
            index_name=_pick(value, "index_name", "indexName"),
            fan_out=10 if fan_out is None else fan_out,
        )


@dataclass(frozen=True)
class SignalOptions:
    """Signal lookup filters: only events at or after ``since``, at most ``limit`` rows."""

    since: Optional[datetime] = None
    limit: Optional[int] = None

    def __post_init__(self):
        if self.limit is not None and (not isinstance(self.limit, int) or self.limit < 0):
            raise FlowConfigurationError(f"limit must be a non-negative integer, got {self.limit!r}")

    @classmethod
    def parse(cls, value: Any) -> "SignalOptions":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise FlowConfigurationError(f"Invalid signal options: {value!r}")

        since = _pick(value, "since", "last_ts")
        if isinstance(since, (int, float)) and not isinstance(since, bool):
            since = datetime.fromtimestamp(since, tz=timezone.utc)
        elif since is not None and not isinstance(since, datetime):
            raise FlowConfigurationError(f"since must be a datetime or unix timestamp, got {since!r}")

        return cls(since=since, limit=_pick(value, "limit"))


@dataclass(frozen=True)
class AuthorSongsOptions:
    """Recent-songs options: at most ``fan_out`` songs per author (None = all)."""

    fan_out: Optional[int] = None

    def __post_init__(self):
        if self.fan_out is not None and (not isinstance(self.fan_out, int) or self.fan_out < 0):
            raise FlowConfigurationError(f"fan_out must be a non-negative integer, got {self.fan_out!r}")

    @classmethod
    def parse(cls, value: Any) -> "AuthorSongsOptions":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise FlowConfigurationError(f"Invalid author songs options: {value!r}")
        return cls(fan_out=_pick(value, "fan_out", "fanOut"))
