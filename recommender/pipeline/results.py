"""Per-branch results for fan-out and fan-in stages.

Fan-out lookups and merge branches are settled individually: each one
becomes a Success or a Failure, and callers decide what to keep with
``collect_successes``. Configuration errors are never settled into a
Failure; they propagate to the caller of the flow.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, List, TypeVar, Union

from .options import FlowConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    error: BaseException

    @property
    def ok(self) -> bool:
        return False


BranchResult = Union[Success[T], Failure]


Pending = Union[Awaitable[T], Callable[[], Awaitable[T]]]


async def _settle_one(item: Pending, label: str) -> BranchResult:
    try:
        # Calling inside the try turns a synchronous raise into a Failure too
        awaitable = item() if callable(item) else item
        return Success(await awaitable)
    except FlowConfigurationError:
        raise
    except Exception as e:
        logger.warning(f"{label} failed: {e!r}")
        return Failure(e)


async def settle(items: Iterable[Pending], label: str = "branch") -> List[BranchResult]:
    """
    Run all items concurrently and wrap each outcome.

    Args:
        items: Coroutines, futures, or zero-argument callables returning one
        label: Prefix used when logging a failure

    Returns:
        One BranchResult per item, in input order

    Notes:
        - Full barrier: returns only after every item has finished
        - FlowConfigurationError from any item is re-raised once the
          remaining items have been cancelled
    """
    tasks = [asyncio.ensure_future(_settle_one(item, f"{label}[{i}]")) for i, item in enumerate(items)]
    if not tasks:
        return []

    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def collect_successes(results: Iterable[BranchResult]) -> List[Any]:
    """Keep the values of successful results, in order; drop failures."""
    return [result.value for result in results if isinstance(result, Success)]
