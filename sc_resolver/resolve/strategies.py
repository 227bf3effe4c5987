"""
Ordered fallback chains.

A chain is a list of named async steps sharing one context object. Steps
run one at a time in list order; the first non-None result wins. A step
that raises is logged and counts as a miss.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

C = TypeVar("C")
R = TypeVar("R")


@dataclass(frozen=True)
class Strategy(Generic[C, R]):
    """A named step in a fallback chain."""

    name: str
    run: Callable[[C], Awaitable[Optional[R]]]


async def first_success(
    strategies: Sequence[Strategy[C, R]],
    context: C,
    label: str = "chain",
) -> Optional[R]:
    """
    Run strategies in order and return the first non-None result.

    Args:
        strategies: Steps to attempt, each at most once
        context: Shared state passed to every step
        label: Prefix for log messages

    Returns:
        First successful result, or None if every step missed
    """
    for strategy in strategies:
        logger.debug(f"[{label}] Trying {strategy.name}")
        try:
            result = await strategy.run(context)
        except Exception as e:
            logger.warning(f"[{label}] {strategy.name} raised {type(e).__name__}: {e}")
            continue
        if result is not None:
            logger.debug(f"[{label}] {strategy.name} succeeded")
            return result
    logger.debug(f"[{label}] All strategies failed")
    return None
