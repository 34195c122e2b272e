"""Ordered fallback chains: try each data source in turn, keep the first answer."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from tripcost.exceptions import (
    AuthError,
    ChainExhausted,
    LLMUnavailable,
    PricingUnavailable,
    ResolutionError,
    RoutingError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors a tier may raise to mean "no answer here, try the next one"
RECOVERABLE_ERRORS: tuple[type[Exception], ...] = (
    AuthError,
    LLMUnavailable,
    PricingUnavailable,
    ResolutionError,
    RoutingError,
)

Strategy = Callable[[], Awaitable[T | None]]


@dataclass(frozen=True)
class Resolved(Generic[T]):
    value: T
    source: str


class FallbackChain(Generic[T]):
    """Walks (label, strategy) pairs in order; a strategy fails by returning None or raising."""

    def __init__(self, name: str, strategies: list[tuple[str, Strategy]]):
        self.name = name
        self.strategies = strategies

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self.strategies]

    async def resolve(self) -> Resolved[T]:
        errors: list[str] = []
        for label, strategy in self.strategies:
            try:
                value = await strategy()
            except RECOVERABLE_ERRORS as e:
                logger.warning(f"{self.name}: {label} failed, trying next source: {e}")
                errors.append(f"{label}: {e}")
                continue

            if value is None:
                logger.debug(f"{self.name}: {label} had no answer")
                errors.append(f"{label}: no result")
                continue

            logger.debug(f"{self.name}: resolved via {label}")
            return Resolved(value=value, source=label)

        raise ChainExhausted(f"{self.name}: all sources failed ({'; '.join(errors)})")


def constant(value: Any) -> Strategy:
    """Strategy that always answers; use as the last tier of a chain that must succeed."""
    async def _constant():
        return value
    return _constant
