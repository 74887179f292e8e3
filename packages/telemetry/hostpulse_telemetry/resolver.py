"""Ordered fallback chains over alternative data sources."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Protocol, Sequence, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

logger = logging.getLogger("hostpulse.resolver")


class Strategy(Protocol[T_co]):
    name: str

    def is_available(self) -> bool: ...

    def extract(self) -> T_co | None: ...


@dataclass(frozen=True)
class Resolution(Generic[T]):
    value: T
    strategy: str | None
    attempts: tuple[str, ...] = field(default_factory=tuple)


class StrategyChain(Generic[T]):
    """Tries each strategy once, in order, and returns the first success.

    A strategy fails when it reports itself unavailable, returns None or
    raises. When every strategy fails the chain returns ``fallback()``.
    """

    def __init__(self, name: str, strategies: Sequence[Strategy[T]], fallback: Callable[[], T]) -> None:
        self.name = name
        self.strategies = list(strategies)
        self._fallback = fallback

    def availability(self) -> dict[str, bool]:
        out: dict[str, bool] = {}
        for strategy in self.strategies:
            try:
                out[strategy.name] = bool(strategy.is_available())
            except Exception:
                out[strategy.name] = False
        return out

    def resolve_detailed(self) -> Resolution[T]:
        attempts: list[str] = []
        for strategy in self.strategies:
            try:
                if not strategy.is_available():
                    continue
                attempts.append(strategy.name)
                value = strategy.extract()
            except Exception as exc:
                logger.warning("%s: strategy %s failed: %s", self.name, strategy.name, exc)
                continue
            if value is not None:
                logger.info("%s resolved via %s", self.name, strategy.name)
                return Resolution(value=value, strategy=strategy.name, attempts=tuple(attempts))
            logger.debug("%s: strategy %s produced nothing", self.name, strategy.name)

        logger.warning("%s: no source available, using fallback", self.name)
        return Resolution(value=self._fallback(), strategy=None, attempts=tuple(attempts))

    def resolve(self) -> T:
        return self.resolve_detailed().value
