"""Two-point counter sampling for CPU utilization."""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable

import psutil

from .models import CounterSample

DEFAULT_INTERVAL_S = 1.0


class SamplerState(str, Enum):
    SAMPLING = "sampling"
    SETTLED = "settled"


def psutil_cpu_counters() -> CounterSample:
    times = psutil.cpu_times()
    counters = {name: int(value * 100) for name, value in times._asdict().items() if name not in ("guest", "guest_nice")}
    return CounterSample(counters=counters, captured_at=time.monotonic())


def utilization_from(first: CounterSample, second: CounterSample) -> float:
    """Busy percentage between two samples of the same counter set.

    A zero or negative total delta (counter wrap, clock anomaly) yields 0.
    """
    total_delta = second.total() - first.total()
    idle_delta = second.idle() - first.idle()
    if total_delta <= 0:
        return 0.0
    busy = ((total_delta - idle_delta) / total_delta) * 100
    return max(0.0, min(100.0, busy))


class DeltaSampler:
    def __init__(
        self,
        source: Callable[[], CounterSample] = psutil_cpu_counters,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._source = source
        self._sleep = sleep
        self.state = SamplerState.SETTLED
        self.last_pair: tuple[CounterSample, CounterSample] | None = None

    def measure(self, interval: float = DEFAULT_INTERVAL_S) -> float:
        self.state = SamplerState.SAMPLING
        try:
            first = self._source()
            self._sleep(interval)
            second = self._source()
        finally:
            self.state = SamplerState.SETTLED
        self.last_pair = (first, second)
        return utilization_from(first, second)
