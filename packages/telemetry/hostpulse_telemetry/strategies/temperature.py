"""CPU temperature sources, ending in a tagged synthetic estimate."""

from __future__ import annotations

import math
import random
import re
from pathlib import Path
from typing import Callable, Sequence

import psutil

from ..commands import DEFAULT_TIMEOUT_S, CommandResult, run_command, which
from ..errors import ParseFailureError
from ..models import GpuMetrics, TemperatureProvenance, TemperatureReading
from ..resolver import StrategyChain

DEFAULT_BASE_C = 40.0
DEFAULT_JITTER_C = 2

_PREFERRED_CHIPS = ("coretemp", "k10temp", "cpu_thermal", "zenpower", "acpitz")
_SENSORS_LINE_RE = re.compile(r"^(Package id 0|Core 0|Tctl|Tdie):\s*\+?(-?[\d.]+)")

Runner = Callable[[Sequence[str], float], CommandResult]


class PsutilSensorStrategy:
    name = "psutil-sensors"

    def __init__(self, reader: Callable[[], dict] | None = None) -> None:
        self._reader = reader or getattr(psutil, "sensors_temperatures", None)

    def is_available(self) -> bool:
        return self._reader is not None

    def extract(self) -> TemperatureReading | None:
        temps = self._reader() if self._reader else None
        if not temps:
            return None
        for name in _PREFERRED_CHIPS:
            entries = temps.get(name)
            if entries and entries[0].current is not None:
                return TemperatureReading(float(entries[0].current), TemperatureProvenance.REAL_SENSOR, source=name)
        return None


def parse_sensors_output(output: str) -> float | None:
    for line in output.splitlines():
        match = _SENSORS_LINE_RE.match(line.strip())
        if match:
            try:
                return float(match.group(2))
            except ValueError as exc:
                raise ParseFailureError(f"sensors value: {line!r}") from exc
    return None


class LmSensorsStrategy:
    name = "lm-sensors"

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_S, runner: Runner = run_command) -> None:
        self.timeout = timeout
        self._runner = runner

    def is_available(self) -> bool:
        return which("sensors") is not None

    def extract(self) -> TemperatureReading | None:
        result = self._runner(["sensors"], self.timeout)
        if not result.ok:
            return None
        value = parse_sensors_output(result.stdout)
        if value is None:
            return None
        return TemperatureReading(value, TemperatureProvenance.REAL_SENSOR, source="sensors")


class ThermalZoneStrategy:
    name = "thermal-zone"

    def __init__(self, root: Path = Path("/sys/class/thermal")) -> None:
        self.root = root

    def _zones(self) -> list[Path]:
        if not self.root.is_dir():
            return []
        return sorted(self.root.glob("thermal_zone*/temp"))

    def is_available(self) -> bool:
        return bool(self._zones())

    def extract(self) -> TemperatureReading | None:
        for zone in self._zones():
            try:
                milli = int(zone.read_text(encoding="ascii").strip())
            except (OSError, ValueError):
                continue
            if milli > 0:
                return TemperatureReading(milli / 1000.0, TemperatureProvenance.REAL_THERMAL_ZONE, source=zone.parent.name)
        return None


class GpuDieStrategy:
    """Reuses the GPU's own die sensor when no CPU sensor exists."""

    name = "gpu-die"

    def __init__(self, gpu: GpuMetrics | None) -> None:
        self.gpu = gpu

    def is_available(self) -> bool:
        return self.gpu is not None and self.gpu.detected and self.gpu.temperature_c is not None

    def extract(self) -> TemperatureReading | None:
        if not self.is_available():
            return None
        return TemperatureReading(self.gpu.temperature_c, TemperatureProvenance.REAL_SENSOR, source="gpu")


class SyntheticEstimator:
    """Load-derived estimate; always succeeds and is always tagged synthetic.

    Consumers doing alerting or trend analysis must skip these readings.
    """

    name = "synthetic"

    def __init__(
        self,
        cpu_percent: float | None,
        base_c: float = DEFAULT_BASE_C,
        jitter_c: int = DEFAULT_JITTER_C,
        rng: random.Random | None = None,
    ) -> None:
        self.cpu_percent = cpu_percent
        self.base_c = base_c
        self.jitter_c = max(0, int(jitter_c))
        self._rng = rng or random.Random()

    def estimate(self) -> TemperatureReading:
        load = self.cpu_percent if self.cpu_percent is not None else 0.0
        value = self.base_c + math.floor(load / 3) + self._rng.randint(0, self.jitter_c)
        return TemperatureReading(float(value), TemperatureProvenance.SYNTHETIC_ESTIMATE, source="estimate")


def build_temperature_chain(
    cpu_percent: float | None,
    gpu: GpuMetrics | None = None,
    base_c: float = DEFAULT_BASE_C,
    jitter_c: int = DEFAULT_JITTER_C,
    timeout: float = DEFAULT_TIMEOUT_S,
    rng: random.Random | None = None,
) -> StrategyChain[TemperatureReading]:
    estimator = SyntheticEstimator(cpu_percent, base_c=base_c, jitter_c=jitter_c, rng=rng)
    return StrategyChain(
        "temperature",
        [
            PsutilSensorStrategy(),
            LmSensorsStrategy(timeout=timeout),
            ThermalZoneStrategy(),
            GpuDieStrategy(gpu),
        ],
        fallback=estimator.estimate,
    )
