"""Sequences every reader into one immutable snapshot."""

from __future__ import annotations

import logging
import random
import socket
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from . import readers
from .environment import classify
from .models import (
    GIB,
    CpuMetrics,
    DiskHealth,
    DiskMetrics,
    EnvironmentInfo,
    GpuMetrics,
    MemoryMetrics,
    MetricsSnapshot,
    NetworkInterface,
    ProcessSample,
    SystemInfo,
    TemperatureReading,
)
from .processes import rank, read_processes
from .sampler import DeltaSampler
from .strategies import build_gpu_chain, build_health_chain, build_temperature_chain

logger = logging.getLogger("hostpulse.aggregator")


@dataclass(frozen=True)
class CollectorSettings:
    cpu_interval_s: float = 1.0
    low_memory_bytes: int = 8 * GIB
    bridge_path: str = readers.WINDOWS_BRIDGE_PATH
    command_timeout_s: float = 10.0
    synthetic_base_c: float = 40.0
    synthetic_jitter_c: int = 2
    top_n: int = 5
    command_width: int = 30


class SnapshotAggregator:
    """Runs one full collection cycle per ``collect()`` call.

    Every reader is attempted once. A reader that raises is logged and its
    field falls back to the unavailable value; the cycle itself never fails.
    """

    def __init__(
        self,
        settings: CollectorSettings | None = None,
        classifier: Callable[[], EnvironmentInfo] = classify,
        sampler: DeltaSampler | None = None,
        process_source: Callable[[], list[ProcessSample]] = read_processes,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.settings = settings or CollectorSettings()
        self._classifier = classifier
        self._sampler = sampler or DeltaSampler()
        self._process_source = process_source
        self._rng = rng
        self._clock = clock
        self._lock = threading.Lock()

    def _guard(self, field: str, func: Callable[[], Any], fallback: Callable[[], Any]) -> Any:
        try:
            return func()
        except Exception as exc:
            logger.warning("%s unavailable: %s", field, exc)
            return fallback()

    # Individual steps are methods so tests and subclasses can replace them.

    def read_cpu(self, env: EnvironmentInfo) -> CpuMetrics:
        return readers.read_cpu(env, self._sampler, self.settings.cpu_interval_s, timeout=self.settings.command_timeout_s)

    def read_memory(self, env: EnvironmentInfo) -> MemoryMetrics:
        return readers.read_memory(env, self.settings.low_memory_bytes)

    def read_disks(self, env: EnvironmentInfo) -> DiskMetrics:
        return readers.read_disks(env, self.settings.bridge_path)

    def read_network(self) -> tuple[NetworkInterface, ...]:
        return readers.read_network()

    def read_gpu(self, env: EnvironmentInfo) -> GpuMetrics:
        return build_gpu_chain(env, timeout=self.settings.command_timeout_s).resolve()

    def read_temperature(self, cpu_percent: float | None, gpu: GpuMetrics) -> TemperatureReading:
        chain = build_temperature_chain(
            cpu_percent,
            gpu=gpu,
            base_c=self.settings.synthetic_base_c,
            jitter_c=self.settings.synthetic_jitter_c,
            timeout=self.settings.command_timeout_s,
            rng=self._rng,
        )
        return chain.resolve()

    def read_disk_health(self) -> DiskHealth:
        return build_health_chain(timeout=self.settings.command_timeout_s).resolve()

    def read_processes(self) -> tuple[ProcessSample, ...]:
        return tuple(rank(self._process_source(), n=self.settings.top_n, width=self.settings.command_width))

    def read_system(self) -> SystemInfo:
        return readers.read_system_info()

    def collect(self) -> MetricsSnapshot:
        with self._lock:
            return self._collect()

    def _collect(self) -> MetricsSnapshot:
        timestamp = self._clock()
        env = self._classifier()
        cpu = self._guard(
            "cpu",
            lambda: self.read_cpu(env),
            lambda: CpuMetrics(model="Unknown", cores=1, usage_percent=None, load_1m=None, load_5m=None, load_15m=None),
        )
        memory = self._guard("memory", lambda: self.read_memory(env), lambda: None)
        disks = self._guard("disk", lambda: self.read_disks(env), DiskMetrics)
        network = self._guard("network", self.read_network, tuple)
        gpu = self._guard("gpu", lambda: self.read_gpu(env), GpuMetrics.unavailable)
        temperature = self._guard(
            "temperature",
            lambda: self.read_temperature(cpu.usage_percent, gpu),
            TemperatureReading.unavailable,
        )
        health = self._guard("disk health", self.read_disk_health, lambda: DiskHealth.not_checked("CommandFailed"))
        processes = self._guard("processes", self.read_processes, tuple)
        system = self._guard("system", self.read_system, lambda: SystemInfo(hostname=socket.gethostname()))

        snapshot = MetricsSnapshot(
            timestamp=timestamp,
            environment=env,
            cpu=cpu,
            memory=memory,
            disks=disks,
            network=network,
            gpu=gpu,
            cpu_temperature=temperature,
            disk_health=health,
            processes=processes,
            system=system,
        )
        logger.info("snapshot collected at %s", snapshot.timestamp.isoformat())
        return snapshot
