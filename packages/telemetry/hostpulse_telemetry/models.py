"""Typed telemetry models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping

GIB = 1024**3


class EnvironmentKind(str, Enum):
    NATIVE_LINUX = "native_linux"
    MACOS = "macos"
    COMPAT_LAYER_V1 = "compat_layer_v1"
    COMPAT_LAYER_V2 = "compat_layer_v2"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class EnvironmentInfo:
    kind: EnvironmentKind
    release: str = ""
    system: str = ""

    @property
    def is_compat_layer(self) -> bool:
        return self.kind in (EnvironmentKind.COMPAT_LAYER_V1, EnvironmentKind.COMPAT_LAYER_V2)


@dataclass(frozen=True)
class CounterSample:
    """Accumulated CPU tick counters captured at a monotonic instant."""

    counters: Mapping[str, int]
    captured_at: float

    def total(self) -> int:
        return sum(self.counters.values())

    def idle(self) -> int:
        return self.counters.get("idle", 0) + self.counters.get("iowait", 0)


@dataclass(frozen=True)
class CpuMetrics:
    model: str
    cores: int
    usage_percent: float | None
    load_1m: float | None
    load_5m: float | None
    load_15m: float | None


class MemoryCaveat(str, Enum):
    NONE = "none"
    VIRTUALIZED_HOST_WARNING = "virtualized_host_warning"
    LOW_HEADROOM_WARNING = "low_headroom_warning"


@dataclass(frozen=True)
class MemoryMetrics:
    total: int
    used: int
    free: int
    available: int | None
    used_percent: float
    caveat: MemoryCaveat = MemoryCaveat.NONE

    @property
    def total_gb(self) -> float:
        return self.total / GIB

    @property
    def used_gb(self) -> float:
        return self.used / GIB

    @property
    def free_gb(self) -> float:
        return self.free / GIB


@dataclass(frozen=True)
class DiskVolume:
    device: str
    mountpoint: str
    fstype: str
    total: int
    used: int
    available: int
    used_percent: float
    is_primary: bool = False


@dataclass(frozen=True)
class DiskMetrics:
    volumes: tuple[DiskVolume, ...] = ()

    @property
    def primary(self) -> DiskVolume | None:
        for volume in self.volumes:
            if volume.is_primary:
                return volume
        return None


@dataclass(frozen=True)
class NetworkInterface:
    name: str
    bytes_recv: int
    bytes_sent: int
    packets_recv: int
    packets_sent: int


@dataclass(frozen=True)
class GpuMetrics:
    detected: bool
    vendor: str | None = None
    name: str | None = None
    memory_used_mb: float | None = None
    memory_total_mb: float | None = None
    utilization_percent: float | None = None
    temperature_c: float | None = None

    @classmethod
    def unavailable(cls) -> "GpuMetrics":
        return cls(detected=False)


class TemperatureProvenance(str, Enum):
    REAL_SENSOR = "real_sensor"
    REAL_THERMAL_ZONE = "real_thermal_zone"
    SYNTHETIC_ESTIMATE = "synthetic_estimate"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class TemperatureReading:
    value_c: float | None
    provenance: TemperatureProvenance
    source: str | None = None

    @property
    def is_measured(self) -> bool:
        return self.provenance in (TemperatureProvenance.REAL_SENSOR, TemperatureProvenance.REAL_THERMAL_ZONE)

    @classmethod
    def unavailable(cls) -> "TemperatureReading":
        return cls(value_c=None, provenance=TemperatureProvenance.UNAVAILABLE)


class HealthStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    UNKNOWN = "unknown"
    NOT_CHECKED = "not_checked"


@dataclass(frozen=True)
class DiskHealth:
    available: bool
    status: HealthStatus
    device: str | None = None
    reason: str | None = None

    @classmethod
    def not_checked(cls, reason: str, device: str | None = None) -> "DiskHealth":
        return cls(available=False, status=HealthStatus.NOT_CHECKED, device=device, reason=reason)


@dataclass(frozen=True)
class ProcessSample:
    pid: int
    user: str
    memory_percent: float
    command: str


class AlertKind(str, Enum):
    HIGH_MEMORY = "high_memory"
    HIGH_DISK = "high_disk"
    HIGH_LOAD = "high_load"


@dataclass(frozen=True)
class AlertEvent:
    kind: AlertKind
    observed: float
    threshold: float
    subject: str | None = None

    @property
    def message(self) -> str:
        if self.kind is AlertKind.HIGH_MEMORY:
            return f"High memory usage: {self.observed:.2f}% (threshold {self.threshold:.0f}%)"
        if self.kind is AlertKind.HIGH_DISK:
            return f"High disk usage on {self.subject}: {self.observed:.2f}% (threshold {self.threshold:.0f}%)"
        return f"High load: {self.observed:.2f} exceeds limit of {self.threshold:.0f}"


@dataclass(frozen=True)
class SystemInfo:
    hostname: str
    uptime_seconds: float | None = None
    process_count: int | None = None

    @property
    def uptime_days(self) -> float | None:
        if self.uptime_seconds is None:
            return None
        return self.uptime_seconds / 86400


@dataclass(frozen=True)
class MetricsSnapshot:
    timestamp: datetime
    environment: EnvironmentInfo
    cpu: CpuMetrics
    memory: MemoryMetrics | None
    disks: DiskMetrics
    network: tuple[NetworkInterface, ...]
    gpu: GpuMetrics
    cpu_temperature: TemperatureReading
    disk_health: DiskHealth
    processes: tuple[ProcessSample, ...] = field(default_factory=tuple)
    system: SystemInfo | None = None
