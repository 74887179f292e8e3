"""Host health collection engine for hostpulse."""

from .aggregator import CollectorSettings, SnapshotAggregator
from .alerts import AlertRules, evaluate
from .environment import classify, classify_text
from .models import (
    AlertEvent,
    AlertKind,
    CounterSample,
    CpuMetrics,
    DiskHealth,
    DiskMetrics,
    DiskVolume,
    EnvironmentInfo,
    EnvironmentKind,
    GpuMetrics,
    HealthStatus,
    MemoryCaveat,
    MemoryMetrics,
    MetricsSnapshot,
    NetworkInterface,
    ProcessSample,
    SystemInfo,
    TemperatureProvenance,
    TemperatureReading,
)
from .processes import rank
from .resolver import StrategyChain
from .sampler import DeltaSampler, utilization_from

__all__ = [
    "AlertEvent",
    "AlertKind",
    "AlertRules",
    "CollectorSettings",
    "CounterSample",
    "CpuMetrics",
    "DeltaSampler",
    "DiskHealth",
    "DiskMetrics",
    "DiskVolume",
    "EnvironmentInfo",
    "EnvironmentKind",
    "GpuMetrics",
    "HealthStatus",
    "MemoryCaveat",
    "MemoryMetrics",
    "MetricsSnapshot",
    "NetworkInterface",
    "ProcessSample",
    "SnapshotAggregator",
    "StrategyChain",
    "SystemInfo",
    "TemperatureProvenance",
    "TemperatureReading",
    "classify",
    "classify_text",
    "evaluate",
    "rank",
    "utilization_from",
]
