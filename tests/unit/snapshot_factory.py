"""Builds deterministic snapshots for renderer and alert tests."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostpulse_telemetry.models import (  # noqa: E402
    GIB,
    CpuMetrics,
    DiskHealth,
    DiskMetrics,
    DiskVolume,
    EnvironmentInfo,
    EnvironmentKind,
    GpuMetrics,
    MemoryCaveat,
    MemoryMetrics,
    MetricsSnapshot,
    NetworkInterface,
    ProcessSample,
    SystemInfo,
    TemperatureProvenance,
    TemperatureReading,
)

FIXED_TS = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


def make_cpu(usage=12.5, cores=8, load_1m=0.5) -> CpuMetrics:
    return CpuMetrics(model="Test CPU", cores=cores, usage_percent=usage, load_1m=load_1m, load_5m=0.4, load_15m=0.3)


def make_memory(used_percent=50.0, caveat=MemoryCaveat.NONE) -> MemoryMetrics:
    total = 16 * GIB
    used = int(total * used_percent / 100)
    return MemoryMetrics(total=total, used=used, free=total - used, available=total - used, used_percent=used_percent, caveat=caveat)


def make_volume(mountpoint="/", used_percent=40.0, primary=True) -> DiskVolume:
    total = 500 * GIB
    used = int(total * used_percent / 100)
    return DiskVolume(
        device="/dev/sda1",
        mountpoint=mountpoint,
        fstype="ext4",
        total=total,
        used=used,
        available=total - used,
        used_percent=used_percent,
        is_primary=primary,
    )


def make_snapshot(**overrides) -> MetricsSnapshot:
    fields = dict(
        timestamp=FIXED_TS,
        environment=EnvironmentInfo(EnvironmentKind.NATIVE_LINUX, release="6.8.0-generic", system="Linux"),
        cpu=make_cpu(),
        memory=make_memory(),
        disks=DiskMetrics(volumes=(make_volume("/", 40.0, True), make_volume("/data", 75.5, False))),
        network=(NetworkInterface("eth0", bytes_recv=1024, bytes_sent=2048, packets_recv=10, packets_sent=20),),
        gpu=GpuMetrics.unavailable(),
        cpu_temperature=TemperatureReading(52.0, TemperatureProvenance.REAL_SENSOR, source="coretemp"),
        disk_health=DiskHealth.not_checked("PermissionDenied"),
        processes=(ProcessSample(pid=42, user="alice", memory_percent=12.3, command="/usr/bin/python3"),),
        system=SystemInfo(hostname="testhost", uptime_seconds=3 * 86400 + 3600, process_count=211),
    )
    fields.update(overrides)
    return MetricsSnapshot(**fields)
