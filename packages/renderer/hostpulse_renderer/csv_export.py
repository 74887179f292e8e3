"""Append-only CSV trail of snapshots."""

from __future__ import annotations

import csv
from pathlib import Path

from hostpulse_telemetry.models import MetricsSnapshot, TemperatureProvenance, TemperatureReading

from .formatting import NA, fmt_number

CSV_COLUMNS = [
    "timestamp",
    "cpu_usage_percent",
    "mem_total_gb",
    "mem_used_gb",
    "mem_free_gb",
    "mem_used_percent",
    "disk_usage",
    "gpu_util_percent",
    "gpu_mem_used_mb",
    "cpu_temp_c",
    "gpu_temp_c",
    "process_count",
    "load_1m",
    "uptime_days",
    "cpu_temp_source",
]


def temperature_source(reading: TemperatureReading) -> str:
    """Provenance tag, with the sensor name appended for measured readings."""
    if reading.is_measured and reading.source:
        return f"{reading.provenance.value}:{reading.source}"
    return reading.provenance.value


def disk_summary(snapshot: MetricsSnapshot) -> str:
    if not snapshot.disks.volumes:
        return NA
    return ";".join(f"{v.mountpoint}:{v.used_percent:.2f}" for v in snapshot.disks.volumes)


def snapshot_row(snapshot: MetricsSnapshot) -> list[str]:
    mem = snapshot.memory
    gpu = snapshot.gpu
    temp = snapshot.cpu_temperature
    system = snapshot.system
    return [
        snapshot.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
        fmt_number(snapshot.cpu.usage_percent),
        fmt_number(mem.total_gb if mem else None),
        fmt_number(mem.used_gb if mem else None),
        fmt_number(mem.free_gb if mem else None),
        fmt_number(mem.used_percent if mem else None),
        disk_summary(snapshot),
        fmt_number(gpu.utilization_percent if gpu.detected else None),
        fmt_number(gpu.memory_used_mb if gpu.detected else None),
        fmt_number(temp.value_c if temp.provenance is not TemperatureProvenance.UNAVAILABLE else None),
        fmt_number(gpu.temperature_c if gpu.detected else None),
        str(system.process_count) if system and system.process_count is not None else NA,
        fmt_number(snapshot.cpu.load_1m),
        fmt_number(system.uptime_days if system else None),
        temperature_source(temp),
    ]


def append_snapshot(path: Path, snapshot: MetricsSnapshot) -> Path:
    """Append one row, writing the header only when the file is new or empty."""
    path.parent.mkdir(parents=True, exist_ok=True)
    write_header = not path.exists() or path.stat().st_size == 0
    with path.open("a", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        if write_header:
            writer.writerow(CSV_COLUMNS)
        writer.writerow(snapshot_row(snapshot))
    return path
