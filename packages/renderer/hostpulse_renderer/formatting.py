"""Shared value formatting for every report format."""

from __future__ import annotations

from hostpulse_telemetry.models import TemperatureProvenance, TemperatureReading

NA = "N/A"


def fmt_number(value: float | None, digits: int = 2) -> str:
    if value is None:
        return NA
    return f"{value:.{digits}f}"


def fmt_percent(value: float | None) -> str:
    if value is None:
        return NA
    return f"{value:.2f}%"


def fmt_bytes(value: int | float | None) -> str:
    if value is None:
        return NA
    size = float(value)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if abs(size) < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"


def fmt_temperature(reading: TemperatureReading) -> str:
    if reading.value_c is None:
        return NA
    text = f"{reading.value_c:.1f}°C"
    if reading.provenance is TemperatureProvenance.SYNTHETIC_ESTIMATE:
        return f"~{text} (estimated)"
    return text


def fmt_uptime(seconds: float | None) -> str:
    if seconds is None:
        return NA
    total = int(seconds)
    return f"{total // 86400}d {(total % 86400) // 3600}h {(total % 3600) // 60}m"
