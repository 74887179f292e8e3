"""Self-contained HTML report for one snapshot."""

from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Sequence

from hostpulse_telemetry.models import (
    AlertEvent,
    HealthStatus,
    MemoryCaveat,
    MetricsSnapshot,
    TemperatureProvenance,
)

from .formatting import NA, fmt_bytes, fmt_number, fmt_percent, fmt_temperature, fmt_uptime
from .models import ThemeConfig
from .themes import get_theme, status_color

_CAVEAT_TEXT = {
    MemoryCaveat.VIRTUALIZED_HOST_WARNING: "Memory figures describe the WSL2 virtual machine, not the Windows host.",
    MemoryCaveat.LOW_HEADROOM_WARNING: "Host memory is below the low-memory threshold for a compatibility layer.",
}

_PROVENANCE_TEXT = {
    TemperatureProvenance.REAL_SENSOR: "hardware sensor",
    TemperatureProvenance.REAL_THERMAL_ZONE: "kernel thermal zone",
    TemperatureProvenance.SYNTHETIC_ESTIMATE: "synthetic estimate, not measured",
    TemperatureProvenance.UNAVAILABLE: "unavailable",
}


def _metric(label: str, value: str, css: str = "") -> str:
    style = f' style="color:{css}"' if css else ""
    return f'<div class="metric"><span class="label">{escape(label)}</span><span class="value"{style}>{escape(value)}</span></div>'


def _section(title: str, body: str) -> str:
    return f'<section class="card"><h2>{escape(title)}</h2>{body}</section>'


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    if not rows:
        return '<p class="muted">None found.</p>'
    head = "".join(f"<th>{escape(h)}</th>" for h in headers)
    body = "".join("<tr>" + "".join(f"<td>{escape(c)}</td>" for c in row) + "</tr>" for row in rows)
    return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"


class HtmlReport:
    def __init__(self, snapshot: MetricsSnapshot, alerts: Sequence[AlertEvent], theme_name: str | None = None, overview_data_url: str | None = None) -> None:
        self.snapshot = snapshot
        self.alerts = list(alerts)
        self.theme: ThemeConfig = get_theme(theme_name)
        self.overview_data_url = overview_data_url

    def render(self) -> str:
        s = self.snapshot
        hostname = s.system.hostname if s.system else "host"
        stamp = s.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        sections = [
            self._alerts_section(),
            self._environment_section(),
            self._cpu_section(),
            self._memory_section(),
            self._disk_section(),
            self._network_section(),
            self._gpu_section(),
            self._temperature_section(),
            self._health_section(),
            self._process_section(),
        ]
        overview = ""
        if self.overview_data_url:
            overview = f'<img class="overview" alt="overview" src="{escape(self.overview_data_url)}">'
        t = self.theme
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>System Report - {escape(hostname)} - {escape(stamp)}</title>
<style>
body{{font-family:sans-serif;margin:20px;background:{t.background_start};color:{t.text_primary};}}
.container{{max-width:960px;margin:0 auto;}}
.card{{background:{t.card_bg};padding:16px 20px;border-radius:10px;margin-bottom:16px;}}
h1{{border-bottom:2px solid {t.accent};padding-bottom:8px;}}
h2{{color:{t.accent};font-size:1.1em;margin-top:0;}}
.metric{{display:flex;justify-content:space-between;padding:4px 0;}}
.label{{font-weight:bold;color:{t.text_secondary};}}
.value{{font-family:monospace;}}
.muted{{color:{t.text_secondary};}}
.warn{{color:{t.status_warning};font-weight:bold;}}
.alert{{color:{t.status_critical};font-weight:bold;}}
table{{width:100%;border-collapse:collapse;}}
th,td{{text-align:left;padding:6px;border-bottom:1px solid {t.background_end};font-family:monospace;}}
.overview{{width:100%;border-radius:10px;margin-bottom:16px;}}
</style>
</head>
<body>
<div class="container">
<h1>System Monitoring Report</h1>
<p class="muted">{escape(hostname)} &middot; {escape(stamp)}</p>
{overview}
{"".join(sections)}
</div>
</body>
</html>
"""

    def write(self, path: Path) -> Path:
        path.write_text(self.render(), encoding="utf-8")
        return path

    def _alerts_section(self) -> str:
        if not self.alerts:
            return _section("Alerts", '<p class="muted">No alerts.</p>')
        items = "".join(f'<li class="alert">{escape(a.message)}</li>' for a in self.alerts)
        return _section("Alerts", f"<ul>{items}</ul>")

    def _environment_section(self) -> str:
        env = self.snapshot.environment
        system = self.snapshot.system
        body = _metric("Environment", env.kind.value) + _metric("Kernel", env.release or NA)
        if system:
            body += _metric("Uptime", fmt_uptime(system.uptime_seconds))
            body += _metric("Processes", str(system.process_count) if system.process_count is not None else NA)
        return _section("Host", body)

    def _cpu_section(self) -> str:
        cpu = self.snapshot.cpu
        loads = " / ".join(fmt_number(v) for v in (cpu.load_1m, cpu.load_5m, cpu.load_15m))
        body = (
            _metric("Model", cpu.model)
            + _metric("Cores", str(cpu.cores))
            + _metric("Usage", fmt_percent(cpu.usage_percent), status_color(self.theme, cpu.usage_percent))
            + _metric("Load (1/5/15m)", loads)
        )
        return _section("CPU", body)

    def _memory_section(self) -> str:
        mem = self.snapshot.memory
        if mem is None:
            return _section("Memory", '<p class="muted">Unavailable.</p>')
        body = (
            _metric("Total", fmt_bytes(mem.total))
            + _metric("Used", fmt_bytes(mem.used))
            + _metric("Free", fmt_bytes(mem.free))
            + _metric("Available", fmt_bytes(mem.available))
            + _metric("Usage", fmt_percent(mem.used_percent), status_color(self.theme, mem.used_percent))
        )
        caveat = _CAVEAT_TEXT.get(mem.caveat)
        if caveat:
            body += f'<p class="warn">{escape(caveat)}</p>'
        return _section("Memory", body)

    def _disk_section(self) -> str:
        rows = [
            [
                ("* " if v.is_primary else "") + v.mountpoint,
                v.device,
                v.fstype,
                fmt_bytes(v.total),
                fmt_bytes(v.used),
                fmt_bytes(v.available),
                fmt_percent(v.used_percent),
            ]
            for v in self.snapshot.disks.volumes
        ]
        return _section("Disks (* primary)", _table(["Mount", "Device", "FS", "Total", "Used", "Free", "Usage"], rows))

    def _network_section(self) -> str:
        rows = [
            [n.name, fmt_bytes(n.bytes_recv), fmt_bytes(n.bytes_sent), str(n.packets_recv), str(n.packets_sent)]
            for n in self.snapshot.network
        ]
        return _section("Network", _table(["Interface", "RX", "TX", "RX packets", "TX packets"], rows))

    def _gpu_section(self) -> str:
        gpu = self.snapshot.gpu
        if not gpu.detected:
            return _section("GPU", '<p class="muted">No GPU detected.</p>')
        used = f"{fmt_number(gpu.memory_used_mb, 0)} / {fmt_number(gpu.memory_total_mb, 0)} MB"
        body = (
            _metric("Name", gpu.name or NA)
            + _metric("Vendor", gpu.vendor or NA)
            + _metric("Memory", used)
            + _metric("Utilization", fmt_percent(gpu.utilization_percent))
            + _metric("Temperature", f"{gpu.temperature_c:.1f}°C" if gpu.temperature_c is not None else NA)
        )
        return _section("GPU", body)

    def _temperature_section(self) -> str:
        reading = self.snapshot.cpu_temperature
        source = _PROVENANCE_TEXT[reading.provenance]
        if reading.is_measured and reading.source:
            source += f" ({reading.source})"
        body = _metric("CPU", fmt_temperature(reading)) + _metric("Source", source)
        if reading.provenance is TemperatureProvenance.SYNTHETIC_ESTIMATE:
            body += '<p class="warn">No temperature sensor was readable; this value is estimated from CPU load.</p>'
        return _section("Temperature", body)

    def _health_section(self) -> str:
        health = self.snapshot.disk_health
        if health.status is HealthStatus.NOT_CHECKED:
            body = _metric("SMART", f"not checked ({health.reason})")
        else:
            css = self.theme.status_critical if health.status is HealthStatus.FAILED else ""
            body = _metric("SMART", health.status.value.upper(), css) + _metric("Device", health.device or NA)
        return _section("Disk Health", body)

    def _process_section(self) -> str:
        rows = [[str(p.pid), p.user, f"{p.memory_percent:.1f}%", p.command] for p in self.snapshot.processes]
        return _section("Top Processes by Memory", _table(["PID", "User", "Mem%", "Command"], rows))
