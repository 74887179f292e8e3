"""Persistent settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from hostpulse_telemetry import AlertRules, CollectorSettings
from hostpulse_telemetry.models import GIB


CONFIG_VERSION = 2


@dataclass
class PathsConfig:
    base_dir: str | None = None
    logs_dir: str = "logs"
    reports_dir: str = "reports"
    data_dir: str = "data"


@dataclass
class SamplingConfig:
    cpu_interval_s: float = 1.0


@dataclass
class ThresholdsConfig:
    memory_percent: float = 90.0
    disk_percent: float = 90.0
    low_memory_gib: float = 8.0
    load_over_cores: int = 0


@dataclass
class TemperatureConfig:
    synthetic_base_c: float = 40.0
    synthetic_jitter_c: int = 2


@dataclass
class CommandsConfig:
    timeout_s: float = 10.0


@dataclass
class ProcessesConfig:
    top_n: int = 5
    command_width: int = 30


@dataclass
class ReportConfig:
    theme: str = "Neon Slate"
    write_html: bool = True
    write_overview_png: bool = True


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    paths: PathsConfig = field(default_factory=PathsConfig)
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    temperature: TemperatureConfig = field(default_factory=TemperatureConfig)
    commands: CommandsConfig = field(default_factory=CommandsConfig)
    processes: ProcessesConfig = field(default_factory=ProcessesConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


DEFAULT_CONFIG = AppConfig()


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "hostpulse"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "hostpulse"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "hostpulse"


def config_path() -> Path:
    return config_root() / "config.json"


def default_base_dir() -> Path:
    return Path.home() / "hostpulse"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in (raw or {}).items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_sampling(cfg: AppConfig) -> None:
    cfg.sampling.cpu_interval_s = float(max(0.1, min(10.0, float(cfg.sampling.cpu_interval_s))))


def _normalize_thresholds(cfg: AppConfig) -> None:
    cfg.thresholds.memory_percent = float(max(0.0, min(100.0, float(cfg.thresholds.memory_percent))))
    cfg.thresholds.disk_percent = float(max(0.0, min(100.0, float(cfg.thresholds.disk_percent))))
    cfg.thresholds.low_memory_gib = float(max(0.0, float(cfg.thresholds.low_memory_gib)))
    cfg.thresholds.load_over_cores = int(max(0, int(cfg.thresholds.load_over_cores)))


def _normalize_runtime(cfg: AppConfig) -> None:
    cfg.commands.timeout_s = float(max(1.0, min(120.0, float(cfg.commands.timeout_s))))
    cfg.temperature.synthetic_jitter_c = int(max(0, int(cfg.temperature.synthetic_jitter_c)))
    cfg.processes.top_n = int(max(1, int(cfg.processes.top_n)))
    cfg.processes.command_width = int(max(8, int(cfg.processes.command_width)))


def _migrate(raw: dict[str, Any]) -> dict[str, Any]:
    version = int(raw.get("config_version", 1))
    data = dict(raw)

    if version < 2:
        # v1 kept alert thresholds and the CPU interval at the top level.
        thresholds = dict(data.get("thresholds", {}) or {})
        for key in ("memory_percent", "disk_percent"):
            if key in data:
                thresholds.setdefault(key, data.pop(key))
        data["thresholds"] = thresholds
        if "cpu_interval_s" in data:
            sampling = dict(data.get("sampling", {}) or {})
            sampling.setdefault("cpu_interval_s", data.pop("cpu_interval_s"))
            data["sampling"] = sampling
        data["config_version"] = 2

    return data


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()

    data = _migrate(raw)
    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        paths=_merge(PathsConfig, data.get("paths", {})),
        sampling=_merge(SamplingConfig, data.get("sampling", {})),
        thresholds=_merge(ThresholdsConfig, data.get("thresholds", {})),
        temperature=_merge(TemperatureConfig, data.get("temperature", {})),
        commands=_merge(CommandsConfig, data.get("commands", {})),
        processes=_merge(ProcessesConfig, data.get("processes", {})),
        report=_merge(ReportConfig, data.get("report", {})),
    )

    _normalize_sampling(cfg)
    _normalize_thresholds(cfg)
    _normalize_runtime(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path


def collector_settings(cfg: AppConfig) -> CollectorSettings:
    return CollectorSettings(
        cpu_interval_s=cfg.sampling.cpu_interval_s,
        low_memory_bytes=int(cfg.thresholds.low_memory_gib * GIB),
        command_timeout_s=cfg.commands.timeout_s,
        synthetic_base_c=cfg.temperature.synthetic_base_c,
        synthetic_jitter_c=cfg.temperature.synthetic_jitter_c,
        top_n=cfg.processes.top_n,
        command_width=cfg.processes.command_width,
    )


def alert_rules(cfg: AppConfig) -> AlertRules:
    return AlertRules(
        memory_percent=cfg.thresholds.memory_percent,
        disk_percent=cfg.thresholds.disk_percent,
        load_over_cores=cfg.thresholds.load_over_cores,
    )
