"""Doctor payload: environment, config and which data sources would answer."""

from __future__ import annotations

import platform
import re
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from hostpulse_telemetry import EnvironmentInfo, classify
from hostpulse_telemetry.strategies import build_gpu_chain, build_health_chain, build_temperature_chain

from .config import AppConfig


_SECRET_RE = re.compile(r"(token|secret|password|apikey|api_key|auth)", re.IGNORECASE)


def redact(value: Any) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if _SECRET_RE.search(k):
                out[k] = "***REDACTED***"
            else:
                out[k] = redact(v)
        return out
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


def source_availability(env: EnvironmentInfo, timeout: float) -> dict[str, dict[str, bool]]:
    chains = [
        build_gpu_chain(env, timeout=timeout),
        build_temperature_chain(cpu_percent=None, timeout=timeout),
        build_health_chain(timeout=timeout),
    ]
    return {chain.name: chain.availability() for chain in chains}


def build_doctor_payload(cfg: AppConfig, env: EnvironmentInfo | None = None) -> dict[str, Any]:
    env = env or classify()
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "environment": {
            "kind": env.kind.value,
            "release": env.release,
            "system": env.system,
            "compat_layer": env.is_compat_layer,
        },
        "config": redact(asdict(cfg)),
        "sources": source_availability(env, cfg.commands.timeout_s),
    }
