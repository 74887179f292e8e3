"""Top memory consumers from the process table."""

from __future__ import annotations

import logging
from typing import Iterable

import psutil

from .models import ProcessSample

logger = logging.getLogger("hostpulse.processes")

DEFAULT_TOP_N = 5
DEFAULT_COMMAND_WIDTH = 30


def truncate_command(command: str, width: int = DEFAULT_COMMAND_WIDTH) -> str:
    # str slicing is by code point, so multi-byte characters stay whole
    return command[:width]


def rank(processes: Iterable[ProcessSample], n: int = DEFAULT_TOP_N, width: int = DEFAULT_COMMAND_WIDTH) -> list[ProcessSample]:
    ordered = sorted(processes, key=lambda p: (-p.memory_percent, p.pid))
    return [
        ProcessSample(pid=p.pid, user=p.user, memory_percent=p.memory_percent, command=truncate_command(p.command, width))
        for p in ordered[: max(n, 0)]
    ]


def read_processes() -> list[ProcessSample]:
    samples: list[ProcessSample] = []
    attrs = ["pid", "username", "memory_percent", "name", "cmdline"]
    for proc in psutil.process_iter(attrs=attrs, ad_value=None):
        try:
            info = proc.info
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
        if info.get("memory_percent") is None:
            continue
        cmdline = info.get("cmdline") or []
        command = cmdline[0] if cmdline else (info.get("name") or "?")
        samples.append(
            ProcessSample(
                pid=int(info["pid"]),
                user=info.get("username") or "?",
                memory_percent=float(info["memory_percent"]),
                command=command,
            )
        )
    logger.debug("read %d processes", len(samples))
    return samples
