"""Stateless threshold rules over a finished snapshot."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .models import AlertEvent, AlertKind, MetricsSnapshot


@dataclass(frozen=True)
class AlertRules:
    memory_percent: float = 90.0
    disk_percent: float = 90.0
    load_over_cores: int = 0


def evaluate(snapshot: MetricsSnapshot, rules: AlertRules | None = None) -> list[AlertEvent]:
    """Return every rule that fires; thresholds are strict ``>``.

    Inputs that were unavailable skip their rule. The load rule compares the
    floored 1-minute load against the logical core count plus
    ``load_over_cores``.
    """
    rules = rules or AlertRules()
    events: list[AlertEvent] = []

    memory = snapshot.memory
    if memory is not None and memory.used_percent > rules.memory_percent:
        events.append(AlertEvent(AlertKind.HIGH_MEMORY, memory.used_percent, rules.memory_percent))

    primary = snapshot.disks.primary
    if primary is not None and primary.used_percent > rules.disk_percent:
        events.append(AlertEvent(AlertKind.HIGH_DISK, primary.used_percent, rules.disk_percent, subject=primary.mountpoint))

    cpu = snapshot.cpu
    load_limit = cpu.cores + rules.load_over_cores
    if cpu.load_1m is not None and math.floor(cpu.load_1m) > load_limit:
        events.append(AlertEvent(AlertKind.HIGH_LOAD, cpu.load_1m, float(load_limit)))

    return events
