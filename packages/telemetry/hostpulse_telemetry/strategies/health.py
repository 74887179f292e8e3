"""SMART disk health via smartctl."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Sequence

from ..commands import DEFAULT_TIMEOUT_S, CommandResult, run_command, which
from ..models import DiskHealth, HealthStatus
from ..resolver import StrategyChain

REASON_PERMISSION_DENIED = "PermissionDenied"
REASON_TOOL_NOT_FOUND = "ToolNotFound"
REASON_NO_DEVICE = "NoDevice"
REASON_COMMAND_FAILED = "CommandFailed"

CANDIDATE_DEVICES = ("/dev/nvme0n1", "/dev/disk0", "/dev/sda")

Runner = Callable[[Sequence[str], float], CommandResult]


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def pick_device(candidates: Sequence[str] = CANDIDATE_DEVICES, exists: Callable[[str], bool] | None = None) -> str | None:
    exists = exists or (lambda p: Path(p).exists())
    for device in candidates:
        if exists(device):
            return device
    return None


def parse_smartctl_health(output: str) -> HealthStatus:
    if "result: PASSED" in output:
        return HealthStatus.PASSED
    if "result: FAILED" in output:
        return HealthStatus.FAILED
    return HealthStatus.UNKNOWN


class SmartctlStrategy:
    name = "smartctl"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_S,
        runner: Runner = run_command,
        locate: Callable[[str], str | None] = which,
        is_root: Callable[[], bool] = _is_root,
        device: str | None = None,
    ) -> None:
        self.timeout = timeout
        self._runner = runner
        self._locate = locate
        self._is_root = is_root
        self._device = device
        self.blocked_reason: str | None = None

    @property
    def device(self) -> str | None:
        return self._device

    def is_available(self) -> bool:
        if self._locate("smartctl") is None:
            self.blocked_reason = REASON_TOOL_NOT_FOUND
            return False
        if not self._is_root():
            self.blocked_reason = REASON_PERMISSION_DENIED
            return False
        if self._device is None:
            self._device = pick_device()
        if self._device is None:
            self.blocked_reason = REASON_NO_DEVICE
            return False
        self.blocked_reason = None
        return True

    def extract(self) -> DiskHealth | None:
        result = self._runner(["smartctl", "-H", self._device], self.timeout)
        # smartctl sets bit flags in its exit status even when the query worked
        if result.timed_out or not result.stdout:
            self.blocked_reason = REASON_COMMAND_FAILED
            return None
        return DiskHealth(available=True, status=parse_smartctl_health(result.stdout), device=self._device)


def build_health_chain(timeout: float = DEFAULT_TIMEOUT_S, strategy: SmartctlStrategy | None = None) -> StrategyChain[DiskHealth]:
    smartctl = strategy or SmartctlStrategy(timeout=timeout)

    def _unavailable() -> DiskHealth:
        return DiskHealth.not_checked(smartctl.blocked_reason or REASON_TOOL_NOT_FOUND, device=smartctl.device)

    return StrategyChain("disk-health", [smartctl], fallback=_unavailable)
