"""Single-read providers for CPU identity, memory, disks, network and uptime."""

from __future__ import annotations

import logging
import platform
import socket
import time
from pathlib import Path
from typing import Iterable, Sequence

import psutil

from .commands import DEFAULT_TIMEOUT_S, run_command
from .errors import MissingSourceError
from .models import (
    GIB,
    CpuMetrics,
    DiskMetrics,
    DiskVolume,
    EnvironmentInfo,
    EnvironmentKind,
    MemoryCaveat,
    MemoryMetrics,
    NetworkInterface,
    SystemInfo,
)
from .sampler import DEFAULT_INTERVAL_S, DeltaSampler

logger = logging.getLogger("hostpulse.readers")

DEFAULT_LOW_MEMORY_BYTES = 8 * GIB
WINDOWS_BRIDGE_PATH = "/mnt/c"
CPUINFO_PATH = Path("/proc/cpuinfo")

VIRTUAL_FSTYPES = frozenset(
    {
        "anon_inodefs",
        "autofs",
        "aufs",
        "bdev",
        "binfmt_misc",
        "bpf",
        "cgroup",
        "cgroup2",
        "configfs",
        "debugfs",
        "devfs",
        "devpts",
        "devtmpfs",
        "efivarfs",
        "fuse.gvfsd-fuse",
        "fuse.lxcfs",
        "fuse.portal",
        "fuse.snapfuse",
        "fusectl",
        "hugetlbfs",
        "mqueue",
        "nfsd",
        "nsfs",
        "overlay",
        "pipefs",
        "proc",
        "pstore",
        "ramfs",
        "rpc_pipefs",
        "securityfs",
        "selinuxfs",
        "sockfs",
        "squashfs",
        "sysfs",
        "tmpfs",
        "tracefs",
    }
)

_LOOPBACK_NAMES = ("lo", "lo0")


def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


# -- CPU ------------------------------------------------------------------


def _cpu_model(env: EnvironmentInfo, cpuinfo_path: Path = CPUINFO_PATH, timeout: float = DEFAULT_TIMEOUT_S) -> str:
    if env.kind is EnvironmentKind.MACOS:
        result = run_command(["sysctl", "-n", "machdep.cpu.brand_string"], timeout=timeout)
        if result.ok and result.stdout:
            return result.stdout
    try:
        for line in cpuinfo_path.read_text(encoding="utf-8", errors="replace").splitlines():
            if line.startswith("model name"):
                _, _, value = line.partition(":")
                if value.strip():
                    return value.strip()
    except OSError:
        logger.debug("cpuinfo not readable at %s", cpuinfo_path)
    return platform.processor() or "Unknown"


def _load_averages() -> tuple[float | None, float | None, float | None]:
    try:
        one, five, fifteen = psutil.getloadavg()
    except (AttributeError, OSError) as exc:
        logger.warning("load averages unavailable: %s", exc)
        return None, None, None
    return float(one), float(five), float(fifteen)


def read_cpu(
    env: EnvironmentInfo,
    sampler: DeltaSampler | None = None,
    interval: float = DEFAULT_INTERVAL_S,
    timeout: float = DEFAULT_TIMEOUT_S,
) -> CpuMetrics:
    sampler = sampler or DeltaSampler()
    cores = psutil.cpu_count(logical=True) or 1
    try:
        usage: float | None = sampler.measure(interval)
    except (OSError, RuntimeError) as exc:
        logger.warning("cpu counters unavailable: %s", exc)
        usage = None
    load_1m, load_5m, load_15m = _load_averages()
    return CpuMetrics(
        model=_cpu_model(env, timeout=timeout),
        cores=max(1, int(cores)),
        usage_percent=usage,
        load_1m=load_1m,
        load_5m=load_5m,
        load_15m=load_15m,
    )


# -- Memory ---------------------------------------------------------------


def memory_caveat(env: EnvironmentInfo, total: int, low_memory_bytes: int = DEFAULT_LOW_MEMORY_BYTES) -> MemoryCaveat:
    if env.kind is EnvironmentKind.COMPAT_LAYER_V2:
        return MemoryCaveat.VIRTUALIZED_HOST_WARNING
    if env.is_compat_layer and total < low_memory_bytes:
        return MemoryCaveat.LOW_HEADROOM_WARNING
    return MemoryCaveat.NONE


def memory_from_counters(
    total: int,
    free: int,
    available: int | None,
    env: EnvironmentInfo,
    low_memory_bytes: int = DEFAULT_LOW_MEMORY_BYTES,
) -> MemoryMetrics:
    """Derive used memory from raw counters.

    ``available`` refines ``free`` when the kernel exposes it.
    """
    effective_free = available if available is not None else free
    used = max(total - effective_free, 0)
    percent = _clamp_percent(used / total * 100) if total > 0 else 0.0
    return MemoryMetrics(
        total=total,
        used=used,
        free=free,
        available=available,
        used_percent=percent,
        caveat=memory_caveat(env, total, low_memory_bytes),
    )


def read_memory(env: EnvironmentInfo, low_memory_bytes: int = DEFAULT_LOW_MEMORY_BYTES) -> MemoryMetrics:
    vm = psutil.virtual_memory()
    available = getattr(vm, "available", None)
    return memory_from_counters(int(vm.total), int(vm.free), None if available is None else int(available), env, low_memory_bytes)


# -- Disks ----------------------------------------------------------------


def select_primary(mountpoints: Sequence[str], env: EnvironmentInfo, bridge_path: str = WINDOWS_BRIDGE_PATH) -> int | None:
    """Index of the volume representing "the" disk, or None for no volumes."""
    if not mountpoints:
        return None
    if env.is_compat_layer and bridge_path in mountpoints:
        return list(mountpoints).index(bridge_path)
    if "/" in mountpoints:
        return list(mountpoints).index("/")
    return 0


def is_virtual_fstype(fstype: str) -> bool:
    return fstype.lower() in VIRTUAL_FSTYPES


def build_disk_metrics(volumes: Iterable[DiskVolume], env: EnvironmentInfo, bridge_path: str = WINDOWS_BRIDGE_PATH) -> DiskMetrics:
    ordered = list(volumes)
    primary = select_primary([v.mountpoint for v in ordered], env, bridge_path)
    marked = tuple(
        DiskVolume(
            device=v.device,
            mountpoint=v.mountpoint,
            fstype=v.fstype,
            total=v.total,
            used=v.used,
            available=v.available,
            used_percent=v.used_percent,
            is_primary=(i == primary),
        )
        for i, v in enumerate(ordered)
    )
    return DiskMetrics(volumes=marked)


def read_disks(env: EnvironmentInfo, bridge_path: str = WINDOWS_BRIDGE_PATH) -> DiskMetrics:
    volumes: list[DiskVolume] = []
    seen: set[str] = set()
    # all=True: psutil otherwise drops every "nodev" type, which includes the 9p
    # mount WSL2 uses for the Windows drive.
    for part in psutil.disk_partitions(all=True):
        if not part.device or is_virtual_fstype(part.fstype) or part.mountpoint in seen:
            continue
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except OSError as exc:
            logger.warning("disk usage unreadable for %s: %s", part.mountpoint, exc)
            continue
        seen.add(part.mountpoint)
        volumes.append(
            DiskVolume(
                device=part.device,
                mountpoint=part.mountpoint,
                fstype=part.fstype,
                total=int(usage.total),
                used=int(usage.used),
                available=int(usage.free),
                used_percent=_clamp_percent(float(usage.percent)),
            )
        )
    if not volumes:
        raise MissingSourceError("no real mounted filesystems found")
    return build_disk_metrics(volumes, env, bridge_path)


# -- Network --------------------------------------------------------------


def is_loopback(name: str) -> bool:
    return name in _LOOPBACK_NAMES or name.lower().startswith("loopback")


def read_network() -> tuple[NetworkInterface, ...]:
    counters = psutil.net_io_counters(pernic=True) or {}
    return tuple(
        NetworkInterface(
            name=name,
            bytes_recv=int(io.bytes_recv),
            bytes_sent=int(io.bytes_sent),
            packets_recv=int(io.packets_recv),
            packets_sent=int(io.packets_sent),
        )
        for name, io in sorted(counters.items())
        if not is_loopback(name)
    )


# -- Uptime / process table ------------------------------------------------


def read_system_info() -> SystemInfo:
    uptime: float | None
    try:
        uptime = max(time.time() - psutil.boot_time(), 0.0)
    except (OSError, RuntimeError) as exc:
        logger.warning("boot time unavailable: %s", exc)
        uptime = None
    try:
        count: int | None = len(psutil.pids())
    except OSError as exc:
        logger.warning("process table unavailable: %s", exc)
        count = None
    return SystemInfo(hostname=socket.gethostname(), uptime_seconds=uptime, process_count=count)
