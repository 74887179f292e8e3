"""GPU sources: NVML, nvidia-smi, AMD sysfs and macOS system_profiler."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Callable, Sequence

from ..commands import DEFAULT_TIMEOUT_S, CommandResult, run_command, which
from ..errors import ParseFailureError
from ..models import EnvironmentInfo, EnvironmentKind, GpuMetrics
from ..resolver import StrategyChain

WINDOWS_NVIDIA_SMI = "/mnt/c/Windows/System32/nvidia-smi.exe"
NVIDIA_QUERY = "--query-gpu=name,memory.used,memory.total,utilization.gpu,temperature.gpu"
AMD_PCI_VENDOR = "0x1002"

logger = logging.getLogger("hostpulse.gpu")

Runner = Callable[[Sequence[str], float], CommandResult]


def _float_or_none(text: str) -> float | None:
    text = text.strip()
    if not text or text.startswith("[") or text.upper() in ("N/A", "NA"):
        return None
    return float(text)


def _import_pynvml():
    import pynvml  # type: ignore

    return pynvml


def _shutdown(nvml) -> None:
    try:
        nvml.nvmlShutdown()
    except Exception as exc:
        logger.debug("nvmlShutdown failed: %s", exc)


class NvmlStrategy:
    """NVIDIA management library; every call is bracketed by init/shutdown."""

    name = "nvml"

    def __init__(self, loader: Callable[[], Any] | None = None) -> None:
        self._loader = loader or _import_pynvml

    def is_available(self) -> bool:
        try:
            nvml = self._loader()
            nvml.nvmlInit()
        except Exception:
            return False
        try:
            return nvml.nvmlDeviceGetCount() > 0
        except Exception:
            return False
        finally:
            _shutdown(nvml)

    def extract(self) -> GpuMetrics | None:
        nvml = self._loader()
        nvml.nvmlInit()
        try:
            h = nvml.nvmlDeviceGetHandleByIndex(0)
            name = nvml.nvmlDeviceGetName(h)
            if isinstance(name, bytes):
                name = name.decode("utf-8", errors="replace")
            mem = nvml.nvmlDeviceGetMemoryInfo(h)
            util = nvml.nvmlDeviceGetUtilizationRates(h)
            try:
                temp: float | None = float(nvml.nvmlDeviceGetTemperature(h, nvml.NVML_TEMPERATURE_GPU))
            except Exception:
                temp = None
            return GpuMetrics(
                detected=True,
                vendor="nvidia",
                name=str(name),
                memory_used_mb=mem.used / (1024 * 1024),
                memory_total_mb=mem.total / (1024 * 1024),
                utilization_percent=float(util.gpu),
                temperature_c=temp,
            )
        finally:
            _shutdown(nvml)


def parse_nvidia_smi(output: str) -> GpuMetrics:
    """Parse the first GPU row of a csv,noheader,nounits query."""
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        raise ParseFailureError("nvidia-smi returned no rows")
    parts = [p.strip() for p in lines[0].split(",")]
    if len(parts) < 5:
        raise ParseFailureError(f"unexpected nvidia-smi row: {lines[0]!r}")
    try:
        used = _float_or_none(parts[1])
        total = _float_or_none(parts[2])
        util = _float_or_none(parts[3])
        temp = _float_or_none(parts[4])
    except ValueError as exc:
        raise ParseFailureError(str(exc)) from exc
    if not parts[0] or used is None or total is None or util is None:
        raise ParseFailureError(f"incomplete nvidia-smi row: {lines[0]!r}")
    return GpuMetrics(
        detected=True,
        vendor="nvidia",
        name=parts[0],
        memory_used_mb=used,
        memory_total_mb=total,
        utilization_percent=max(0.0, min(100.0, util)),
        temperature_c=temp,
    )


class NvidiaSmiStrategy:
    name = "nvidia-smi"

    def __init__(
        self,
        env: EnvironmentInfo,
        timeout: float = DEFAULT_TIMEOUT_S,
        runner: Runner = run_command,
        locate: Callable[[str], str | None] = which,
    ) -> None:
        self.env = env
        self.timeout = timeout
        self._runner = runner
        self._locate = locate
        self._binary: str | None = None

    def _find_binary(self) -> str | None:
        found = self._locate("nvidia-smi")
        if found:
            return found
        if self.env.is_compat_layer:
            found = self._locate("nvidia-smi.exe")
            if found:
                return found
            if Path(WINDOWS_NVIDIA_SMI).exists():
                return WINDOWS_NVIDIA_SMI
        return None

    def is_available(self) -> bool:
        self._binary = self._find_binary()
        return self._binary is not None

    def extract(self) -> GpuMetrics | None:
        if not self._binary:
            return None
        result = self._runner([self._binary, NVIDIA_QUERY, "--format=csv,noheader,nounits"], self.timeout)
        if not result.ok:
            return None
        return parse_nvidia_smi(result.stdout)


class AmdSysfsStrategy:
    name = "amd-sysfs"

    def __init__(self, drm_root: Path = Path("/sys/class/drm")) -> None:
        self.drm_root = drm_root

    def _devices(self) -> list[Path]:
        if not self.drm_root.is_dir():
            return []
        out = []
        for card in sorted(self.drm_root.glob("card[0-9]*")):
            device = card / "device"
            vendor = device / "vendor"
            try:
                if vendor.read_text(encoding="ascii").strip().lower() == AMD_PCI_VENDOR and (device / "gpu_busy_percent").exists():
                    out.append(device)
            except OSError:
                continue
        return out

    def is_available(self) -> bool:
        return bool(self._devices())

    @staticmethod
    def _read_int(path: Path) -> int | None:
        try:
            return int(path.read_text(encoding="ascii").strip())
        except (OSError, ValueError):
            return None

    def extract(self) -> GpuMetrics | None:
        devices = self._devices()
        if not devices:
            return None
        device = devices[0]
        busy = self._read_int(device / "gpu_busy_percent")
        vram_used = self._read_int(device / "mem_info_vram_used")
        vram_total = self._read_int(device / "mem_info_vram_total")
        if busy is None or vram_used is None or vram_total is None:
            return None

        temp = None
        for hwmon in sorted(device.glob("hwmon/hwmon*")):
            milli = self._read_int(hwmon / "temp1_input")
            if milli is not None:
                temp = milli / 1000.0
                break

        name = "AMD Radeon"
        product = device / "product_name"
        if product.exists():
            try:
                name = product.read_text(encoding="utf-8").strip() or name
            except OSError:
                pass

        return GpuMetrics(
            detected=True,
            vendor="amd",
            name=name,
            memory_used_mb=vram_used / (1024 * 1024),
            memory_total_mb=vram_total / (1024 * 1024),
            utilization_percent=float(max(0, min(100, busy))),
            temperature_c=temp,
        )


_VRAM_RE = re.compile(r"([\d.]+)\s*(GB|MB)", re.IGNORECASE)


def parse_system_profiler(output: str) -> GpuMetrics | None:
    try:
        data = json.loads(output)
    except json.JSONDecodeError as exc:
        raise ParseFailureError(f"system_profiler JSON: {exc}") from exc
    displays = data.get("SPDisplaysDataType") or []
    if not displays:
        return None
    gpu = displays[0]
    name = gpu.get("sppci_model") or gpu.get("_name")
    if not name:
        return None
    total_mb = None
    vram = gpu.get("spdisplays_vram") or gpu.get("spdisplays_vram_shared") or ""
    match = _VRAM_RE.search(str(vram))
    if match:
        total_mb = float(match.group(1)) * (1024 if match.group(2).upper() == "GB" else 1)
    vendor = str(gpu.get("spdisplays_vendor", "apple")).replace("sppci_vendor_", "").lower() or "apple"
    return GpuMetrics(detected=True, vendor=vendor, name=str(name), memory_total_mb=total_mb)


class SystemProfilerStrategy:
    name = "system_profiler"

    def __init__(self, env: EnvironmentInfo, timeout: float = 30.0, runner: Runner = run_command) -> None:
        self.env = env
        self.timeout = timeout
        self._runner = runner

    def is_available(self) -> bool:
        return self.env.kind is EnvironmentKind.MACOS and which("system_profiler") is not None

    def extract(self) -> GpuMetrics | None:
        result = self._runner(["system_profiler", "SPDisplaysDataType", "-json"], self.timeout)
        if not result.ok:
            return None
        return parse_system_profiler(result.stdout)


def build_gpu_chain(env: EnvironmentInfo, timeout: float = DEFAULT_TIMEOUT_S) -> StrategyChain[GpuMetrics]:
    return StrategyChain(
        "gpu",
        [
            NvmlStrategy(),
            NvidiaSmiStrategy(env, timeout=timeout),
            AmdSysfsStrategy(),
            SystemProfilerStrategy(env, timeout=max(timeout, 30.0)),
        ],
        fallback=GpuMetrics.unavailable,
    )
