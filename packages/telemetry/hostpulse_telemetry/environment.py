"""Host kind and virtualization layer detection."""

from __future__ import annotations

import logging
import platform
from pathlib import Path

from .models import EnvironmentInfo, EnvironmentKind

logger = logging.getLogger("hostpulse.environment")

OSRELEASE_PATH = Path("/proc/sys/kernel/osrelease")

# WSL2 kernels report e.g. "5.15.90.1-microsoft-standard-WSL2"; WSL1 reports
# the host build, e.g. "4.4.0-19041-Microsoft".
_V2_MARKER = "wsl2"
_V1_MARKER = "microsoft"


def classify_text(release: str, system: str) -> EnvironmentInfo:
    """Classify a host from its kernel release string and platform name."""
    lowered = (release or "").lower()
    if _V2_MARKER in lowered:
        kind = EnvironmentKind.COMPAT_LAYER_V2
    elif _V1_MARKER in lowered:
        kind = EnvironmentKind.COMPAT_LAYER_V1
    elif system == "Linux":
        kind = EnvironmentKind.NATIVE_LINUX
    elif system == "Darwin":
        kind = EnvironmentKind.MACOS
    else:
        kind = EnvironmentKind.UNKNOWN
    return EnvironmentInfo(kind=kind, release=release or "", system=system or "")


def _read_release(path: Path) -> str:
    if path.exists():
        return path.read_text(encoding="utf-8").strip()
    return platform.uname().release


def classify(osrelease_path: Path = OSRELEASE_PATH) -> EnvironmentInfo:
    try:
        release = _read_release(osrelease_path)
        system = platform.system()
    except OSError as exc:
        logger.warning("host identification unreadable: %s", exc)
        return EnvironmentInfo(kind=EnvironmentKind.UNKNOWN)
    info = classify_text(release, system)
    logger.info("environment classified as %s (release %s)", info.kind.value, info.release)
    return info
