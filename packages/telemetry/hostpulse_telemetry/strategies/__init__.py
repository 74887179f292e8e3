"""Fallback strategy chains for GPU, temperature and disk health."""

from .gpu import AmdSysfsStrategy, NvidiaSmiStrategy, NvmlStrategy, SystemProfilerStrategy, build_gpu_chain
from .health import SmartctlStrategy, build_health_chain
from .temperature import (
    GpuDieStrategy,
    LmSensorsStrategy,
    PsutilSensorStrategy,
    SyntheticEstimator,
    ThermalZoneStrategy,
    build_temperature_chain,
)

__all__ = [
    "AmdSysfsStrategy",
    "GpuDieStrategy",
    "LmSensorsStrategy",
    "NvidiaSmiStrategy",
    "NvmlStrategy",
    "PsutilSensorStrategy",
    "SmartctlStrategy",
    "SyntheticEstimator",
    "SystemProfilerStrategy",
    "ThermalZoneStrategy",
    "build_gpu_chain",
    "build_health_chain",
    "build_temperature_chain",
]
