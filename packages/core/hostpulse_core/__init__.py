"""Core services for settings, logging, output directories and diagnostics."""

from .config import AppConfig, alert_rules, collector_settings, load_config, save_config
from .diagnostics import build_doctor_payload
from .workspace import FatalSetupError, Workspace

__all__ = [
    "AppConfig",
    "FatalSetupError",
    "Workspace",
    "alert_rules",
    "build_doctor_payload",
    "collector_settings",
    "load_config",
    "save_config",
]
