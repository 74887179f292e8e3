"""Snapshot consumers: CSV trail, HTML report and overview image."""

from .csv_export import CSV_COLUMNS, append_snapshot, snapshot_row
from .html_report import HtmlReport
from .models import ReportPaths, ThemeConfig
from .themes import DEFAULT_THEME_NAME, get_theme, list_themes

try:  # pragma: no cover - optional at import time for test environments
    from .overview import OverviewRenderer
except Exception:  # pragma: no cover
    OverviewRenderer = None  # type: ignore[assignment]

__all__ = [
    "CSV_COLUMNS",
    "DEFAULT_THEME_NAME",
    "HtmlReport",
    "ReportPaths",
    "ThemeConfig",
    "append_snapshot",
    "get_theme",
    "list_themes",
    "snapshot_row",
]

if OverviewRenderer is not None:
    __all__.append("OverviewRenderer")
