"""One collection run: directories, logging, snapshot, alerts, reports."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from hostpulse_core import AppConfig, Workspace, alert_rules, collector_settings
from hostpulse_core.logging_setup import configure_logging, install_crash_hooks
from hostpulse_renderer import HtmlReport, OverviewRenderer, ReportPaths, append_snapshot
from hostpulse_telemetry import AlertEvent, MetricsSnapshot, SnapshotAggregator, evaluate

logger = logging.getLogger("hostpulse.runner")

CSV_NAME = "metrics.csv"


@dataclass
class RunResult:
    snapshot: MetricsSnapshot
    alerts: list[AlertEvent]
    reports: ReportPaths
    workspace: Workspace
    warnings: list[str] = field(default_factory=list)


def _write_reports(cfg: AppConfig, ws: Workspace, stamp: str, snapshot: MetricsSnapshot, alerts: list[AlertEvent], warnings: list[str]) -> ReportPaths:
    csv_path: str | None = None
    html_path: str | None = None
    png_path: str | None = None

    try:
        csv_path = str(append_snapshot(ws.data / CSV_NAME, snapshot))
        logger.info("appended snapshot to %s", csv_path)
    except OSError as exc:
        logger.error("csv export failed: %s", exc)
        warnings.append(f"csv: {exc}")

    data_url = None
    if OverviewRenderer is not None and cfg.report.write_overview_png:
        renderer = OverviewRenderer()
        try:
            png_path = str(renderer.write(ws.reports / f"overview_{stamp}.png", snapshot, cfg.report.theme))
            data_url = renderer.data_url(snapshot, cfg.report.theme)
        except Exception as exc:
            logger.warning("overview image failed: %s", exc)
            warnings.append(f"overview: {exc}")

    if cfg.report.write_html:
        try:
            report = HtmlReport(snapshot, alerts, theme_name=cfg.report.theme, overview_data_url=data_url)
            html_path = str(report.write(ws.reports / f"report_{stamp}.html"))
            logger.info("generated HTML report: %s", html_path)
        except OSError as exc:
            logger.error("html report failed: %s", exc)
            warnings.append(f"html: {exc}")

    return ReportPaths(csv=csv_path, html=html_path, overview_png=png_path)


def run_collection(
    cfg: AppConfig,
    base_dir: Path | None = None,
    aggregator: SnapshotAggregator | None = None,
    console: bool = True,
    crash_hooks: bool = False,
) -> RunResult:
    """Raises FatalSetupError when the output directories cannot be created."""
    ws = Workspace.from_config(cfg, base_dir).ensure()
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    configure_logging(ws.logs, stamp=stamp, console=console)
    if crash_hooks:
        install_crash_hooks(ws.logs)
    logger.info("starting system monitoring in %s", ws.base)

    aggregator = aggregator or SnapshotAggregator(collector_settings(cfg))
    snapshot = aggregator.collect()

    alerts = evaluate(snapshot, alert_rules(cfg))
    for alert in alerts:
        logger.warning(alert.message)
    if not alerts:
        logger.info("no alerts")

    warnings: list[str] = []
    reports = _write_reports(cfg, ws, stamp, snapshot, alerts, warnings)
    logger.info("monitor complete")
    return RunResult(snapshot=snapshot, alerts=alerts, reports=reports, workspace=ws, warnings=warnings)
