"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ThemeConfig:
    name: str
    background_start: str
    background_end: str
    card_bg: str
    accent: str
    text_primary: str
    text_secondary: str
    status_good: str
    status_warning: str
    status_critical: str


@dataclass(frozen=True)
class ReportPaths:
    csv: str | None = None
    html: str | None = None
    overview_png: str | None = None
