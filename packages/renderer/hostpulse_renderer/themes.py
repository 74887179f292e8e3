"""Built-in report themes."""

from __future__ import annotations

from .models import ThemeConfig

DEFAULT_THEME_NAME = "Neon Slate"

THEMES: dict[str, ThemeConfig] = {
    "Neon Slate": ThemeConfig(
        name="Neon Slate",
        background_start="#0A0F1D",
        background_end="#131B33",
        card_bg="#1A253F",
        accent="#35D9FF",
        text_primary="#F4F7FF",
        text_secondary="#A9B5D1",
        status_good="#8CFFB5",
        status_warning="#FFD166",
        status_critical="#FF6B6B",
    ),
    "Paper": ThemeConfig(
        name="Paper",
        background_start="#F0F2F5",
        background_end="#E3E7ED",
        card_bg="#FFFFFF",
        accent="#667EEA",
        text_primary="#222831",
        text_secondary="#5C6672",
        status_good="#10B981",
        status_warning="#F59E0B",
        status_critical="#EF4444",
    ),
}


def list_themes() -> list[str]:
    return sorted(THEMES.keys())


def get_theme(name: str | None) -> ThemeConfig:
    if not name:
        return THEMES[DEFAULT_THEME_NAME]
    return THEMES.get(name, THEMES[DEFAULT_THEME_NAME])


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    return tuple(int(value[i : i + 2], 16) for i in (1, 3, 5))  # type: ignore[return-value]


def status_color(theme: ThemeConfig, percent: float | None, warning: float = 70.0, critical: float = 90.0) -> str:
    if percent is None:
        return theme.text_secondary
    if percent >= critical:
        return theme.status_critical
    if percent >= warning:
        return theme.status_warning
    return theme.status_good
