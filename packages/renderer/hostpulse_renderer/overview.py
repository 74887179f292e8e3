"""Overview card image composed from a snapshot."""

from __future__ import annotations

import base64
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from hostpulse_telemetry.models import MetricsSnapshot, TemperatureProvenance

from .formatting import NA, fmt_temperature
from .models import ThemeConfig
from .themes import get_theme, hex_to_rgb, status_color


class OverviewRenderer:
    """Draws five metric cards (CPU, RAM, disk, GPU, temperature) as a PNG."""

    def __init__(self, width: int = 800, height: int = 420) -> None:
        self.width = width
        self.height = height

    def render_image(self, snapshot: MetricsSnapshot, theme_name: str | None = None) -> Image.Image:
        theme = get_theme(theme_name)
        image = Image.new("RGB", (self.width, self.height), hex_to_rgb(theme.background_start))
        draw = ImageDraw.Draw(image)

        self._paint_gradient(image, theme)
        self._draw_header(draw, theme, snapshot)
        self._draw_cards(draw, theme, snapshot)
        return image

    def render_png(self, snapshot: MetricsSnapshot, theme_name: str | None = None) -> bytes:
        buf = BytesIO()
        self.render_image(snapshot, theme_name).save(buf, format="PNG")
        return buf.getvalue()

    def data_url(self, snapshot: MetricsSnapshot, theme_name: str | None = None) -> str:
        b64 = base64.b64encode(self.render_png(snapshot, theme_name)).decode("ascii")
        return f"data:image/png;base64,{b64}"

    def write(self, path: Path, snapshot: MetricsSnapshot, theme_name: str | None = None) -> Path:
        path.write_bytes(self.render_png(snapshot, theme_name))
        return path

    def _font(self, size: int):
        try:
            return ImageFont.truetype("DejaVuSans.ttf", size)
        except Exception:
            return ImageFont.load_default()

    def _paint_gradient(self, image: Image.Image, theme: ThemeConfig) -> None:
        top = hex_to_rgb(theme.background_start)
        bottom = hex_to_rgb(theme.background_end)
        draw = ImageDraw.Draw(image)
        for y in range(self.height):
            t = y / max(self.height - 1, 1)
            color = tuple(int(top[i] * (1 - t) + bottom[i] * t) for i in range(3))
            draw.line([(0, y), (self.width, y)], fill=color)

    def _draw_header(self, draw: ImageDraw.ImageDraw, theme: ThemeConfig, s: MetricsSnapshot) -> None:
        hostname = s.system.hostname if s.system else "host"
        draw.text((28, 18), hostname.upper(), font=self._font(30), fill=hex_to_rgb(theme.text_primary))
        draw.text(
            (30, 58),
            f"{s.environment.kind.value}  |  {s.timestamp.astimezone().strftime('%Y-%m-%d %H:%M:%S')}",
            font=self._font(16),
            fill=hex_to_rgb(theme.text_secondary),
        )

    def _cards(self, s: MetricsSnapshot) -> list[tuple[str, str, str, float | None]]:
        mem = s.memory
        primary = s.disks.primary
        gpu = s.gpu
        temp = s.cpu_temperature
        return [
            (
                "CPU",
                f"{s.cpu.usage_percent:.1f}%" if s.cpu.usage_percent is not None else NA,
                f"{s.cpu.cores} cores, load {s.cpu.load_1m:.2f}" if s.cpu.load_1m is not None else f"{s.cpu.cores} cores",
                s.cpu.usage_percent,
            ),
            (
                "RAM",
                f"{mem.used_percent:.1f}%" if mem else NA,
                f"{mem.used_gb:.1f}/{mem.total_gb:.1f} GB" if mem else "unavailable",
                mem.used_percent if mem else None,
            ),
            (
                "DISK",
                f"{primary.used_percent:.1f}%" if primary else NA,
                primary.mountpoint if primary else "no volumes",
                primary.used_percent if primary else None,
            ),
            (
                "GPU",
                f"{gpu.utilization_percent:.1f}%" if gpu.detected and gpu.utilization_percent is not None else NA,
                (gpu.name or gpu.vendor or "GPU")[:24] if gpu.detected else "not detected",
                gpu.utilization_percent if gpu.detected else None,
            ),
            (
                "TEMP",
                fmt_temperature(temp).split(" ")[0],
                "estimated" if temp.provenance is TemperatureProvenance.SYNTHETIC_ESTIMATE else (temp.source or temp.provenance.value),
                None,
            ),
        ]

    def _draw_cards(self, draw: ImageDraw.ImageDraw, theme: ThemeConfig, s: MetricsSnapshot) -> None:
        card_color = hex_to_rgb(theme.card_bg)
        primary = hex_to_rgb(theme.text_primary)
        secondary = hex_to_rgb(theme.text_secondary)

        margin, gap, top = 24, 16, 100
        columns = 3
        card_w = (self.width - 2 * margin - (columns - 1) * gap) // columns
        card_h = 140

        for idx, (title, value, subtitle, percent) in enumerate(self._cards(s)):
            row, col = divmod(idx, columns)
            x0 = margin + col * (card_w + gap)
            y0 = top + row * (card_h + gap)
            x1, y1 = x0 + card_w, y0 + card_h
            bar = hex_to_rgb(status_color(theme, percent))

            draw.rounded_rectangle((x0, y0, x1, y1), radius=16, fill=card_color)
            draw.text((x0 + 16, y0 + 10), title, font=self._font(18), fill=secondary)
            draw.text((x0 + 16, y0 + 44), value, font=self._font(28), fill=primary)
            draw.text((x0 + 16, y0 + 88), subtitle, font=self._font(14), fill=secondary)
            if percent is not None:
                fill_w = int((card_w - 32) * max(0.0, min(100.0, percent)) / 100)
                draw.rounded_rectangle((x0 + 16, y1 - 16, x1 - 16, y1 - 10), radius=3, outline=bar)
                if fill_w > 0:
                    draw.rounded_rectangle((x0 + 16, y1 - 16, x0 + 16 + fill_w, y1 - 10), radius=3, fill=bar)
