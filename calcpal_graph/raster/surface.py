from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from calcpal_graph.raster.canvas import fill_canvas, new_canvas
from calcpal_graph.raster.draw_lines import Point, draw_polyline
from calcpal_graph.raster.draw_text import DEFAULT_FONT_FAMILY, draw_text, text_size
from calcpal_graph.style import parse_color
from calcpal_graph.surface import TextAlign


class RasterSurface:
    """RenderSurface backed by an (H, W, 4) uint8 RGBA numpy canvas."""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        background: str = "#ffffff",
        font_family: str = DEFAULT_FONT_FAMILY,
    ) -> None:
        self._background = parse_color(background)
        self._canvas = new_canvas(width, height, self._background)
        self._subpaths: list[list[Point]] = []
        self.font_family = font_family

    @property
    def width(self) -> int:
        return int(self._canvas.shape[1])

    @property
    def height(self) -> int:
        return int(self._canvas.shape[0])

    @property
    def subpath_count(self) -> int:
        return len(self._subpaths)

    def set_background(self, color: str) -> None:
        self._background = parse_color(color)

    def resize(self, width: int, height: int) -> None:
        # Like an HTML canvas, resizing drops the previous content.
        self._canvas = new_canvas(width, height, self._background)
        self._subpaths = []

    def clear(self) -> None:
        fill_canvas(self._canvas, self._background)

    def begin_path(self) -> None:
        self._subpaths = []

    def move_to(self, x: float, y: float) -> None:
        self._subpaths.append([(float(x), float(y))])

    def line_to(self, x: float, y: float) -> None:
        if not self._subpaths:
            self.move_to(x, y)
            return
        self._subpaths[-1].append((float(x), float(y)))

    def stroke(self, color: str, width: int) -> None:
        rgba = parse_color(color)
        for points in self._subpaths:
            draw_polyline(self._canvas, points, rgba, width=width)

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        align: TextAlign = "left",
        *,
        color: str = "#000000",
        font_size_px: float = 10.0,
    ) -> None:
        """Draw ``text`` with its baseline at ``y``; ``align`` anchors ``x``."""
        if align not in ("left", "center", "right"):
            raise ValueError(f"align must be left, center or right, got {align!r}")
        w, h = text_size(text, font_family=self.font_family, font_size_px=font_size_px)
        left = float(x)
        if align == "center":
            left -= w / 2.0
        elif align == "right":
            left -= w
        draw_text(
            self._canvas,
            int(round(left)),
            int(round(float(y) - h)),
            text,
            parse_color(color),
            font_family=self.font_family,
            font_size_px=font_size_px,
        )

    def to_rgba(self) -> np.ndarray:
        return self._canvas.copy()

    def save_png(self, path: str | Path) -> Path:
        out = Path(path)
        Image.fromarray(self._canvas).save(out, format="PNG")
        return out
