from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from calcpal_graph.raster.canvas import draw_pixel, fill_rect
from calcpal_graph.style import RGBA


Point = tuple[float, float]


def draw_polyline(dst: np.ndarray, points: Sequence[Point], color: RGBA, width: int = 1) -> None:
    if len(points) < 2:
        return
    for (x0, y0), (x1, y1) in zip(points[:-1], points[1:]):
        draw_line(dst, x0, y0, x1, y1, color=color, width=width)


def draw_line(dst: np.ndarray, x0: float, y0: float, x1: float, y1: float, color: RGBA, width: int = 1) -> None:
    lo, hi = _brush_extent(width)
    clipped = clip_segment(
        x0,
        y0,
        x1,
        y1,
        xmin=float(lo),
        ymin=float(lo),
        xmax=float(dst.shape[1] - 1 + hi),
        ymax=float(dst.shape[0] - 1 + hi),
    )
    if clipped is None:
        return
    ix0, iy0, ix1, iy1 = (int(round(v)) for v in clipped)
    if ix0 == ix1 or iy0 == iy1:
        fill_rect(dst, min(ix0, ix1) + lo, min(iy0, iy1) + lo, max(ix0, ix1) + hi, max(iy0, iy1) + hi, color)
        return
    _draw_line_segment(dst, ix0, iy0, ix1, iy1, color=color, width=width)


def clip_segment(
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    *,
    xmin: float,
    ymin: float,
    xmax: float,
    ymax: float,
) -> tuple[float, float, float, float] | None:
    """Liang-Barsky clip of a segment to a rectangle; None when fully outside."""
    if not all(math.isfinite(v) for v in (x0, y0, x1, y1)):
        return None
    dx = x1 - x0
    dy = y1 - y0
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x0 - xmin), (dx, xmax - x0), (-dy, y0 - ymin), (dy, ymax - y0)):
        if p == 0:
            if q < 0:
                return None
            continue
        t = q / p
        if p < 0:
            if t > t1:
                return None
            t0 = max(t0, t)
        else:
            if t < t0:
                return None
            t1 = min(t1, t)
    return (x0 + t0 * dx, y0 + t0 * dy, x0 + t1 * dx, y0 + t1 * dy)


def _brush_extent(width: int) -> tuple[int, int]:
    width = max(1, int(width))
    return (-((width - 1) // 2), width // 2)


def _draw_line_segment(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA, width: int) -> None:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        _draw_square_brush(dst, x0, y0, color=color, width=width)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def _draw_square_brush(dst: np.ndarray, x: int, y: int, color: RGBA, width: int) -> None:
    lo, hi = _brush_extent(width)
    if lo == hi:
        draw_pixel(dst, x, y, color)
        return
    fill_rect(dst, x + lo, y + lo, x + hi, y + hi, color)
