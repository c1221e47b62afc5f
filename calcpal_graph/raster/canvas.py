from __future__ import annotations

import numpy as np

from calcpal_graph.style import RGBA


def new_canvas(width: int, height: int, color: RGBA = (255, 255, 255, 255)) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("canvas width/height must be > 0")
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    fill_canvas(canvas, color)
    return canvas


def fill_canvas(dst: np.ndarray, color: RGBA) -> None:
    dst[:, :] = np.asarray(color, dtype=np.uint8)


def _blend(dst_rgb: np.ndarray, color: RGBA) -> np.ndarray:
    a = color[3] / 255.0
    src = np.asarray(color[0:3], dtype=np.float32)
    return (src * a + dst_rgb.astype(np.float32) * (1.0 - a)).astype(np.uint8)


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0] or x < 0 or x >= dst.shape[1]:
        return
    dst[y, x, 0:3] = _blend(dst[y, x, 0:3], color)
    dst[y, x, 3] = 255


def fill_rect(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA) -> None:
    """Blend ``color`` over the inclusive pixel rectangle, clipped to ``dst``."""
    xa = max(0, min(x0, x1))
    xb = min(dst.shape[1] - 1, max(x0, x1))
    ya = max(0, min(y0, y1))
    yb = min(dst.shape[0] - 1, max(y0, y1))
    if xa > xb or ya > yb:
        return
    patch = dst[ya : yb + 1, xa : xb + 1]
    patch[:, :, :3] = _blend(patch[:, :, :3], color)
    patch[:, :, 3] = 255
