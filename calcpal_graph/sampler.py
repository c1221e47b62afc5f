from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np

from calcpal_graph.expression import CompiledFunction
from calcpal_graph.scales import CoordinateMapper
from calcpal_graph.surface import RenderSurface
from calcpal_graph.viewport import Viewport


Segment = tuple[np.ndarray, np.ndarray]

# Pixel coordinates are clamped to this magnitude before they reach the surface.
PIXEL_LIMIT = 1e9


@dataclass(frozen=True)
class PlotResult:
    samples: int
    valid_samples: int
    segments: int


def sample_grid(viewport: Viewport) -> np.ndarray:
    """``x_min, x_min + step, ...`` up to and including ``x_max`` when it lands on the grid."""
    count = int(math.floor(viewport.x_range / viewport.step + 1e-9)) + 1
    return viewport.x_min + np.arange(count, dtype=np.float64) * viewport.step


def evaluate_samples(fn: CompiledFunction, xs: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(ys, valid)``; a sample is invalid when it is NaN, infinite or fails to evaluate."""
    try:
        ys = np.broadcast_to(fn.evaluate(xs), xs.shape).astype(np.float64)
    except (ArithmeticError, ValueError):
        # Vectorised evaluation failed somewhere; fall back to one sample at a time.
        samples = [fn.sample(float(x)) for x in xs]
        ys = np.asarray([s.y if s.valid else np.nan for s in samples], dtype=np.float64)
    return ys, np.isfinite(ys)


def contiguous_runs(mask: np.ndarray) -> list[tuple[int, int]]:
    idx = np.flatnonzero(mask)
    if idx.size == 0:
        return []
    runs: list[tuple[int, int]] = []
    start = int(idx[0])
    prev = int(idx[0])
    for v in idx[1:]:
        iv = int(v)
        if iv == prev + 1:
            prev = iv
            continue
        runs.append((start, prev + 1))
        start = iv
        prev = iv
    runs.append((start, prev + 1))
    return runs


def sample_segments(fn: CompiledFunction, viewport: Viewport) -> list[Segment]:
    """Split the sampled curve into runs of consecutive valid samples."""
    xs = sample_grid(viewport)
    ys, valid = evaluate_samples(fn, xs)
    return [(xs[a:b], ys[a:b]) for a, b in contiguous_runs(valid)]


def plot_function(
    surface: RenderSurface,
    mapper: CoordinateMapper,
    fn: CompiledFunction,
    viewport: Viewport,
    color: str,
    width: int = 2,
) -> PlotResult:
    xs = sample_grid(viewport)
    ys, valid = evaluate_samples(fn, xs)
    runs = contiguous_runs(valid)

    surface.begin_path()
    for a, b in runs:
        # Finite samples far outside the viewport can overflow to inf in pixel space.
        with np.errstate(over="ignore", invalid="ignore"):
            px = np.clip(mapper.x_to_pixel(xs[a:b]), -PIXEL_LIMIT, PIXEL_LIMIT)
            py = np.clip(mapper.y_to_pixel(ys[a:b]), -PIXEL_LIMIT, PIXEL_LIMIT)
        surface.move_to(float(px[0]), float(py[0]))
        for x, y in zip(px[1:].tolist(), py[1:].tolist()):
            surface.line_to(x, y)
    surface.stroke(color, width)
    return PlotResult(samples=int(xs.size), valid_samples=int(np.count_nonzero(valid)), segments=len(runs))
