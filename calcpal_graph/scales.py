from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math

import numpy as np

from calcpal_graph.viewport import Viewport


LOG10_2 = math.log10(2.0)
LOG10_5 = math.log10(5.0)


@dataclass(frozen=True)
class CoordinateMapper:
    """Maps data space to pixel space for one viewport and surface size.

    Pixel y grows downwards, so ``y_min`` maps to ``height`` and ``y_max`` to 0.
    Both methods accept scalars or numpy arrays.
    """

    viewport: Viewport
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("surface width/height must be > 0")

    def x_to_pixel(self, x):
        vp = self.viewport
        return (x - vp.x_min) / (vp.x_max - vp.x_min) * self.width

    def y_to_pixel(self, y):
        vp = self.viewport
        return self.height - (y - vp.y_min) / (vp.y_max - vp.y_min) * self.height

    def to_pixel(self, x: float, y: float) -> tuple[float, float]:
        return (float(self.x_to_pixel(x)), float(self.y_to_pixel(y)))


def tick_interval(value_range: float) -> float:
    """Pick the grid spacing for an axis spanning ``value_range`` data units.

    The base interval is 1, 2 or 5 times a power of ten, chosen from the
    fractional part of ``log10(value_range)``. It is then doubled when it would
    give more than 10 divisions, or halved when it would give fewer than 5.
    """
    if not math.isfinite(value_range) or value_range <= 0:
        raise ValueError(f"range must be a finite number > 0, got {value_range}")
    log10 = math.log10(value_range)
    exponent = math.floor(log10)
    fraction = log10 - exponent
    if fraction < LOG10_2:
        multiplier = 1
    elif fraction < LOG10_5:
        multiplier = 2
    else:
        multiplier = 5
    interval = (10.0**exponent) * multiplier
    if value_range / interval > 10:
        interval *= 2
    elif value_range / interval < 5:
        interval /= 2
    return interval


def axis_ticks(vmin: float, vmax: float, interval: float) -> np.ndarray:
    """All multiples of ``interval`` inside ``[vmin, vmax]``, ascending."""
    if interval <= 0 or not math.isfinite(interval):
        raise ValueError("interval must be a finite number > 0")
    first = math.ceil(vmin / interval)
    last = math.floor(vmax / interval)
    if last < first:
        return np.zeros(0, dtype=np.float64)
    # Integer multiples keep the origin tick at exactly 0.0.
    return np.arange(first, last + 1, dtype=np.float64) * interval


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Only trim trailing zeros for fractional values (keep 30, 40 intact).
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_axis_label(value: float, interval: float, *, degrees: bool = False) -> str:
    label = format_tick(value, step=interval)
    return f"{label}°" if degrees else label


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
