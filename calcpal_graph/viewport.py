from __future__ import annotations

import dataclasses
from dataclasses import dataclass, fields
import math
from typing import Any, Mapping

from calcpal_graph.errors import ViewportError


MAX_SAMPLES = 1_000_000

_KEY_ALIASES = {
    "xMin": "x_min",
    "xMax": "x_max",
    "yMin": "y_min",
    "yMax": "y_max",
}


@dataclass(frozen=True)
class Viewport:
    """Visible data-space rectangle plus the sampling step along x."""

    x_min: float = -10.0
    x_max: float = 10.0
    y_min: float = -10.0
    y_max: float = 10.0
    step: float = 1.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ViewportError(f"`{f.name}` must be a real number, got {value!r}")
            if not math.isfinite(value):
                raise ViewportError(f"`{f.name}` must be finite, got {value!r}")
            object.__setattr__(self, f.name, float(value))
        if not self.x_min < self.x_max:
            raise ViewportError(f"x_min must be < x_max ({self.x_min} >= {self.x_max})")
        if not self.y_min < self.y_max:
            raise ViewportError(f"y_min must be < y_max ({self.y_min} >= {self.y_max})")
        if not self.step > 0:
            raise ViewportError(f"step must be > 0, got {self.step}")
        if not (math.isfinite(self.x_range) and math.isfinite(self.y_range)):
            raise ViewportError(f"viewport span overflows ({self.x_range} x {self.y_range})")
        steps = self.x_range / self.step
        if not math.isfinite(steps) or steps > MAX_SAMPLES:
            raise ViewportError(f"step {self.step} gives more than {MAX_SAMPLES} samples across x")

    @property
    def x_range(self) -> float:
        return self.x_max - self.x_min

    @property
    def y_range(self) -> float:
        return self.y_max - self.y_min

    def contains_x(self, value: float) -> bool:
        return self.x_min <= value <= self.x_max

    def contains_y(self, value: float) -> bool:
        return self.y_min <= value <= self.y_max

    def replace(self, **changes: float) -> "Viewport":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Viewport":
        """Build a viewport from `x_min`/`xMin` style keys; missing keys keep defaults."""
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in raw.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in known:
                raise ViewportError(f"unknown viewport field: {key}")
            values[name] = value
        return cls(**values)


DEFAULT_VIEWPORT = Viewport()
