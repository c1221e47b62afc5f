from __future__ import annotations

from dataclasses import asdict, dataclass
import re
from typing import Any, Mapping

RGBA = tuple[int, int, int, int]

_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def is_color(value: object) -> bool:
    return isinstance(value, str) and _HEX_COLOR.match(value.strip()) is not None


def parse_color(color: str, opacity: float = 1.0) -> RGBA:
    """Parse `#RGB`, `#RGBA`, `#RRGGBB` or `#RRGGBBAA` into an RGBA255 tuple."""
    value = color.strip() if isinstance(color, str) else ""
    if not _HEX_COLOR.match(value):
        raise ValueError(f"color must be #RGB, #RRGGBB or #RRGGBBAA, got `{color}`")
    raw = value[1:]
    if len(raw) in (3, 4):
        raw = "".join(ch * 2 for ch in raw)
    r = int(raw[0:2], 16)
    g = int(raw[2:4], 16)
    b = int(raw[4:6], 16)
    a = int(raw[6:8], 16) if len(raw) == 8 else 255
    alpha = int(round(max(0.0, min(1.0, (a / 255.0) * opacity)) * 255.0))
    return (r, g, b, alpha)


@dataclass(frozen=True)
class GraphStyle:
    """Colors and sizes used by the grid, axes, labels and curves."""

    background: str = "#ffffff"
    grid_color: str = "#dddddd"
    axis_color: str = "#000000"
    text_color: str = "#000000"
    font_family: str = "Arial"
    font_size_px: float = 10.0
    grid_width: int = 1
    axis_width: int = 2
    curve_width: int = 2
    tick_half_length_px: int = 5


DEFAULT_STYLE = GraphStyle()

_COLOR_TOKENS = ("background", "grid_color", "axis_color", "text_color")
_WIDTH_TOKENS = ("grid_width", "axis_width", "curve_width", "tick_half_length_px")


def validate_style(overrides: Mapping[str, Any] | None = None) -> GraphStyle:
    """Validate and merge style overrides against the defaults."""

    raw: dict[str, Any] = asdict(DEFAULT_STYLE)
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown style token: {key}")
            raw[key] = value

    for key in _COLOR_TOKENS:
        if not is_color(raw[key]):
            raise ValueError(f"Token `{key}` must be a hex color (#RGB, #RRGGBB or #RRGGBBAA)")

    if not isinstance(raw["font_family"], str) or not raw["font_family"].strip():
        raise ValueError("Token `font_family` must be a non-empty string")

    if isinstance(raw["font_size_px"], bool) or not isinstance(raw["font_size_px"], (int, float)) or float(raw["font_size_px"]) <= 0:
        raise ValueError("Token `font_size_px` must be a positive number")

    for key in _WIDTH_TOKENS:
        if isinstance(raw[key], bool) or not isinstance(raw[key], int) or raw[key] <= 0:
            raise ValueError(f"Token `{key}` must be a positive integer")

    return GraphStyle(
        background=str(raw["background"]).strip(),
        grid_color=str(raw["grid_color"]).strip(),
        axis_color=str(raw["axis_color"]).strip(),
        text_color=str(raw["text_color"]).strip(),
        font_family=str(raw["font_family"]),
        font_size_px=float(raw["font_size_px"]),
        grid_width=int(raw["grid_width"]),
        axis_width=int(raw["axis_width"]),
        curve_width=int(raw["curve_width"]),
        tick_half_length_px=int(raw["tick_half_length_px"]),
    )
