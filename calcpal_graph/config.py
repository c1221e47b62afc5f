from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import tomllib
from typing import Any, Mapping

from calcpal_graph.errors import ConfigError, ViewportError
from calcpal_graph.expression import DegreeScope
from calcpal_graph.style import DEFAULT_STYLE, GraphStyle, is_color, validate_style
from calcpal_graph.viewport import DEFAULT_VIEWPORT, Viewport


DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600

_TOP_LEVEL_KEYS = {"width", "height", "degree_mode", "degree_scope", "viewport", "functions", "style"}


@dataclass(frozen=True)
class FunctionSpec:
    expression: str
    color: str


@dataclass(frozen=True)
class GraphConfig:
    """A graph description: surface size, viewport, angle mode, functions, style."""

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    viewport: Viewport = DEFAULT_VIEWPORT
    degree_mode: bool = False
    degree_scope: DegreeScope = "input"
    functions: tuple[FunctionSpec, ...] = ()
    style: GraphStyle = field(default=DEFAULT_STYLE)


def load_graph_config(path: str | Path) -> GraphConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"graph config not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"{config_path}: invalid TOML: {exc}") from exc
    return parse_graph_config(raw)


def parse_graph_config(raw: Mapping[str, Any]) -> GraphConfig:
    unknown = sorted(set(raw) - _TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")

    width = _coerce_positive_int(raw.get("width", DEFAULT_WIDTH), "width")
    height = _coerce_positive_int(raw.get("height", DEFAULT_HEIGHT), "height")
    degree_mode = raw.get("degree_mode", False)
    if not isinstance(degree_mode, bool):
        raise ConfigError("degree_mode must be a boolean")
    degree_scope = raw.get("degree_scope", "input")
    if degree_scope not in ("input", "trig"):
        raise ConfigError("degree_scope must be `input` or `trig`")

    viewport_raw = raw.get("viewport", {})
    if not isinstance(viewport_raw, Mapping):
        raise ConfigError("viewport must be a table")
    try:
        viewport = Viewport.from_mapping(viewport_raw)
    except ViewportError as exc:
        raise ConfigError(f"viewport: {exc}") from exc

    style_raw = raw.get("style", {})
    if not isinstance(style_raw, Mapping):
        raise ConfigError("style must be a table")
    try:
        style = validate_style(style_raw)
    except ValueError as exc:
        raise ConfigError(f"style: {exc}") from exc

    return GraphConfig(
        width=width,
        height=height,
        viewport=viewport,
        degree_mode=degree_mode,
        degree_scope=degree_scope,
        functions=_coerce_functions(raw.get("functions", [])),
        style=style,
    )


def _coerce_positive_int(value: object, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{field_name} must be a positive integer")
    return value


def _coerce_functions(value: object) -> tuple[FunctionSpec, ...]:
    if not isinstance(value, list):
        raise ConfigError("functions must be an array of tables")
    out: list[FunctionSpec] = []
    for i, item in enumerate(value):
        if not isinstance(item, Mapping):
            raise ConfigError(f"functions[{i}] must be a table")
        extra = sorted(set(item) - {"expression", "color"})
        if extra:
            raise ConfigError(f"functions[{i}] has unknown keys: {', '.join(extra)}")
        expression = item.get("expression")
        if not isinstance(expression, str) or not expression.strip():
            raise ConfigError(f"functions[{i}].expression must be a non-empty string")
        color = item.get("color", "#0000ff")
        if not is_color(color):
            raise ConfigError(f"functions[{i}].color must be a hex color")
        out.append(FunctionSpec(expression=expression, color=color))
    return tuple(out)
