from __future__ import annotations

from calcpal_graph.scales import CoordinateMapper, axis_ticks, format_axis_label, tick_interval
from calcpal_graph.style import DEFAULT_STYLE, GraphStyle
from calcpal_graph.surface import RenderSurface


X_LABEL_OFFSET_PX = 20
Y_LABEL_OFFSET_PX = 10
Y_LABEL_BASELINE_PX = 3


def draw_grid(surface: RenderSurface, mapper: CoordinateMapper, style: GraphStyle = DEFAULT_STYLE) -> int:
    """Draw full-span grid lines at every non-zero tick; returns the line count."""
    vp = mapper.viewport
    lines = 0

    x_interval = tick_interval(vp.x_range)
    for x in axis_ticks(vp.x_min, vp.x_max, x_interval):
        if x == 0:
            continue
        px = float(mapper.x_to_pixel(x))
        surface.begin_path()
        surface.move_to(px, 0)
        surface.line_to(px, mapper.height)
        surface.stroke(style.grid_color, style.grid_width)
        lines += 1

    y_interval = tick_interval(vp.y_range)
    for y in axis_ticks(vp.y_min, vp.y_max, y_interval):
        if y == 0:
            continue
        py = float(mapper.y_to_pixel(y))
        surface.begin_path()
        surface.move_to(0, py)
        surface.line_to(mapper.width, py)
        surface.stroke(style.grid_color, style.grid_width)
        lines += 1
    return lines


def draw_axes(
    surface: RenderSurface,
    mapper: CoordinateMapper,
    style: GraphStyle = DEFAULT_STYLE,
    *,
    degree_mode: bool = False,
) -> tuple[bool, bool]:
    """Draw the visible axis lines with ticks and labels.

    Returns ``(x_axis_drawn, y_axis_drawn)`` where the x axis is the ``y=0``
    line and the y axis the ``x=0`` line.
    """
    vp = mapper.viewport
    half = style.tick_half_length_px

    x_axis = vp.contains_y(0.0)
    if x_axis:
        axis_py = float(mapper.y_to_pixel(0.0))
        _line(surface, 0, axis_py, mapper.width, axis_py, style.axis_color, style.axis_width)
        interval = tick_interval(vp.x_range)
        for x in axis_ticks(vp.x_min, vp.x_max, interval):
            if x == 0:
                continue
            px = float(mapper.x_to_pixel(x))
            _line(surface, px, axis_py - half, px, axis_py + half, style.axis_color, style.axis_width)
            surface.draw_text(
                format_axis_label(float(x), interval, degrees=degree_mode),
                px,
                axis_py + X_LABEL_OFFSET_PX,
                "center",
                color=style.text_color,
                font_size_px=style.font_size_px,
            )

    y_axis = vp.contains_x(0.0)
    if y_axis:
        axis_px = float(mapper.x_to_pixel(0.0))
        _line(surface, axis_px, 0, axis_px, mapper.height, style.axis_color, style.axis_width)
        interval = tick_interval(vp.y_range)
        for y in axis_ticks(vp.y_min, vp.y_max, interval):
            if y == 0:
                continue
            py = float(mapper.y_to_pixel(y))
            _line(surface, axis_px - half, py, axis_px + half, py, style.axis_color, style.axis_width)
            surface.draw_text(
                format_axis_label(float(y), interval),
                axis_px - Y_LABEL_OFFSET_PX,
                py + Y_LABEL_BASELINE_PX,
                "right",
                color=style.text_color,
                font_size_px=style.font_size_px,
            )
    return (x_axis, y_axis)


def _line(surface: RenderSurface, x0: float, y0: float, x1: float, y1: float, color: str, width: int) -> None:
    surface.begin_path()
    surface.move_to(x0, y0)
    surface.line_to(x1, y1)
    surface.stroke(color, width)
