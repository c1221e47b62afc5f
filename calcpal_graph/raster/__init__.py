from .canvas import draw_pixel, fill_canvas, fill_rect, new_canvas
from .draw_lines import clip_segment, draw_line, draw_polyline
from .draw_text import draw_text, text_size
from .surface import RasterSurface

__all__ = [
    "RasterSurface",
    "clip_segment",
    "draw_line",
    "draw_pixel",
    "draw_polyline",
    "draw_text",
    "fill_canvas",
    "fill_rect",
    "new_canvas",
    "text_size",
]
