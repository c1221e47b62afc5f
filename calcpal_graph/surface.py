from __future__ import annotations

from typing import Literal, Protocol


TextAlign = Literal["left", "center", "right"]


class RenderSurface(Protocol):
    """2D drawing target the engine renders into.

    Paths follow the canvas model: ``begin_path`` discards any pending path,
    ``move_to`` opens a new subpath, ``line_to`` extends the current one and
    ``stroke`` draws every pending subpath in one color and width.
    """

    @property
    def width(self) -> int:
        ...

    @property
    def height(self) -> int:
        ...

    def resize(self, width: int, height: int) -> None:
        ...

    def clear(self) -> None:
        ...

    def begin_path(self) -> None:
        ...

    def move_to(self, x: float, y: float) -> None:
        ...

    def line_to(self, x: float, y: float) -> None:
        ...

    def stroke(self, color: str, width: int) -> None:
        ...

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
        ...
