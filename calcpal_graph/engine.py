from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Mapping

from calcpal_graph.axes import draw_axes, draw_grid
from calcpal_graph.compile import WriteBatch, compile_full_rewrite_batch
from calcpal_graph.config import GraphConfig
from calcpal_graph.errors import CompileError
from calcpal_graph.expression import DegreeScope, compile_expression
from calcpal_graph.raster import RasterSurface
from calcpal_graph.registry import FunctionRegistry, PlotEntry
from calcpal_graph.sampler import PlotResult, plot_function
from calcpal_graph.scales import CoordinateMapper
from calcpal_graph.style import DEFAULT_STYLE, GraphStyle
from calcpal_graph.surface import RenderSurface
from calcpal_graph.viewport import DEFAULT_VIEWPORT, Viewport

LOGGER = logging.getLogger(__name__)

CompileErrorHandler = Callable[[int, PlotEntry, CompileError], None]


@dataclass(frozen=True)
class EntryFailure:
    index: int
    entry: PlotEntry
    error: CompileError


@dataclass(frozen=True)
class EntryPlot:
    index: int
    entry: PlotEntry
    result: PlotResult


@dataclass(frozen=True)
class RenderReport:
    revision: int
    width: int
    height: int
    viewport: Viewport
    degree_mode: bool
    grid_lines: int
    axes_drawn: tuple[bool, bool]
    plotted: tuple[EntryPlot, ...]
    errors: tuple[EntryFailure, ...]


class GraphEngine:
    """Owns viewport, function registry and angle mode, and redraws the surface.

    Every command replaces engine state and then performs a full synchronous
    re-render (unless ``auto_render`` is off). A render never raises because
    of a bad expression: compile failures are logged, handed to
    ``on_compile_error`` and listed in the returned report, and the remaining
    entries are still drawn. Any other failure during the re-render undoes the
    command, redraws the previous state and propagates.
    """

    def __init__(
        self,
        surface: RenderSurface,
        *,
        viewport: Viewport = DEFAULT_VIEWPORT,
        degree_mode: bool = False,
        degree_scope: DegreeScope = "input",
        style: GraphStyle = DEFAULT_STYLE,
        on_compile_error: CompileErrorHandler | None = None,
        auto_render: bool = True,
    ) -> None:
        if degree_scope not in ("input", "trig"):
            raise ValueError(f"degree_scope must be 'input' or 'trig', got {degree_scope!r}")
        self._surface = surface
        self._viewport = viewport
        self._registry = FunctionRegistry()
        self._degree_mode = bool(degree_mode)
        self._degree_scope: DegreeScope = degree_scope
        self._style = style
        self._on_compile_error = on_compile_error
        self._auto_render = auto_render
        self._revision = 0
        self._last_report: RenderReport | None = None

    @classmethod
    def from_config(
        cls,
        config: GraphConfig,
        surface: RenderSurface | None = None,
        *,
        on_compile_error: CompileErrorHandler | None = None,
        auto_render: bool = True,
    ) -> "GraphEngine":
        """Build an engine with every configured function registered and rendered once."""
        if surface is None:
            surface = RasterSurface(
                config.width,
                config.height,
                background=config.style.background,
                font_family=config.style.font_family,
            )
        engine = cls(
            surface,
            viewport=config.viewport,
            degree_mode=config.degree_mode,
            degree_scope=config.degree_scope,
            style=config.style,
            on_compile_error=on_compile_error,
            auto_render=False,
        )
        for spec in config.functions:
            engine.add_function(spec.expression, spec.color)
        engine._auto_render = auto_render
        if auto_render:
            engine.render()
        return engine

    @property
    def surface(self) -> RenderSurface:
        return self._surface

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def functions(self) -> tuple[PlotEntry, ...]:
        return self._registry.entries

    @property
    def degree_mode(self) -> bool:
        return self._degree_mode

    @property
    def degree_scope(self) -> DegreeScope:
        return self._degree_scope

    @property
    def style(self) -> GraphStyle:
        return self._style

    @property
    def last_report(self) -> RenderReport | None:
        return self._last_report

    def set_viewport(self, bounds: Viewport | Mapping[str, Any]) -> None:
        viewport = bounds if isinstance(bounds, Viewport) else Viewport.from_mapping(bounds)
        previous = self._viewport
        self._viewport = viewport
        self._changed(lambda: setattr(self, "_viewport", previous))

    def add_function(self, expression: str, color: str) -> PlotEntry:
        entry = self._registry.add(expression, color)
        index = len(self._registry) - 1
        self._changed(lambda: self._registry.remove(index))
        return entry

    def remove_function(self, index: int) -> PlotEntry:
        entry = self._registry.remove(index)
        self._changed(lambda: self._registry.insert(index, entry))
        return entry

    def clear_functions(self) -> None:
        previous = self._registry.entries
        self._registry.clear()

        def restore() -> None:
            for i, entry in enumerate(previous):
                self._registry.insert(i, entry)

        self._changed(restore)

    def set_angle_mode(self, degree_mode: bool) -> None:
        previous = self._degree_mode
        self._degree_mode = bool(degree_mode)
        self._changed(lambda: setattr(self, "_degree_mode", previous))

    def set_style(self, style: GraphStyle) -> None:
        previous = self._style
        self._apply_style(style)
        self._changed(lambda: self._apply_style(previous))

    def resize(self, width: int, height: int) -> None:
        if isinstance(width, bool) or isinstance(height, bool) or not isinstance(width, int) or not isinstance(height, int):
            raise ValueError("width and height must be integers")
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        previous = (self._surface.width, self._surface.height)
        self._surface.resize(width, height)
        self._changed(lambda: self._surface.resize(*previous))

    def render(self) -> RenderReport:
        surface = self._surface
        viewport = self._viewport
        mapper = CoordinateMapper(viewport=viewport, width=surface.width, height=surface.height)

        surface.clear()
        grid_lines = draw_grid(surface, mapper, self._style)
        axes_drawn = draw_axes(surface, mapper, self._style, degree_mode=self._degree_mode)

        plotted: list[EntryPlot] = []
        failures: list[EntryFailure] = []
        for index, entry in enumerate(self._registry):
            try:
                fn = compile_expression(entry.expression, self._degree_mode, degree_scope=self._degree_scope)
            except CompileError as exc:
                LOGGER.warning("skipping plot entry %d `%s`: %s", index, entry.display_expression, exc)
                failures.append(EntryFailure(index=index, entry=entry, error=exc))
                if self._on_compile_error is not None:
                    self._on_compile_error(index, entry, exc)
                continue
            result = plot_function(surface, mapper, fn, viewport, entry.color, width=self._style.curve_width)
            plotted.append(EntryPlot(index=index, entry=entry, result=result))

        self._revision += 1
        report = RenderReport(
            revision=self._revision,
            width=surface.width,
            height=surface.height,
            viewport=viewport,
            degree_mode=self._degree_mode,
            grid_lines=grid_lines,
            axes_drawn=axes_drawn,
            plotted=tuple(plotted),
            errors=tuple(failures),
        )
        self._last_report = report
        LOGGER.debug(
            "render %d: %d plotted, %d failed, %dx%d",
            report.revision,
            len(plotted),
            len(failures),
            report.width,
            report.height,
        )
        return report

    def compile_write_batch(self) -> WriteBatch:
        to_rgba = getattr(self._surface, "to_rgba", None)
        if to_rgba is None:
            raise TypeError("surface does not expose RGBA frames (to_rgba)")
        return compile_full_rewrite_batch(to_rgba())

    def _apply_style(self, style: GraphStyle) -> None:
        set_background = getattr(self._surface, "set_background", None)
        if set_background is not None:
            set_background(style.background)
        self._style = style

    def _changed(self, undo: Callable[[], object]) -> None:
        if not self._auto_render:
            return
        try:
            self.render()
        except Exception:
            LOGGER.warning("render failed; reverting the last command", exc_info=True)
            undo()
            self.render()
            raise
