from calcpal_graph.config import FunctionSpec, GraphConfig, load_graph_config, parse_graph_config
from calcpal_graph.engine import EntryFailure, EntryPlot, GraphEngine, RenderReport
from calcpal_graph.errors import CompileError, ConfigError, GraphError, PlotEntryError, ViewportError
from calcpal_graph.expression import CompiledFunction, Sample, compile_expression, normalize_expression
from calcpal_graph.raster import RasterSurface
from calcpal_graph.registry import FunctionRegistry, PlotEntry
from calcpal_graph.scales import CoordinateMapper, tick_interval
from calcpal_graph.style import DEFAULT_STYLE, GraphStyle, validate_style
from calcpal_graph.surface import RenderSurface
from calcpal_graph.viewport import DEFAULT_VIEWPORT, Viewport

__all__ = [
    "CompileError",
    "CompiledFunction",
    "ConfigError",
    "CoordinateMapper",
    "DEFAULT_STYLE",
    "DEFAULT_VIEWPORT",
    "EntryFailure",
    "EntryPlot",
    "FunctionRegistry",
    "FunctionSpec",
    "GraphConfig",
    "GraphEngine",
    "GraphError",
    "GraphStyle",
    "PlotEntry",
    "PlotEntryError",
    "RasterSurface",
    "RenderReport",
    "RenderSurface",
    "Sample",
    "Viewport",
    "ViewportError",
    "compile_expression",
    "load_graph_config",
    "normalize_expression",
    "parse_graph_config",
    "tick_interval",
    "validate_style",
]
