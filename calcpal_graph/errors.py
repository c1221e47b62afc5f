from __future__ import annotations


class GraphError(Exception):
    """Base class for graphing engine errors."""


class CompileError(GraphError, ValueError):
    def __init__(self, message: str, *, expression: str = "", position: int | None = None) -> None:
        self.expression = expression
        self.position = position
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


class ViewportError(GraphError, ValueError):
    pass


class PlotEntryError(GraphError, ValueError):
    pass


class ConfigError(GraphError, ValueError):
    pass
