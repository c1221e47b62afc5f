from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from calcpal_graph.errors import PlotEntryError
from calcpal_graph.style import is_color


@dataclass(frozen=True)
class PlotEntry:
    expression: str
    color: str

    @property
    def display_expression(self) -> str:
        return self.expression.strip()


class FunctionRegistry:
    """Ordered plot entries; list order is display and draw order."""

    def __init__(self) -> None:
        self._entries: list[PlotEntry] = []

    def add(self, expression: str, color: str) -> PlotEntry:
        if not isinstance(expression, str) or not expression.strip():
            raise PlotEntryError("expression must be a non-empty string")
        if not is_color(color):
            raise PlotEntryError(f"color must be #RGB, #RRGGBB or #RRGGBBAA, got `{color}`")
        entry = PlotEntry(expression=expression, color=color.strip())
        self._entries.append(entry)
        return entry

    def remove(self, index: int) -> PlotEntry:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"no plot entry at index {index} (have {len(self._entries)})")
        return self._entries.pop(index)

    def insert(self, index: int, entry: PlotEntry) -> None:
        self._entries.insert(index, entry)

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> tuple[PlotEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PlotEntry]:
        return iter(tuple(self._entries))

    def __getitem__(self, index: int) -> PlotEntry:
        return self._entries[index]
