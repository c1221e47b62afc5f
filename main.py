from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path
from typing import Sequence

from calcpal_graph import CompileError, GraphEngine, PlotEntry, load_graph_config
from calcpal_graph.raster import RasterSurface
from calcpal_graph.scales import axis_ticks, format_tick, tick_interval


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="calcpal-graph")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a graph description (TOML) to a PNG file.")
    render.add_argument("config", type=Path)
    render.add_argument("--out", type=Path, required=True)
    render.add_argument("--width", type=int, default=None, help="Override the configured surface width.")
    render.add_argument("--height", type=int, default=None, help="Override the configured surface height.")
    render.add_argument("--degrees", action="store_true", help="Force degree angle mode.")

    ticks = sub.add_parser("ticks", help="Print the grid interval and tick values for a range.")
    ticks.add_argument("vmin", type=float)
    ticks.add_argument("vmax", type=float)
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "render":
        config = load_graph_config(args.config)
        overrides = {}
        if args.width is not None:
            overrides["width"] = args.width
        if args.height is not None:
            overrides["height"] = args.height
        if args.degrees:
            overrides["degree_mode"] = True
        if overrides:
            config = dataclasses.replace(config, **overrides)
        if config.width <= 0 or config.height <= 0:
            parser.error("--width/--height must be > 0")

        def report_failure(index: int, entry: PlotEntry, error: CompileError) -> None:
            print(f"skipped function {index} `{entry.display_expression}`: {error}")

        surface = RasterSurface(
            config.width,
            config.height,
            background=config.style.background,
            font_family=config.style.font_family,
        )
        engine = GraphEngine.from_config(config, surface, on_compile_error=report_failure)
        report = engine.last_report
        assert report is not None
        out = surface.save_png(args.out)
        print(
            f"render complete: out={out} size={report.width}x{report.height} "
            f"plotted={len(report.plotted)} failed={len(report.errors)}"
        )
        return 1 if report.errors else 0

    if args.command == "ticks":
        if not args.vmin < args.vmax:
            parser.error("vmin must be < vmax")
        interval = tick_interval(args.vmax - args.vmin)
        values = axis_ticks(args.vmin, args.vmax, interval)
        print(f"interval={format_tick(interval)}")
        print(" ".join(format_tick(float(v), step=interval) for v in values))
        return 0

    raise RuntimeError(f"unsupported command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
