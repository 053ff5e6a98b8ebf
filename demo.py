#!/usr/bin/env python3
"""
Command-line runner for the guard patrol puzzle.

Reads a grid, prints the number of cells the guard visits (stage 1) and the
number of cells where one extra obstruction traps the guard in a loop
(stage 2).
"""

from __future__ import annotations

import argparse
import logging
import sys

from ascii_render import render_patrol
from grid_parser import GridParseError, load_grid, parse_grid_text
from grid_types import Grid
from patrol import PatrolLoopError, find_loop_inducing_cells, run

logger = logging.getLogger(__name__)

LAYOUTS = dict(
    sample="""
        ....#.....
        .........#
        ..........
        ..#.......
        .......#..
        ..........
        .#..^.....
        ........#.
        #.........
        ......#...
    """,
    loop="""
        .#..
        ...#
        #^..
        ..#.
    """,
    corner="""
        >
    """,
)

LAYOUT_PREFIX = "layout:"


def read_grid(source: str) -> Grid:
    """Load a grid from a file path or a built-in `layout:<name>`."""
    if source.startswith(LAYOUT_PREFIX):
        name = source[len(LAYOUT_PREFIX):]
        if name not in LAYOUTS:
            raise GridParseError(
                f"Unknown layout '{name}'\n"
                f"  Available layouts: {', '.join(sorted(LAYOUTS))}"
            )
        return parse_grid_text(LAYOUTS[name])
    return load_grid(source)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Simulate a guard patrol and count loop-inducing obstructions")
    p.add_argument(
        "source",
        nargs="?",
        default=LAYOUT_PREFIX + "sample",
        help=f"Grid file, or {LAYOUT_PREFIX}<name> for a built-in layout ({', '.join(sorted(LAYOUTS))})",
    )
    p.add_argument(
        "--stage",
        choices=["1", "2", "both"],
        default="both",
        help="1: visited cells only; 2: loop candidates only; both: print both results",
    )
    p.add_argument("--render", action="store_true", help="Print the map with the route and loop cells")
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s: %(message)s")

    try:
        grid = read_grid(args.source)
    except GridParseError as e:
        print(f"Invalid grid in {args.source}:\n{e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Cannot read {args.source}: {e}", file=sys.stderr)
        return 1

    logger.info(
        "loaded %dx%d grid with %d obstructions, start (%d, %d) facing %s",
        grid.rows,
        grid.cols,
        len(grid.obstructions),
        grid.start.row,
        grid.start.col,
        grid.start_heading.value,
    )

    try:
        visited = run(grid)
        if args.stage in ("1", "both"):
            print(f"Result (stage 1): {len(visited)}")

        loop_cells = []
        if args.stage in ("2", "both") or args.render:
            loop_cells = find_loop_inducing_cells(grid, visited)
        if args.stage in ("2", "both"):
            print(f"Result (stage 2): {len(loop_cells)}")
    except PatrolLoopError as e:
        print(e, file=sys.stderr)
        return 2

    if args.render:
        print()
        print(render_patrol(grid, visited=visited, loop_cells=loop_cells))

    return 0


if __name__ == "__main__":
    sys.exit(main())
