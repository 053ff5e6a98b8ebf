"""
ASCII rendering for guard patrol grids.

Draws a single grid in a box frame with the patrol route and loop-inducing
cells overlaid.
"""

from __future__ import annotations

import re
from typing import Callable, Collection

import simple_chalk as chalk  # type: ignore[import-untyped]

from grid_types import (
    EMPTY_CHAR,
    MARKER_FOR_HEADING,
    OBSTRUCTION_CHAR,
    Grid,
    PatrolState,
    Position,
)

VISITED_CHAR = "X"
LOOP_CHAR = "O"

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    """Remove ANSI colour codes."""
    return _ANSI_RE.sub("", text)


def render_patrol(
    grid: Grid,
    visited: Collection[Position] | None = None,
    loop_cells: Collection[Position] | None = None,
    current: PatrolState | None = None,
    cell_width: int = 1,
) -> str:
    """
    Render a grid with optional patrol overlays.

    Cell characters, later entries winning:
    - '.' empty, '#' obstruction
    - 'X' visited by the patrol
    - 'O' a cell where one extra obstruction causes a loop
    - the start marker arrow ('^', '>', 'v', '<')
    - the current agent state as its heading arrow, highlighted

    Args:
        grid: The grid to draw
        visited: Positions the patrol occupied
        loop_cells: Loop-inducing candidate positions
        current: Agent state to highlight
        cell_width: Characters per cell (default 1)

    Returns:
        Rendered string with ANSI colours
    """
    visited = visited or ()
    loop_cells = loop_cells or ()

    def cell_style(pos: Position) -> tuple[str, Callable[[str], str]]:
        if current is not None and pos == current.position:
            return MARKER_FOR_HEADING[current.heading], chalk.bgWhite.black
        if pos == grid.start:
            return MARKER_FOR_HEADING[grid.start_heading], chalk.yellowBright
        if pos in loop_cells:
            return LOOP_CHAR, chalk.magenta
        if grid.is_obstructed(pos):
            return OBSTRUCTION_CHAR, chalk.red
        if pos in visited:
            return VISITED_CHAR, chalk.cyan
        return EMPTY_CHAR, chalk.white

    frame = chalk.white
    inner_width = grid.cols * cell_width
    lines = [frame("┌" + "─" * inner_width + "┐")]

    for r_idx in range(grid.rows):
        line_parts = [frame("│")]
        for c_idx in range(grid.cols):
            char, colorize = cell_style(Position(r_idx, c_idx))
            content = char if cell_width == 1 else char.center(cell_width)
            line_parts.append(colorize(content))
        line_parts.append(frame("│"))
        lines.append("".join(line_parts))

    lines.append(frame("└" + "─" * inner_width + "┘"))
    return "\n".join(lines)
