"""
Grid parsing utilities for guard patrol maps.

Format: one string per row, one character per cell.
- '.': empty cell
- '#': obstruction
- '^', '>', 'v', '<': the agent's start cell and heading (exactly one)
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Sequence

from grid_types import (
    EMPTY_CHAR,
    HEADING_MARKERS,
    OBSTRUCTION_CHAR,
    Grid,
    Heading,
    Position,
)

__all__ = ["GridParseError", "parse_grid", "parse_grid_text", "load_grid"]

_VALID_CHARS_HELP = (
    f"  Valid characters:\n"
    f"    - '{EMPTY_CHAR}': Empty cell\n"
    f"    - '{OBSTRUCTION_CHAR}': Obstruction\n"
    f"    - '^', '>', 'v', '<': Start position facing N, E, S, W (exactly one)"
)


class GridParseError(ValueError):
    """Raised when grid text cannot be turned into a Grid."""

    def __init__(
        self,
        message: str,
        row: int | None = None,
        col: int | None = None,
        char: str | None = None,
    ) -> None:
        super().__init__(message)
        self.row = row
        self.col = col
        self.char = char


def parse_grid(lines: Sequence[str]) -> Grid:
    """
    Parse a patrol grid from a sequence of equal-length rows.

    Example:
        parse_grid(["..#", ".^.", "..."])
        Creates a 3x3 Grid with an obstruction at (0, 2) and the agent at (1, 1)
        facing N.

    Args:
        lines: Grid rows, top to bottom

    Returns:
        The parsed Grid

    Raises:
        GridParseError: On an unknown character, empty input, rows of differing
            length, or a missing or duplicated start marker
    """
    if not lines or not lines[0]:
        raise GridParseError(
            "Empty grid definition\n"
            "  At least one non-empty row is required"
        )

    # Validate all rows have same length
    cols = len(lines[0])
    mismatched = [(i, len(line)) for i, line in enumerate(lines) if len(line) != cols]
    if mismatched:
        error_msg = (
            f"Inconsistent row lengths in grid\n"
            f"  Expected: {cols} columns (from row 0)\n"
            f"  Mismatched rows:\n"
        )
        for row_idx, actual_cols in mismatched:
            error_msg += f"    Row {row_idx}: {actual_cols} columns - \"{lines[row_idx]}\"\n"
        error_msg += "  All rows must have the same number of cells"
        raise GridParseError(error_msg, row=mismatched[0][0])

    obstructions: set[Position] = set()
    start: tuple[Position, Heading] | None = None

    for row_idx, line in enumerate(lines):
        for col_idx, char in enumerate(line):
            if char == EMPTY_CHAR:
                continue
            elif char == OBSTRUCTION_CHAR:
                obstructions.add(Position(row_idx, col_idx))
            elif char in HEADING_MARKERS:
                if start is not None:
                    first = start[0]
                    raise GridParseError(
                        f"Duplicate start marker '{char}'\n"
                        f"  Row {row_idx}, column {col_idx}\n"
                        f"  First marker at row {first.row}, column {first.col}\n"
                        f"  The grid must contain exactly one start marker",
                        row=row_idx,
                        col=col_idx,
                        char=char,
                    )
                start = (Position(row_idx, col_idx), HEADING_MARKERS[char])
            else:
                raise GridParseError(
                    f"Invalid character '{char}' in grid\n"
                    f"  Row {row_idx}: \"{line}\"\n"
                    f"  Position: column {col_idx}\n"
                    f"{_VALID_CHARS_HELP}",
                    row=row_idx,
                    col=col_idx,
                    char=char,
                )

    if start is None:
        raise GridParseError(
            f"No start marker in grid\n"
            f"{_VALID_CHARS_HELP}"
        )

    start_pos, start_heading = start
    return Grid(
        rows=len(lines),
        cols=cols,
        obstructions=frozenset(obstructions),
        start=start_pos,
        start_heading=start_heading,
    )


def parse_grid_text(text: str) -> Grid:
    """
    Parse a grid from a single multi-line string.

    Surrounding blank lines and the common indentation of triple-quoted test
    data are removed. Any other whitespace is kept and rejected as an invalid
    character; a blank line between rows is rejected as a ragged row.
    """
    lines = textwrap.dedent(text).strip("\n").splitlines()
    return parse_grid(lines)


def load_grid(path: str | Path) -> Grid:
    """Read and parse a UTF-8 grid file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise GridParseError(
            f"Grid file is not valid UTF-8\n"
            f"  File: {path}\n"
            f"  Byte offset {e.start}: {e.object[e.start:e.end]!r}"
        ) from e
    return parse_grid_text(text)
