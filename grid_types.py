"""
Shared type definitions for the guard patrol system.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Heading(Enum):
    """
    Cardinal heading of the patrolling agent.

    N, E, S, W are Up, Right, Down, Left on the printed grid.
    """

    N = "N"  # Up (decreasing row)
    E = "E"  # Right (increasing col)
    S = "S"  # Down (increasing row)
    W = "W"  # Left (decreasing col)

    @property
    def delta(self) -> tuple[int, int]:
        """(row_delta, col_delta) for one unit of forward movement."""
        return _DELTAS[self]


_DELTAS = {
    Heading.N: (-1, 0),
    Heading.E: (0, 1),
    Heading.S: (1, 0),
    Heading.W: (0, -1),
}


def rotate_clockwise(heading: Heading) -> Heading:
    """Turn 90° clockwise: N -> E -> S -> W -> N."""
    rotation_map = {
        Heading.N: Heading.E,
        Heading.E: Heading.S,
        Heading.S: Heading.W,
        Heading.W: Heading.N,
    }
    return rotation_map[heading]


HEADING_MARKERS: dict[str, Heading] = {
    "^": Heading.N,
    ">": Heading.E,
    "v": Heading.S,
    "<": Heading.W,
}

MARKER_FOR_HEADING: dict[Heading, str] = {h: m for m, h in HEADING_MARKERS.items()}

EMPTY_CHAR = "."
OBSTRUCTION_CHAR = "#"


# =============================================================================
# Grid Definition Types
# =============================================================================


@dataclass(frozen=True)
class Position:
    """A cell position as (row, col)."""

    row: int
    col: int

    def step(self, heading: Heading) -> Position:
        dr, dc = heading.delta
        return Position(self.row + dr, self.col + dc)


@dataclass(frozen=True)
class PatrolState:
    """Where the agent is and which way it faces."""

    position: Position
    heading: Heading


class ObstructionLookup(Protocol):
    """Anything that answers `pos in obstructions`."""

    def __contains__(self, pos: object) -> bool: ...


@dataclass(frozen=True)
class AugmentedObstructions:
    """
    A base obstruction set with exactly one extra blocked cell layered on top.

    The base set is shared and never modified; each candidate evaluation
    builds its own view.
    """

    base: frozenset[Position]
    extra: Position

    def __contains__(self, pos: object) -> bool:
        return pos == self.extra or pos in self.base


@dataclass(frozen=True)
class Grid:
    """A parsed patrol grid: dimensions, obstructions and the agent's start."""

    rows: int
    cols: int
    obstructions: frozenset[Position]
    start: Position
    start_heading: Heading

    @property
    def start_state(self) -> PatrolState:
        return PatrolState(self.start, self.start_heading)

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.row < self.rows and 0 <= pos.col < self.cols

    def is_obstructed(self, pos: Position) -> bool:
        return pos in self.obstructions

    def with_extra_obstruction(self, pos: Position) -> AugmentedObstructions:
        """
        Build the obstruction view used to test `pos` as a loop candidate.

        Raises:
            ValueError: If pos is the start cell, already obstructed, or off the grid
        """
        if not self.in_bounds(pos):
            raise ValueError(
                f"Extra obstruction at ({pos.row}, {pos.col}) is outside the "
                f"{self.rows}x{self.cols} grid"
            )
        if pos == self.start:
            raise ValueError(
                f"Extra obstruction at ({pos.row}, {pos.col}) would cover the start position"
            )
        if pos in self.obstructions:
            raise ValueError(f"Cell ({pos.row}, {pos.col}) is already obstructed")
        return AugmentedObstructions(self.obstructions, pos)
