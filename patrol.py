"""
Guard patrol simulation with cycle detection.
Three layers: step (one decision) -> trace (full run with visited states)
-> loop candidate search (one re-run per extra obstruction).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from grid_types import (
    Grid,
    ObstructionLookup,
    PatrolState,
    Position,
    rotate_clockwise,
)

logger = logging.getLogger(__name__)


class StepOutcome(Enum):
    """What a single decision step did."""

    MOVED = "moved"  # Advanced one cell, heading unchanged
    BLOCKED = "blocked"  # Turned clockwise in place
    EXITED = "exited"  # Forward cell is off the grid


class TerminationReason(Enum):
    """Reason why a patrol trace terminated."""

    EXITED = "exited"  # Walked off the grid
    CYCLE_DETECTED = "cycle_detected"  # Revisited an exact (position, heading) state


@dataclass(frozen=True)
class StepResult:
    """Outcome of one step; state is None once the agent has exited."""

    outcome: StepOutcome
    state: PatrolState | None


@dataclass(frozen=True)
class PatrolReport:
    """Both answers for a grid."""

    visited_count: int
    loop_candidate_count: int


class PatrolLoopError(RuntimeError):
    """The unmodified grid never lets the agent exit."""

    def __init__(self, state: PatrolState, steps: int) -> None:
        super().__init__(
            f"Patrol never exits: state ({state.position.row}, {state.position.col}) "
            f"facing {state.heading.value} repeated after {steps} steps"
        )
        self.state = state
        self.steps = steps


# =============================================================================
# Simulator
# =============================================================================


def step(
    grid: Grid,
    state: PatrolState,
    obstructions: ObstructionLookup | None = None,
) -> StepResult:
    """
    Advance the agent by exactly one decision.

    If the cell ahead is off the grid the agent exits. If it is obstructed the
    agent turns 90° clockwise without moving. Otherwise it moves forward.

    Args:
        grid: The grid supplying the bounds
        state: Current position and heading (must be on the grid)
        obstructions: Blocked cells; defaults to the grid's own obstructions

    Returns:
        StepResult describing what happened and the new state
    """
    assert grid.in_bounds(state.position), (
        f"step() called from ({state.position.row}, {state.position.col}), "
        f"outside the {grid.rows}x{grid.cols} grid"
    )
    if obstructions is None:
        obstructions = grid.obstructions

    ahead = state.position.step(state.heading)
    if not grid.in_bounds(ahead):
        return StepResult(StepOutcome.EXITED, None)
    if ahead in obstructions:
        return StepResult(StepOutcome.BLOCKED, PatrolState(state.position, rotate_clockwise(state.heading)))
    return StepResult(StepOutcome.MOVED, PatrolState(ahead, state.heading))


class PatrolTrace:
    """
    Iterator over the states of one patrol that tracks why it stopped.

    Usage:
        result = trace(grid)
        for state in result:
            print(state)
        print(result.termination_reason)  # EXITED or CYCLE_DETECTED
    """

    def __init__(self) -> None:
        self._iterator: Iterator[PatrolState] = iter(())
        self.termination_reason: TerminationReason | None = None
        self.steps = 0
        self.last_state: PatrolState | None = None

    def __iter__(self) -> Iterator[PatrolState]:
        return self

    def __next__(self) -> PatrolState:
        return next(self._iterator)


def trace(grid: Grid, obstructions: ObstructionLookup | None = None) -> PatrolTrace:
    """
    Patrol from the grid's start, yielding every state the agent occupies.

    The start state is yielded first, and turns in place yield a new state
    just like moves do. Before each step the current (position, heading) is
    checked against every state seen so far; a repeat ends the trace with
    CYCLE_DETECTED. Since there are only rows * cols * 4 states, the trace
    always ends within that many steps.

    Args:
        grid: The grid to patrol
        obstructions: Blocked cells; defaults to the grid's own obstructions

    Returns:
        PatrolTrace iterator that yields PatrolState and records termination_reason
    """
    result = PatrolTrace()
    result._iterator = _trace_generator(grid, obstructions, result)
    return result


def _trace_generator(
    grid: Grid,
    obstructions: ObstructionLookup | None,
    result: PatrolTrace,
) -> Iterator[PatrolState]:
    """Internal generator for trace(). Do not call directly."""
    seen: set[PatrolState] = set()
    state = grid.start_state

    while True:
        if state in seen:
            result.termination_reason = TerminationReason.CYCLE_DETECTED
            result.last_state = state
            return
        seen.add(state)
        yield state

        outcome = step(grid, state, obstructions)
        result.steps += 1
        if outcome.state is None:
            result.termination_reason = TerminationReason.EXITED
            result.last_state = state
            return
        state = outcome.state


def run(grid: Grid, obstructions: ObstructionLookup | None = None) -> frozenset[Position]:
    """
    Patrol until the agent exits and return every position it occupied.

    The start position is always included, so an agent that exits on its
    first step still visited one cell.

    Raises:
        PatrolLoopError: If the patrol loops instead of exiting
    """
    visited: set[Position] = set()
    result = trace(grid, obstructions)
    for state in result:
        visited.add(state.position)

    if result.termination_reason is TerminationReason.CYCLE_DETECTED:
        assert result.last_state is not None
        raise PatrolLoopError(result.last_state, result.steps)

    logger.debug("run: exited after %d steps, %d cells visited", result.steps, len(visited))
    return frozenset(visited)


def count_visited(grid: Grid) -> int:
    """Number of distinct cells visited by the unmodified patrol."""
    return len(run(grid))


# =============================================================================
# Cycle Detection
# =============================================================================


def detects_cycle(grid: Grid, obstructions: ObstructionLookup | None = None) -> bool:
    """Return True if the patrol loops forever, False if it exits."""
    result = trace(grid, obstructions)
    for _ in result:
        pass
    return result.termination_reason is TerminationReason.CYCLE_DETECTED


# =============================================================================
# Loop Candidate Search
# =============================================================================


def _loop_inducing_cells(grid: Grid, visited: frozenset[Position]) -> list[Position]:
    """Test each visited cell as an extra obstruction, from scratch every time."""
    candidates = sorted(
        (p for p in visited if p != grid.start and not grid.is_obstructed(p)),
        key=lambda p: (p.row, p.col),
    )

    found: list[Position] = []
    for candidate in candidates:
        looped = detects_cycle(grid, grid.with_extra_obstruction(candidate))
        logger.debug(
            "candidate (%d, %d): %s", candidate.row, candidate.col, "loop" if looped else "exits"
        )
        if looped:
            found.append(candidate)

    logger.info(
        "loop candidate search: tried %d cells, %d induce a loop",
        len(candidates),
        len(found),
    )
    return found


def find_loop_inducing_cells(
    grid: Grid, visited: frozenset[Position] | None = None
) -> list[Position]:
    """
    Find every cell where one extra obstruction traps the agent in a loop.

    Only cells on the unmodified patrol route are candidates; an obstruction
    anywhere else would never be encountered. The start cell is excluded.

    Args:
        grid: The grid to search
        visited: Result of run(grid), if the caller already has it

    Returns:
        Loop-inducing positions in row-major order

    Raises:
        PatrolLoopError: If the unmodified patrol already loops
    """
    if visited is None:
        visited = run(grid)
    return _loop_inducing_cells(grid, visited)


def count_loop_inducing_cells(grid: Grid) -> int:
    """Number of single-cell obstructions that make the patrol loop forever."""
    return len(find_loop_inducing_cells(grid))


def analyze_patrol(grid: Grid) -> PatrolReport:
    """Compute the visited-cell count and loop-candidate count with one baseline run."""
    visited = run(grid)
    loops = _loop_inducing_cells(grid, visited)
    return PatrolReport(visited_count=len(visited), loop_candidate_count=len(loops))
