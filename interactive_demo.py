"""
Interactive step-through viewer for the guard patrol.
Display the grid and advance the guard one decision at a time.
"""

import logging
import sys

import readchar
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ascii_render import render_patrol
from demo import read_grid
from grid_parser import GridParseError
from grid_types import Grid, PatrolState, Position
from patrol import PatrolLoopError, PatrolTrace, TerminationReason, find_loop_inducing_cells, trace

logger = logging.getLogger(__name__)


class InteractiveDemo:
    """Interactive viewer that steps through a patrol trace."""

    def __init__(self, grid: Grid) -> None:
        self.grid = grid
        self.console = Console()
        self.status_message = "Ready"
        self.show_loops = False
        self._loop_cells: list[Position] | None = None
        self.reset()

    def reset(self) -> None:
        """Restart the patrol from the grid's start state."""
        self.trace: PatrolTrace = trace(self.grid)
        self.current: PatrolState | None = next(self.trace)
        self.visited: set[Position] = {self.current.position}
        self.status_message = "Patrol reset"

    def advance(self) -> None:
        """Take one step, if the patrol is still running."""
        if self.trace.termination_reason is not None:
            self.status_message = "Patrol already finished - press R to reset"
            return
        try:
            self.current = next(self.trace)
        except StopIteration:
            self.status_message = f"Patrol ended: {self.trace.termination_reason.value}"
            return
        self.visited.add(self.current.position)
        self.status_message = "Stepped"

    @property
    def loop_cells(self) -> list[Position]:
        """Loop-inducing cells, computed on first use."""
        if self._loop_cells is None:
            try:
                self._loop_cells = find_loop_inducing_cells(self.grid)
            except PatrolLoopError as e:
                logger.warning("no loop candidates: %s", e)
                self._loop_cells = []
        return self._loop_cells

    def toggle_loops(self) -> None:
        self.show_loops = not self.show_loops
        if self.show_loops:
            self.status_message = f"Showing {len(self.loop_cells)} loop-inducing cells"
        else:
            self.status_message = "Loop cells hidden"

    def generate_display(self) -> Panel:
        """Generate the current display with grid and status."""
        grid_text = render_patrol(
            self.grid,
            visited=self.visited,
            loop_cells=self.loop_cells if self.show_loops else None,
            current=self.current,
        )

        status = Text()
        status.append("Step: ", style="bold")
        status.append(f"{self.trace.steps}\n")
        if self.current is not None:
            pos = self.current.position
            status.append("Guard: ", style="bold")
            status.append(f"({pos.row}, {pos.col}) facing {self.current.heading.value}\n")
        status.append("Visited: ", style="bold")
        status.append(f"{len(self.visited)}\n\n")

        # Convert ANSI-colored grid text to Rich Text properly
        status.append(Text.from_ansi(grid_text))
        status.append("\n\n")

        reason = self.trace.termination_reason
        if reason is TerminationReason.EXITED:
            status.append("Guard left the grid\n\n", style="bold green")
        elif reason is TerminationReason.CYCLE_DETECTED:
            status.append("Guard is stuck in a loop\n\n", style="bold red")

        status.append("Keys:\n", style="bold cyan")
        status.append("  SPACE/N - Step\n")
        status.append("  C - Toggle loop-inducing cells\n")
        status.append("  R - Reset\n")
        status.append("  Q - Quit\n\n")
        status.append("Status: ", style="bold")
        status.append(self.status_message)

        return Panel(status, title="Guard Patrol", border_style="blue")

    def run(self) -> None:
        """Run the interactive loop."""
        with Live(self.generate_display(), console=self.console, auto_refresh=False) as live:
            try:
                while True:
                    live.update(self.generate_display(), refresh=True)

                    key = readchar.readkey()

                    if key.lower() == "q":
                        self.status_message = "Quitting..."
                        live.update(self.generate_display(), refresh=True)
                        break
                    elif key.lower() == "r":
                        self.reset()
                    elif key == " " or key.lower() == "n":
                        self.advance()
                    elif key.lower() == "c":
                        self.toggle_loops()
                    else:
                        self.status_message = f"Unknown key: {repr(key)}"

            except KeyboardInterrupt:
                self.status_message = "Interrupted by user"
                live.update(self.generate_display(), refresh=True)


def main(source: str) -> int:
    try:
        grid = read_grid(source)
    except GridParseError as e:
        print(f"Invalid grid in {source}:\n{e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Cannot read {source}: {e}", file=sys.stderr)
        return 1
    InteractiveDemo(grid).run()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else "layout:sample"))
