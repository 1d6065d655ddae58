"""Plain-text rendering of puzzles and solving progress."""

from typing import TYPE_CHECKING

import numpy as np

from tubesort.bead import Color
from tubesort.puzzle_state import PuzzleState
from tubesort.solver.step import SolveState

if TYPE_CHECKING:
    from tubesort.solver.driver import SolveRun

COLOR_CODES: dict[Color, str] = {
    Color.BLACK: "K",
    Color.RED: "R",
    Color.WHITE: "W",
    Color.BLUE: "B",
    Color.GREEN: "G",
    Color.YELLOW: "Y",
}
"""Single-character code for each bead color."""

EMPTY_CELL = "."


def render_board(state: PuzzleState) -> str:
    """Render the puzzle as text: one column per spindle, top row first.

    The last line holds the spindle indices.
    """
    width = len(str(state.spindle_count - 1))
    lines = []
    for row in reversed(range(state.row_count)):
        cells = [
            COLOR_CODES[sp[row].color] if row < len(sp) else EMPTY_CELL for sp in state
        ]
        lines.append(" ".join(cell.ljust(width) for cell in cells).rstrip())
    lines.append(" ".join(str(idx).ljust(width) for idx in range(state.spindle_count)).rstrip())
    return "\n".join(lines)


def solve_rating(state: PuzzleState) -> float:
    """Average number of distinct colors on the non-empty spindles.

    1.0 means every spindle is sorted.  Returns 0.0 for a puzzle without beads.
    """
    distinct = [len(set(sp.colors())) for sp in state if sp]
    if not distinct:
        return 0.0
    return float(np.mean(distinct))


def render_status(run: "SolveRun") -> str:
    """Header line describing a run in progress, followed by the last move."""
    header = (
        f"Mode: solver_{run.solver.name}\tStep: {run.step_count}\t"
        f"MaxStep: {run.max_step}\tSeed: {run.state.seed}\t"
        f"Rating: {solve_rating(run.state):.2f}"
    )
    step = run.last_step
    if step is None or step.stuck or not run.last_move_applied:
        return header
    return f"{header}\nSolving ({step.strategy}): {step.s1} -> {step.s2}"


def render_outcome(run: "SolveRun", result: SolveState) -> str:
    """Final line describing how a run ended."""
    if result == SolveState.SOLVED:
        return f"!! Solved using {run.solver.name} in total of {run.step_count} step(s) !!"
    if result == SolveState.STUCK:
        return f"Stuck!! ({run.solver.name}) reason: {run.stuck_reason}"
    return f"Solving... step {run.step_count}"
