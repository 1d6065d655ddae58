"""Baseline solver: moves beads at random."""

import numpy as np

from tubesort.puzzle_state import PuzzleState
from tubesort.solver.step import Step


class BogoSolver:
    """Propose two uniformly random spindle indices every call.

    Never reports stuck; illegal proposals are simply rejected by the puzzle.
    """

    name = "BogoSolver"

    def __init__(self, *, seed: int | None = None) -> None:
        self._rng = np.random.default_rng(seed)

    def get_step(self, state: PuzzleState) -> Step:
        s1, s2 = (int(i) for i in self._rng.integers(0, state.spindle_count, size=2))
        return Step(s1, s2, False, "random")
