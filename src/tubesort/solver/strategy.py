"""Heuristic solver: a phase-based state machine that proposes one move per call.

The solver repeatedly focuses on a random unsolved spindle.  It first sheds the beads
above the focus spindle's solved run (RandomUnload), then pulls beads of the focus color
from the spindle where one is closest to the top (RandomLoad).  When loading jams and more
than half of the puzzle is already solved, a random spindle is emptied completely to break
the cycle (RandomPurge).  Once every spindle but one is solved, the free spindle is
drained (FinalMove).

There is no search and no backtracking, so the solver may fail on puzzles that are
solvable.  Solving is bounded by the caller's step budget.
"""

from collections.abc import Collection
from enum import Enum

import numpy as np

from tubesort.puzzle_state import PuzzleState, SpindleInfo
from tubesort.solver.config import config as solver_config
from tubesort.solver.step import Step


class Phase(Enum):
    """Phases of the heuristic solver.  Values are used in step labels."""

    RANDOM_UNLOAD = "RandomUnload"
    RANDOM_LOAD = "RandomLoad"
    RANDOM_PURGE = "RandomPurge"
    FINAL_MOVE = "FinalMove"


class RandomStrategySolver:
    """Stateful heuristic solver.

    The current phase and focus spindle persist between calls to `get_step`, so one
    instance must be used with one puzzle only.
    """

    name = "RandomStrategySolver"

    def __init__(
        self,
        *,
        seed: int | None = None,
        max_phase_evaluations: int | None = None,
    ) -> None:
        """Initialize the solver.

        Args:
            seed: Seed for the solver's random choices.  If None, choices are not
                reproducible.
            max_phase_evaluations: Number of phase evaluations allowed per call before
                the solver reports stuck.  Defaults to the configured value.

        Raises:
            ValueError: If `max_phase_evaluations` is less than 1.
        """
        if max_phase_evaluations is None:
            max_phase_evaluations = solver_config.max_phase_evaluations
        if max_phase_evaluations < 1:
            raise ValueError("max_phase_evaluations must be positive.")

        self.phase: Phase = Phase.RANDOM_UNLOAD
        """Current phase."""

        self.focus: SpindleInfo | None = None
        """Spindle the current phase works on, with its solved run and color at the time
        it was picked."""

        self.solve_count: int = 0
        """Number of solved spindles seen at the start of the last phase evaluation."""

        self.max_phase_evaluations: int = max_phase_evaluations
        """Phase evaluations allowed per call to `get_step`."""

        self._rng = np.random.default_rng(seed)

    def get_step(self, state: PuzzleState) -> Step:
        """Propose the next step for `state`."""
        free = state.free_index

        for _ in range(self.max_phase_evaluations):
            self.solve_count = state.count_solved_spindles()
            # Only the free spindle is left to empty
            if self.solve_count == state.spindle_count - 1 and state[free]:
                self.phase = Phase.FINAL_MOVE

            if self.phase is Phase.RANDOM_UNLOAD:
                if self.focus is None:
                    self.focus = self._pick_unsolved(state)
                if self.focus is None:
                    self.phase = Phase.FINAL_MOVE
                else:
                    # Shed everything above the solved run
                    target = self._unload_target(state, {self.focus.index})
                    if target != -1 and len(state[self.focus.index]) > self.focus.match_depth:
                        return self._step(self.focus.index, target, self.focus.index)

                    if state.is_spindle_solved(self.focus.index):
                        self.focus = self._pick_unsolved(state, {self.focus.index})
                    else:
                        self.phase = Phase.RANDOM_LOAD

            if self.phase is Phase.RANDOM_LOAD:
                if self.focus is not None and state.is_spindle_solved(self.focus.index):
                    self.focus = self._pick_unsolved(state, {self.focus.index})
                    self.phase = Phase.RANDOM_UNLOAD
                    continue
                if self.focus is None or state[self.focus.index].is_full():
                    self.focus = self._pick_unsolved(state)
                if self.focus is None:
                    self.phase = Phase.FINAL_MOVE
                    continue

                donor = self._get_donor(state, self.focus)
                if donor.index != -1:
                    if donor.match_depth == 0:
                        return self._step(donor.index, self.focus.index, self.focus.index)
                    # Top bead is the wrong color, dump it somewhere else
                    target = self._unload_target(state, {self.focus.index, donor.index})
                    if target != -1:
                        return self._step(donor.index, target, self.focus.index)

                if self.solve_count > state.spindle_count // 2 - 1:
                    self.phase = Phase.RANDOM_PURGE
                    self.focus = self._pick_unsolved(state)
                else:
                    self.focus = None
                    self.phase = Phase.RANDOM_UNLOAD

            if self.phase is Phase.RANDOM_PURGE:
                if self.focus is not None:
                    target = self._unload_target(state, {self.focus.index})
                    if target != -1 and state[self.focus.index]:
                        return self._step(self.focus.index, target, self.focus.index)
                self.focus = None
                self.phase = Phase.RANDOM_LOAD

            if self.phase is Phase.FINAL_MOVE:
                label = f"{Phase.FINAL_MOVE.value}_{free}"
                if state[free]:
                    target = self._unload_target(state, {free})
                    if target == -1:
                        return Step.give_up(label)
                    return Step(free, target, False, label)
                if not state.eligible_spindles():
                    return Step.give_up(label)
                self.phase = Phase.RANDOM_UNLOAD

        focus_index = self.focus.index if self.focus is not None else -1
        return Step.give_up(f"{self.phase.value}_{focus_index}")

    def _step(self, s1: int, s2: int, focus: int) -> Step:
        return Step(s1, s2, False, f"{self.phase.value}_{focus}")

    def _pick_unsolved(
        self, state: PuzzleState, restricted: Collection[int] = ()
    ) -> SpindleInfo | None:
        """Pick a non-empty, unsolved spindle uniformly at random.

        Returns:
            The picked spindle's info, or None if no spindle is eligible.
        """
        eligible = state.eligible_spindles(restricted)
        if not eligible:
            return None
        index = eligible[int(self._rng.integers(len(eligible)))]
        return state.spindle_info(index)

    def _unload_target(self, state: PuzzleState, excluded: Collection[int]) -> int:
        """Pick a random spindle that can accept a bead, or -1 if there is none."""
        targets = state.unload_targets(excluded)
        if not targets:
            return -1
        return targets[int(self._rng.integers(len(targets)))]

    @staticmethod
    def _get_donor(state: PuzzleState, focus: SpindleInfo) -> SpindleInfo:
        """Find the spindle whose nearest bead of the focus color is closest to the top.

        `match_depth` of the result is the number of beads above that bead.  Spindles
        without such a bead count their full length, and qualify only while that is
        below `row_count`.  Ties go to the lowest index.
        """
        best = SpindleInfo(-1, -1, focus.color)
        for idx, sp in enumerate(state):
            if idx == focus.index or not sp:
                continue
            depth = sp.top_mismatch_depth(focus.color)
            if depth < state.row_count and (best.index == -1 or depth < best.match_depth):
                best = SpindleInfo(idx, depth, focus.color)
        return best
