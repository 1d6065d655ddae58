"""The solver contract: a solver proposes one step at a time."""

from enum import IntEnum
from typing import NamedTuple, Protocol

from tubesort.puzzle_state import PuzzleState


class SolveState(IntEnum):
    """Outcome of a single tick of the solving loop."""

    SOLVING = 0
    SOLVED = 1
    STUCK = 2


class Step(NamedTuple):
    """A proposed move, or a stuck signal."""

    s1: int
    """Index of the spindle to take the top bead from."""

    s2: int
    """Index of the spindle to put the bead on."""

    stuck: bool
    """Whether the solver has given up.  `s1` and `s2` are meaningless when set."""

    strategy: str
    """Label describing how the step was chosen.  For display only."""

    @classmethod
    def give_up(cls, strategy: str) -> "Step":
        """A step signalling that the solver is stuck."""
        return cls(-1, -1, True, strategy)


class Solver(Protocol):
    """Anything that can propose the next step for a puzzle."""

    name: str

    def get_step(self, state: PuzzleState) -> Step:
        """Propose the next step for `state`.  Must not mutate `state`."""
        ...
