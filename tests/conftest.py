"""Shared fixtures for the tube sorter tests."""

from collections.abc import Callable

import pytest

from tubesort.bead import Bead, Color
from tubesort.puzzle_state import PuzzleState

COLOR_LETTERS: dict[str, Color] = {
    "R": Color.RED,
    "W": Color.WHITE,
    "B": Color.BLUE,
    "G": Color.GREEN,
    "Y": Color.YELLOW,
}


def build_state(spindles: list[str], row_count: int) -> PuzzleState:
    """Build a puzzle from one string per spindle, bottom bead first (e.g. "RRB")."""
    return PuzzleState([[Bead(COLOR_LETTERS[ch]) for ch in sp] for sp in spindles], row_count)


@pytest.fixture
def make_state() -> Callable[[list[str], int], PuzzleState]:
    """Factory building a puzzle from per-spindle color strings."""
    return build_state


@pytest.fixture
def solved_state() -> PuzzleState:
    """A solved 3-spindle puzzle."""
    return build_state(["RR", "BB", ""], 2)
