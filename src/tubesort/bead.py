"""Bead colors and the bead value type."""

from enum import IntEnum
from typing import NamedTuple


class Color(IntEnum):
    """Enumeration of bead colors.

    `BLACK` is never drawn by the generator; it is the placeholder color of a sentinel
    `SpindleInfo`.
    """

    BLACK = 0
    RED = 1
    WHITE = 2
    BLUE = 3
    GREEN = 4
    YELLOW = 5


PALETTE: tuple[Color, ...] = (Color.RED, Color.WHITE, Color.BLUE, Color.GREEN, Color.YELLOW)
"""Colors available to the puzzle generator, in draw order."""


class Bead(NamedTuple):
    """A single bead.  Two beads are equal iff they have the same color."""

    color: Color

    def __str__(self) -> str:
        return self.color.name.capitalize()


def color_from_name(name: str) -> Color:
    """Look up a color by (case-insensitive) name.

    Raises:
        ValueError: If the name does not match any color.
    """
    try:
        return Color[name.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown bead color: '{name}'") from None
