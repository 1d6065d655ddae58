"""Classes and functions for representing the puzzle state."""

import json
from collections.abc import Collection, Iterable, Iterator
from time import time_ns
from typing import NamedTuple

import numpy as np
from bitarray import bitarray
from bitarray.util import zeros
from sortedcontainers import SortedSet

from tubesort.bead import PALETTE, Bead, Color, color_from_name


class SpindleInfo(NamedTuple):
    """Query result used to rank spindles.

    Not part of the puzzle state; computed on demand and discarded.
    """

    index: int
    """Index of the spindle, or -1 if no spindle qualified."""

    match_depth: int
    """Number of consecutive beads matching `color` (see the query that produced it)."""

    color: Color
    """Reference color of the query."""


NO_SPINDLE = SpindleInfo(-1, -1, Color.BLACK)
"""Sentinel returned when no spindle qualifies for a query."""


class Spindle:
    """A bounded, last-in-first-out column of beads.

    Beads are stored bottom first, so the top bead is the last element.  Mutation is only
    possible through `PuzzleState.try_move`.
    """

    def __init__(self, capacity: int, beads: Iterable[Bead] = ()) -> None:
        self.capacity: int = capacity
        """Number of beads the spindle holds when full."""

        self._beads: list[Bead] = list(beads)
        if len(self._beads) > capacity:
            raise ValueError(
                f"Spindle holds {len(self._beads)} beads but its capacity is {capacity}."
            )

    def __len__(self) -> int:
        return len(self._beads)

    def __iter__(self) -> Iterator[Bead]:
        """Iterate over the beads, bottom first."""
        return iter(self._beads)

    def __getitem__(self, idx: int) -> Bead:
        """Get a bead by position, counted from the bottom."""
        return self._beads[idx]

    def __repr__(self) -> str:
        return f"Spindle({[str(b) for b in self._beads]}, capacity={self.capacity})"

    @property
    def top(self) -> Bead | None:
        """The top bead, or None if the spindle is empty."""
        return self._beads[-1] if self._beads else None

    @property
    def base_color(self) -> Color:
        """Color of the bottom bead (`Color.BLACK` if empty)."""
        return self._beads[0].color if self._beads else Color.BLACK

    def is_full(self) -> bool:
        return len(self._beads) >= self.capacity

    def solved_run(self) -> int:
        """Length of the run of beads, starting at the base, sharing the base bead's color."""
        if not self._beads:
            return 0
        base = self._beads[0]
        run = 0
        for bead in self._beads:
            if bead != base:
                break
            run += 1
        return run

    def top_mismatch_depth(self, color: Color) -> int:
        """Number of consecutive beads, from the top, whose color is not `color`."""
        depth = 0
        for bead in reversed(self._beads):
            if bead.color == color:
                break
            depth += 1
        return depth

    def is_solved(self) -> bool:
        """Whether the spindle is full and holds a single color."""
        return len(self._beads) == self.capacity and self.solved_run() == self.capacity

    def colors(self) -> tuple[Color, ...]:
        """Bead colors, bottom first."""
        return tuple(bead.color for bead in self._beads)

    def _push(self, bead: Bead) -> None:
        self._beads.append(bead)

    def _pop(self) -> Bead:
        return self._beads.pop()


class PuzzleState:
    """The spindles of a puzzle and the rules for moving beads between them.

    Spindles are kept in a list indexed by spindle index, so iteration order is index
    order.  The last spindle is the designated free spindle, which must be empty in a
    solved puzzle.
    """

    def __init__(
        self,
        spindles: Iterable[Iterable[Bead]],
        row_count: int,
        *,
        seed: int | None = None,
    ) -> None:
        if row_count < 1:
            raise ValueError("row_count must be positive.")

        self.row_count: int = row_count
        """Number of beads a full spindle holds."""

        self.spindles: list[Spindle] = [Spindle(row_count, beads) for beads in spindles]
        """Spindles in index order."""

        if len(self.spindles) < 2:
            raise ValueError("A puzzle needs at least two spindles.")

        self.seed: int | None = seed
        """Seed the puzzle was generated from, if any."""

        # Cached result of `is_solved`; None means dirty (recompute on next read)
        self._solved_cache: bool | None = None

    @property
    def spindle_count(self) -> int:
        """Number of spindles, including the free one."""
        return len(self.spindles)

    @property
    def free_index(self) -> int:
        """Index of the designated free spindle (always the highest index)."""
        return len(self.spindles) - 1

    def __len__(self) -> int:
        return len(self.spindles)

    def __iter__(self) -> Iterator[Spindle]:
        return iter(self.spindles)

    def __getitem__(self, idx: int) -> Spindle:
        return self.spindles[idx]

    def __repr__(self) -> str:
        return (
            f"PuzzleState(spindles={self.spindle_count}, rows={self.row_count}, "
            f"beads={self.bead_count()}, seed={self.seed})"
        )

    def copy(self) -> "PuzzleState":
        """Generate an independent copy of the puzzle state."""
        return PuzzleState((list(sp) for sp in self.spindles), self.row_count, seed=self.seed)

    def layout(self) -> tuple[tuple[Color, ...], ...]:
        """Bead colors of every spindle, bottom first."""
        return tuple(sp.colors() for sp in self.spindles)

    def bead_count(self) -> int:
        """Total number of beads on all spindles."""
        return sum(len(sp) for sp in self.spindles)

    def in_range(self, index: int) -> bool:
        return 0 <= index < len(self.spindles)

    def is_solved(self) -> bool:
        """Whether every spindle but the free one is full and single-colored, and the
        free spindle is empty.

        The result is cached until the next successful move.
        """
        if self._solved_cache is None:
            free = self.spindles[-1]
            self._solved_cache = len(free) == 0 and all(
                sp.is_solved() for sp in self.spindles[:-1]
            )
        return self._solved_cache

    def is_spindle_solved(self, index: int) -> bool:
        """Whether the spindle at `index` is full and single-colored.

        Returns False for an out-of-range index.
        """
        if not self.in_range(index):
            return False
        return self.spindles[index].is_solved()

    def solved_mask(self) -> bitarray:
        """Bitarray whose `i`th bit is set iff spindle `i` is solved."""
        mask = zeros(len(self.spindles))
        for idx, sp in enumerate(self.spindles):
            mask[idx] = sp.is_solved()
        return mask

    def count_solved_spindles(self) -> int:
        """Number of solved spindles."""
        return self.solved_mask().count()

    def spindle_info(self, index: int) -> SpindleInfo:
        """Solved run and base color of the spindle at `index`."""
        sp = self.spindles[index]
        return SpindleInfo(index, sp.solved_run(), sp.base_color)

    def get_most_solved_spindle(self, excluded: Collection[int] = ()) -> SpindleInfo:
        """Find the non-empty spindle with the longest solved run that is not yet solved.

        Args:
            excluded: Spindle indices to skip.

        Returns:
            The winning spindle's info; ties go to the lowest index.  `NO_SPINDLE` if no
            spindle qualifies.
        """
        best = NO_SPINDLE
        for idx, sp in enumerate(self.spindles):
            if idx in excluded or not sp:
                continue
            run = sp.solved_run()
            if best.match_depth < run < self.row_count:
                best = SpindleInfo(idx, run, sp.base_color)
        return best

    def unload_targets(self, excluded: Collection[int] = ()) -> list[int]:
        """Indices of spindles that can accept a bead, in index order."""
        return [
            idx
            for idx, sp in enumerate(self.spindles)
            if idx not in excluded and not sp.is_full()
        ]

    def eligible_spindles(self, restricted: Collection[int] = ()) -> SortedSet:
        """Indices of non-empty spindles that are not solved, excluding `restricted`."""
        return SortedSet(
            idx
            for idx, sp in enumerate(self.spindles)
            if idx not in restricted and sp and not sp.is_solved()
        )

    def try_move(self, s1: int, s2: int) -> bool:
        """Move the top bead of spindle `s1` onto spindle `s2`, if the move is legal.

        A move is legal iff the spindles differ, both indices are in range, `s1` is not
        empty and `s2` is not full.

        Returns:
            True if the bead was moved, False if the move was rejected (state unchanged).
        """
        if s1 == s2 or not self.in_range(s1) or not self.in_range(s2):
            return False
        source, target = self.spindles[s1], self.spindles[s2]
        if not source or target.is_full():
            return False
        self._solved_cache = None
        target._push(source._pop())
        return True

    def to_dict(self) -> dict:
        """Return a dictionary representation of the state, for serialization."""
        return {
            "spindle_count": self.spindle_count,
            "row_count": self.row_count,
            "seed": self.seed,
            "spindles": [[bead.color.name for bead in sp] for sp in self.spindles],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PuzzleState":
        """Create a PuzzleState from its dictionary representation.

        Raises:
            ValueError: If the data is malformed or violates the capacity invariants.
        """
        try:
            spindle_count = int(data["spindle_count"])
            row_count = int(data["row_count"])
            raw_spindles = data["spindles"]
        except KeyError as e:
            raise ValueError(f"Missing key in puzzle data: {e}") from None
        if len(raw_spindles) != spindle_count:
            raise ValueError(
                f"Expected {spindle_count} spindles, found {len(raw_spindles)}."
            )
        spindles = [[Bead(color_from_name(name)) for name in sp] for sp in raw_spindles]
        return cls(spindles, row_count, seed=data.get("seed"))

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> "PuzzleState":
        return cls.from_dict(json.loads(text))


def time_seed() -> int:
    """Derive a 32-bit seed from the current time."""
    return time_ns() % 2**32


def generate_random(spindle_count: int, row_count: int, seed: int | None = None) -> PuzzleState:
    """Generate a random puzzle.

    Spindles `0..spindle_count-2` are filled to `row_count` beads; the last spindle is left
    empty.  Colors are drawn uniformly from the palette colors that are still available: a
    color leaves the pool once it has been used `row_count` times.  The result is balanced
    but not necessarily solvable.

    Args:
        spindle_count: Number of spindles, including the empty one.
        row_count: Number of beads per full spindle.
        seed: Seed for the random generator.  If None, a time-derived seed is used.

    Returns:
        The generated puzzle.  Its `seed` attribute holds the seed actually used.

    Raises:
        ValueError: If the dimensions are invalid or the palette cannot fill the spindles.
    """
    if spindle_count < 2 or row_count < 1:
        raise ValueError(
            f"Invalid puzzle dimensions: {spindle_count} spindles, {row_count} rows."
        )
    if spindle_count - 1 > len(PALETTE):
        raise ValueError(
            f"At most {len(PALETTE) + 1} spindles are supported with a palette of "
            f"{len(PALETTE)} colors."
        )
    if seed is None:
        seed = time_seed()
    rng = np.random.default_rng(seed)

    available = list(PALETTE)
    bead_counts = dict.fromkeys(PALETTE, 0)
    spindles: list[list[Bead]] = []
    for _ in range(spindle_count - 1):
        beads: list[Bead] = []
        for _ in range(row_count):
            color = available[int(rng.integers(len(available)))]
            bead_counts[color] += 1
            # This color's quota is used up; stop drawing it
            if bead_counts[color] == row_count:
                available.remove(color)
            beads.append(Bead(color))
        spindles.append(beads)
    spindles.append([])  # free spindle

    return PuzzleState(spindles, row_count, seed=seed)
