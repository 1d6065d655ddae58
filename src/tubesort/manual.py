"""Manual play: the user types two-digit moves."""

import re
from collections.abc import Callable
from dataclasses import dataclass

from tubesort.puzzle_state import PuzzleState
from tubesort.render import render_board

MOVE_PATTERN = re.compile(r"^\d\d$")
"""A move command: source digit followed by target digit, e.g. "05"."""

QUIT_COMMAND = "q"


def parse_move(text: str) -> tuple[int, int] | None:
    """Parse a two-digit move command into (source, target), or None if malformed."""
    text = text.strip()
    if not MOVE_PATTERN.match(text):
        return None
    return int(text[0]), int(text[1])


@dataclass
class ManualSession:
    """A puzzle played by hand."""

    state: PuzzleState
    step_count: int = 0
    """Number of well-formed move commands entered (legal or not)."""

    def apply(self, text: str) -> bool:
        """Apply a move command.  Returns True if a bead was moved."""
        move = parse_move(text)
        if move is None:
            return False
        self.step_count += 1
        return self.state.try_move(*move)

    def prompt(self) -> str:
        if self.state.is_solved():
            return f"SOLVED! Type '{QUIT_COMMAND}' to quit: "
        last = self.state.spindle_count - 1
        return f"Input move (0-{last},0-{last}) or '{QUIT_COMMAND}' to quit: "


def play(
    state: PuzzleState,
    *,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> ManualSession:
    """Play `state` interactively until the user quits or input runs out.

    Args:
        state: The puzzle to play (mutated in place).
        read: Function prompting for and returning one line of input.
        write: Function displaying one block of output.
    """
    session = ManualSession(state)
    write(render_board(state))
    while True:
        try:
            text = read(session.prompt()).strip()
        except EOFError:
            break
        if text == QUIT_COMMAND:
            break
        if session.apply(text):
            s1, s2 = parse_move(text)
            write(render_board(state))
            write(f"Moving: {s1} -> {s2}")
    return session
