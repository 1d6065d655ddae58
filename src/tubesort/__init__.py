"""Tube Sorter.

Generates a random bead-sorting puzzle: colored beads on spindles, moved one at a time
from the top of one spindle to another, until every spindle but the last holds a single
color and the last is empty.  The puzzle is solved by a heuristic solver or played by hand.

Arguments are `key=value` pairs (keys are case-insensitive) or the bare flag `nogui`:

    gamemode=Solver|Manual  speed=<ms>  seed=<int>  maxstep=<int, negative = unlimited>
    solver=RandomStrategySolver|BogoSolver  spindles=<int>  rows=<int>
"""

from sys import argv, exit

from .manual import play
from .puzzle_state import generate_random
from .solver.config import SorterConfig
from .solver.driver import get_solver, run
from .solver.step import SolveState

ARG_FIELDS: dict[str, str] = {
    "gamemode": "game_mode",
    "speed": "speed",
    "seed": "seed",
    "maxstep": "max_step",
    "solver": "solver",
    "spindles": "spindle_count",
    "rows": "row_count",
}
"""Mapping from command-line keys to configuration fields."""

GAME_MODES: dict[str, str] = {"solver": "solver", "1": "solver", "manual": "manual", "2": "manual"}


def parse_args(args: list[str]) -> dict[str, object]:
    """Parse command-line arguments into configuration overrides.

    Raises:
        ValueError: If an argument is malformed or unknown.
    """
    overrides: dict[str, object] = {}
    for arg in args:
        if arg.lower() == "nogui":
            overrides["nogui"] = True
            continue
        key, sep, value = arg.partition("=")
        if not sep:
            raise ValueError(f"Invalid argument '{arg}', expected key=value.")
        field = ARG_FIELDS.get(key.strip().lower())
        if field is None:
            raise ValueError(f"Unknown argument key '{key}'.")
        if field == "game_mode":
            mode = GAME_MODES.get(value.strip().lower())
            if mode is None:
                raise ValueError(f"Unknown game mode '{value}'.")
            overrides[field] = mode
        else:
            overrides[field] = value.strip()
    return overrides


def main() -> None:
    """Main entry point for the tube sorter."""
    try:
        config = SorterConfig(**parse_args(argv[1:]))
        get_solver(config.solver)
    except ValueError as e:
        print(f"Error: {e}")
        print(__doc__)
        exit(1)

    if config.game_mode == "manual":
        play(generate_random(config.spindle_count, config.row_count, config.seed))
        return

    result = run(config)
    exit(0 if result == SolveState.SOLVED else 2)
