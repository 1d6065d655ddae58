"""Solving loop: alternate solver steps and moves until solved, stuck or out of budget."""

import sys
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from pprint import pprint
from time import sleep, time
from typing import TextIO

from tubesort.puzzle_state import PuzzleState, generate_random
from tubesort.render import render_board, render_outcome, render_status, solve_rating
from tubesort.solver.bogo import BogoSolver
from tubesort.solver.config import SorterConfig
from tubesort.solver.step import SolveState, Solver, Step
from tubesort.solver.strategy import RandomStrategySolver
from tubesort.util import LOG_TIME_FORMAT, format_duration

UNLIMITED_STEPS = sys.maxsize
"""Step budget used when a negative `max_step` is given."""

SOLVERS: dict[str, Callable[[int | None, int | None], Solver]] = {
    RandomStrategySolver.name: lambda seed, max_evals: RandomStrategySolver(
        seed=seed, max_phase_evaluations=max_evals
    ),
    BogoSolver.name: lambda seed, _: BogoSolver(seed=seed),
}
"""Known solvers, by name.  Factories take a seed and a phase evaluation cap."""


def normalize_max_step(max_step: int) -> int:
    """Map a negative step budget to an unlimited one."""
    return UNLIMITED_STEPS if max_step < 0 else max_step


def get_solver(
    name: str, *, seed: int | None = None, max_phase_evaluations: int | None = None
) -> Solver:
    """Create a solver by (case-insensitive) name.

    `max_phase_evaluations` only applies to solvers that work in phases; None means the
    configured default.

    Raises:
        ValueError: If no solver has that name.
    """
    for solver_name, factory in SOLVERS.items():
        if solver_name.lower() == name.strip().lower():
            return factory(seed, max_phase_evaluations)
    raise ValueError(f"Unknown solver '{name}'. Known solvers: {', '.join(SOLVERS)}")


@dataclass(kw_only=True)
class SolveRun:
    """A puzzle being solved by one solver, with its step budget and progress."""

    state: PuzzleState
    """The puzzle being solved.  Mutated as the run advances."""

    solver: Solver
    """The solver proposing steps."""

    max_step: int = 1000
    """Step budget.  Negative values mean unlimited."""

    step_count: int = 0
    """Number of steps requested from the solver so far."""

    stuck_reason: str = ""
    """Why the run got stuck, if it did."""

    last_step: Step | None = None
    """Most recent step proposed by the solver."""

    last_move_applied: bool = False
    """Whether the puzzle accepted the most recent step."""

    def __post_init__(self) -> None:
        self.max_step = normalize_max_step(self.max_step)

    def advance(self) -> SolveState:
        """Perform one tick: check for the end of the run, else ask for and apply a step.

        Rejected moves still count against the step budget.
        """
        if self.state.is_solved():
            return SolveState.SOLVED
        if self.step_count >= self.max_step:
            self.stuck_reason = "maxStep exceeded"
            return SolveState.STUCK

        step = self.solver.get_step(self.state)
        self.step_count += 1
        self.last_step = step
        if step.stuck:
            self.last_move_applied = False
            self.stuck_reason = "solver decision"
            return SolveState.STUCK

        self.last_move_applied = self.state.try_move(step.s1, step.s2)
        return SolveState.SOLVING


def solve(
    state: PuzzleState,
    solver: Solver,
    *,
    max_step: int = 1000,
    logf: TextIO | None = None,
    on_step: Callable[[SolveRun], None] | None = None,
) -> tuple[SolveRun, SolveState]:
    """Run `solver` on `state` until it is solved or stuck.

    Args:
        state: The puzzle to solve (mutated in place).
        solver: The solver proposing steps.
        max_step: Step budget.  Negative values mean unlimited.
        logf: Optional file object to log every step to.
        on_step: Optional callback invoked after every tick that applied or rejected a step.

    Returns:
        The finished run and its final state (SOLVED or STUCK).
    """
    run = SolveRun(state=state, solver=solver, max_step=max_step)
    while (result := run.advance()) == SolveState.SOLVING:
        if logf is not None and run.last_step is not None:
            step = run.last_step
            rejected = "" if run.last_move_applied else " (rejected)"
            print(
                f"{run.step_count}: {step.strategy} {step.s1} -> {step.s2}{rejected}",
                file=logf,
                flush=True,
            )
        if on_step is not None:
            on_step(run)
    return run, result


def run(config: SorterConfig) -> SolveState:
    """Generate a puzzle from the configuration, solve it and report the outcome.

    Args:
        config (SorterConfig): The configuration for the run.
    """
    state = generate_random(config.spindle_count, config.row_count, config.seed)
    print(f"Puzzle: {state}")

    logfile = Path(
        f"{config.log_dir}/{config.spindle_count}x{config.row_count}/{state.seed}.log"
    )
    print(f"Log file: {logfile}")
    logfile.parent.mkdir(parents=True, exist_ok=True)

    with open(logfile, "w", encoding="utf-8") as logf:
        try:
            result = solve_one(state, config, logf=logf)
        except KeyboardInterrupt:
            print("Solver interrupted by user.", file=logf, flush=True)
            print("Solver interrupted by user.")
            sys.exit(1)
    print()
    return result


def solve_one(state: PuzzleState, config: SorterConfig, *, logf: TextIO) -> SolveState:
    """Solve one generated puzzle, logging the process.

    Args:
        state (PuzzleState): The puzzle to solve.
        config (SorterConfig): The configuration for the run.
        logf: File object to log the solving process.
    """
    solver = get_solver(
        config.solver, seed=config.seed, max_phase_evaluations=config.max_phase_evaluations
    )

    print("Config:", file=logf, flush=True)
    pprint(config.model_dump(), stream=logf, width=120)
    print(f"Solver: {solver.name}", file=logf, flush=True)
    print("Initial puzzle:", file=logf, flush=True)
    print(render_board(state), file=logf, flush=True)
    print(state.to_json(), file=logf, flush=True)
    print(f"Solve rating: {solve_rating(state):.2f}", file=logf, flush=True)

    start_time = time()
    start_time_str = datetime.fromtimestamp(start_time).astimezone().strftime(LOG_TIME_FORMAT)
    print(f"Start time: {start_time_str}", file=logf, flush=True)

    def _redraw(current: SolveRun) -> None:
        print(render_status(current))
        print(render_board(current.state))
        sleep(config.speed / 1000)

    finished, result = solve(
        state,
        solver,
        max_step=config.max_step,
        logf=logf,
        on_step=None if config.nogui else _redraw,
    )

    outcome = render_outcome(finished, result)
    print(render_board(state))
    print(outcome)
    print("", file=logf, flush=True)
    print("Final puzzle:", file=logf, flush=True)
    print(render_board(state), file=logf, flush=True)
    print(outcome, file=logf, flush=True)
    print(f"Steps: {finished.step_count:,}", file=logf, flush=True)
    print(f"Time taken: {format_duration(time() - start_time)}", file=logf, flush=True)
    return result
