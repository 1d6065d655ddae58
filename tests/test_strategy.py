"""Tests for the heuristic solver and the random baseline."""

import re

import pytest

from tubesort.bead import Color
from tubesort.puzzle_state import SpindleInfo, generate_random
from tubesort.solver.config import config as solver_config
from tubesort.solver.bogo import BogoSolver
from tubesort.solver.step import Step
from tubesort.solver.strategy import Phase, RandomStrategySolver

LABEL_PATTERN = re.compile(r"^(RandomUnload|RandomLoad|RandomPurge|FinalMove)_\d+$")


def test_final_move_drains_free_spindle(make_state):
    state = make_state(["RR", "", "BB"], 2)
    solver = RandomStrategySolver(seed=0)
    assert solver.get_step(state) == Step(2, 1, False, "FinalMove_2")
    assert solver.phase is Phase.FINAL_MOVE


def test_stuck_when_free_spindle_cannot_be_unloaded(make_state):
    state = make_state(["RR", "BB", "G"], 2)
    step = RandomStrategySolver(seed=0).get_step(state)
    assert step.stuck
    assert step.strategy == "FinalMove_2"


def test_stuck_on_solved_puzzle(solved_state):
    step = RandomStrategySolver(seed=0).get_step(solved_state)
    assert step.stuck


def test_unload_sheds_beads_above_solved_run(make_state):
    state = make_state(["RBG", "YYY", ""], 3)
    solver = RandomStrategySolver(seed=0)

    assert solver.get_step(state) == Step(0, 2, False, "RandomUnload_0")
    assert state.try_move(0, 2)
    assert solver.get_step(state) == Step(0, 2, False, "RandomUnload_0")
    assert state.try_move(0, 2)

    # Nothing left to shed and no donor can be cleared: purge
    step = solver.get_step(state)
    assert step.strategy.startswith("RandomPurge_")
    assert solver.phase is Phase.RANDOM_PURGE


def test_load_moves_matching_bead_onto_focus(make_state):
    state = make_state(["R", "BB", "R"], 2)
    step = RandomStrategySolver(seed=3).get_step(state)
    assert step in (
        Step(2, 0, False, "RandomLoad_0"),
        Step(0, 2, False, "RandomLoad_2"),
    )


def test_donor_prefers_shallowest_matching_bead(make_state):
    focus = SpindleInfo(0, 1, Color.RED)

    state = make_state(["R", "RBB", "BR", ""], 3)
    assert RandomStrategySolver._get_donor(state, focus) == SpindleInfo(2, 0, Color.RED)

    state = make_state(["R", "R", "BR", ""], 3)
    assert RandomStrategySolver._get_donor(state, focus) == SpindleInfo(1, 0, Color.RED)

    # A full spindle without the color is never a donor; a partial one is
    state = make_state(["R", "BBB", "GG", ""], 3)
    assert RandomStrategySolver._get_donor(state, focus) == SpindleInfo(2, 2, Color.RED)

    state = make_state(["R", "BBB", "", ""], 3)
    assert RandomStrategySolver._get_donor(state, focus).index == -1


def test_get_step_does_not_mutate_state():
    state = generate_random(6, 4, seed=42)
    before = state.layout()
    solver = RandomStrategySolver(seed=1)
    for _ in range(5):
        solver.get_step(state)
    assert state.layout() == before


@pytest.mark.parametrize("seed", range(5))
def test_step_labels(seed):
    state = generate_random(6, 4, seed=seed)
    solver = RandomStrategySolver(seed=seed)
    for _ in range(50):
        if state.is_solved():
            break
        step = solver.get_step(state)
        if step.stuck:
            break
        assert LABEL_PATTERN.match(step.strategy)
        state.try_move(step.s1, step.s2)


def test_seeded_solver_is_reproducible():
    def moves(seed: int) -> list[Step]:
        state = generate_random(6, 4, seed=11)
        solver = RandomStrategySolver(seed=seed)
        steps = []
        for _ in range(100):
            step = solver.get_step(state)
            steps.append(step)
            if step.stuck:
                break
            state.try_move(step.s1, step.s2)
        return steps

    assert moves(5) == moves(5)


def test_bogo_solver_proposes_indices_in_range():
    state = generate_random(6, 4, seed=42)
    solver = BogoSolver(seed=0)
    for _ in range(100):
        step = solver.get_step(state)
        assert not step.stuck
        assert step.strategy == "random"
        assert 0 <= step.s1 < state.spindle_count
        assert 0 <= step.s2 < state.spindle_count


def test_load_relocates_donor_top_bead(make_state):
    state = make_state(["R", "RB", "GGG", ""], 3)
    solver = RandomStrategySolver(seed=0)
    solver.phase = Phase.RANDOM_LOAD
    solver.focus = SpindleInfo(0, 1, Color.RED)

    # The blue bead on the donor goes to the only spindle that is neither focus nor donor
    assert solver.get_step(state) == Step(1, 3, False, "RandomLoad_0")


def test_load_without_donor_drops_focus_when_few_spindles_solved(make_state):
    state = make_state(["RB", "GGY", "YYG", ""], 3)
    solver = RandomStrategySolver(seed=0)
    solver.phase = Phase.RANDOM_LOAD
    solver.focus = SpindleInfo(0, 1, Color.RED)

    step = solver.get_step(state)
    assert not step.stuck
    assert step.strategy == f"RandomUnload_{step.s1}"
    assert step.s1 in (0, 1, 2)
    assert solver.phase is Phase.RANDOM_UNLOAD


def test_purge_drains_focus_then_loads(make_state):
    state = make_state(["RB", "GGG", "YYY", ""], 3)
    solver = RandomStrategySolver(seed=0)
    solver.phase = Phase.RANDOM_PURGE
    solver.focus = SpindleInfo(0, 1, Color.RED)

    for _ in range(2):
        step = solver.get_step(state)
        assert step == Step(0, 3, False, "RandomPurge_0")
        assert state.try_move(step.s1, step.s2)

    # Focus is empty: it is dropped, loading picks spindle 3, finds no donor and purges it
    assert solver.get_step(state) == Step(3, 0, False, "RandomPurge_3")
    assert solver.phase is Phase.RANDOM_PURGE
    assert solver.focus == SpindleInfo(3, 1, Color.BLUE)


def test_max_phase_evaluations():
    assert RandomStrategySolver().max_phase_evaluations == solver_config.max_phase_evaluations
    assert RandomStrategySolver(max_phase_evaluations=3).max_phase_evaluations == 3
    with pytest.raises(ValueError):
        RandomStrategySolver(max_phase_evaluations=0)
