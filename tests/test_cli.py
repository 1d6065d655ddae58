"""Tests for command-line parsing and configuration."""

import pytest
from pydantic import ValidationError

from tubesort import main, parse_args
from tubesort.solver.config import SorterConfig


def test_parse_args():
    overrides = parse_args(
        ["nogui", "seed=42", "MaxStep=-1", "gamemode=Manual", "solver=BogoSolver", "speed=5"]
    )
    assert overrides == {
        "nogui": True,
        "seed": "42",
        "max_step": "-1",
        "game_mode": "manual",
        "solver": "BogoSolver",
        "speed": "5",
    }


def test_parse_args_numeric_game_mode():
    assert parse_args(["gamemode=1"]) == {"game_mode": "solver"}
    assert parse_args(["GameMode=2"]) == {"game_mode": "manual"}


@pytest.mark.parametrize("args", [["foo"], ["bar=1"], ["gamemode=3"]])
def test_parse_args_rejects_bad_arguments(args):
    with pytest.raises(ValueError):
        parse_args(args)


def test_config_from_args():
    config = SorterConfig(**parse_args(["seed=7", "spindles=5", "rows=3", "maxstep=-1"]))
    assert config.seed == 7
    assert config.spindle_count == 5
    assert config.row_count == 3
    assert config.max_step == -1
    assert config.game_mode == "solver"


def test_config_defaults():
    config = SorterConfig()
    assert config.spindle_count == 6
    assert config.row_count == 9
    assert config.max_step == 1000
    assert config.solver == "RandomStrategySolver"


@pytest.mark.parametrize(
    "overrides",
    [{"spindle_count": 8}, {"spindle_count": 1}, {"row_count": 0}, {"unknown": 1}],
)
def test_config_validation(overrides):
    with pytest.raises(ValidationError):
        SorterConfig(**overrides)


def test_main_solves_from_arguments(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(
        "tubesort.argv",
        ["tubesort", "seed=42", "spindles=6", "rows=4", "maxstep=300", "nogui"],
    )
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code in (0, 2)
    assert (tmp_path / "logs" / "6x4" / "42.log").is_file()
    out = capsys.readouterr().out
    assert "Solved using" in out or "Stuck!!" in out


def test_main_reports_bad_arguments(monkeypatch, capsys):
    monkeypatch.setattr("tubesort.argv", ["tubesort", "solver=Nope"])
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 1
    assert "Unknown solver" in capsys.readouterr().out
