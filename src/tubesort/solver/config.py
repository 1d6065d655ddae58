"""Tube sorter configuration."""

from typing import Literal

from dotenv import find_dotenv
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tubesort.bead import PALETTE

# Determine the environment file path, or None if not found
ENV_FILE = find_dotenv() or None


class SorterConfig(BaseSettings):
    """Configuration settings for the tube sorter."""

    spindle_count: int = 6
    """Number of spindles, including the empty one. Default: 6."""

    row_count: int = 9
    """Number of beads a full spindle holds. Default: 9."""

    max_step: int = 1000
    """Step budget for the solving loop. Negative values mean unlimited. Default: 1000."""

    seed: int | None = None
    """Seed for the puzzle generator. If None (default), a time-derived seed is used."""

    speed: int = 100
    """Delay between solver steps in milliseconds, when the board is redrawn. Default: 100."""

    nogui: bool = False
    """Whether to skip drawing intermediate boards and only show the final result."""

    game_mode: Literal["solver", "manual"] = "solver"
    """Whether the puzzle is played by a solver or by hand. Default: "solver"."""

    solver: str = "RandomStrategySolver"
    """Name of the solver used in solver mode."""

    max_phase_evaluations: int = 64
    """Maximum number of phase evaluations per `get_step` call before the heuristic
    solver declares itself stuck. Default: 64.
    """

    log_dir: str = "logs"
    """Directory for run logs. Default: "logs"."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        env_prefix="TUBESORT_",
        extra="forbid",
    )

    @field_validator("spindle_count")
    @classmethod
    def _check_spindle_count(cls, value: int) -> int:
        if value < 2:
            raise ValueError("spindle_count must be at least 2")
        return value

    @field_validator("row_count", "max_phase_evaluations")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("value must be positive")
        return value

    @model_validator(mode="after")
    def _check_palette(self) -> "SorterConfig":
        # Each color fills at most one spindle
        if self.spindle_count - 1 > len(PALETTE):
            raise ValueError(f"spindle_count must be at most {len(PALETTE) + 1}")
        return self


config = SorterConfig()
