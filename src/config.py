"""Application configuration loaded from YAML."""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, field_validator

import yaml

from .engine.models import Difficulty, GameSettings
from .words.letters import DEFAULT_MAX_ATTEMPTS, DEFAULT_MIN_SOLUTIONS


class AppConfig(BaseModel):
    """
    Configuration for the game CLI.

    Attributes:
        dictionary_path: Word list file (None for the bundled list)
        storage_dir: Directory for JSON progress files
        log_level: Logging level name
        difficulty: Default difficulty for new games
        player_name: Default player name
        score_time_bonus: Add each word's score to the timer, in seconds
        min_solutions: Words a letter pool must yield
        max_attempts: Letter pool sampling attempts before falling back
        seed: Random seed for letter pools (None for random)
    """
    dictionary_path: Optional[Path] = None
    storage_dir: Path = Path("data")
    log_level: str = "WARNING"
    difficulty: Difficulty = Difficulty.MEDIUM
    player_name: str = "Player"
    score_time_bonus: bool = True
    min_solutions: int = Field(DEFAULT_MIN_SOLUTIONS, ge=1)
    max_attempts: int = Field(DEFAULT_MAX_ATTEMPTS, ge=1)
    seed: Optional[int] = None

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    def game_settings(self) -> GameSettings:
        return GameSettings(
            difficulty=self.difficulty,
            player_name=self.player_name,
            score_time_bonus=self.score_time_bonus,
        )


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file, or None for defaults

    Raises:
        FileNotFoundError: If config_path does not exist
    """
    if config_path is None:
        return AppConfig()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return AppConfig(**(data or {}))
