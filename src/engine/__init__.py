"""Game engine: session state machine, combos, scoring and power-ups."""

from .models import (
    Difficulty,
    DifficultyConfig,
    DIFFICULTY_CONFIGS,
    GameState,
    GameSettings,
    Word,
    GameSession,
    SubmissionResult,
    PowerUpType,
    PowerUpConfig,
    PowerUpActivation,
    POWER_UP_CONFIGS,
)
from .combo import ComboTracker, ComboStreak, multiplier_for_level
from .scoring import ScoringEngine, base_score
from .powerups import PowerUpEffect, PowerUpEffectManager
from .events import EventQueue, EventType, GameEvent
from .session import SessionStateMachine
from .clock import SessionClock

__all__ = [
    "Difficulty",
    "DifficultyConfig",
    "DIFFICULTY_CONFIGS",
    "GameState",
    "GameSettings",
    "Word",
    "GameSession",
    "SubmissionResult",
    "PowerUpType",
    "PowerUpConfig",
    "PowerUpActivation",
    "POWER_UP_CONFIGS",
    "ComboTracker",
    "ComboStreak",
    "multiplier_for_level",
    "ScoringEngine",
    "base_score",
    "PowerUpEffect",
    "PowerUpEffectManager",
    "EventQueue",
    "EventType",
    "GameEvent",
    "SessionStateMachine",
    "SessionClock",
]
