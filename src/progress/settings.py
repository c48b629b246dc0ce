"""Persisted player settings."""

from typing import Optional

from ..engine.models import GameSettings
from .store import GAME_SETTINGS_KEY, KeyValueStore, PersistentTracker


class SettingsStore(PersistentTracker):
    """
    The player's saved GameSettings.

    Challenge-mode flags are per-session and never persisted.
    """

    key = GAME_SETTINGS_KEY

    def __init__(self, store: Optional[KeyValueStore] = None, defaults: Optional[GameSettings] = None):
        super().__init__(store)
        self.defaults = defaults or GameSettings()
        self.settings = self.defaults

    def update(self, **changes) -> GameSettings:
        self.settings = GameSettings.model_validate({**self.settings.model_dump(), **changes})
        self.persist()
        return self.settings

    def reset_defaults(self) -> None:
        self.settings = self.defaults

    def to_blob(self) -> dict:
        return self.settings.model_dump(
            mode="json",
            exclude={"is_challenge_mode", "challenge_id", "target_score", "target_words",
                     "time_limit_override"},
        )

    def from_blob(self, blob: dict) -> None:
        self.settings = GameSettings.model_validate({**self.defaults.model_dump(), **blob})
