"""Power-up inventory and coin balance."""

import datetime as dt
import logging
from typing import Dict, Optional
from pydantic import BaseModel, Field

from ..engine.models import GameSession, PowerUpType, POWER_UP_CONFIGS
from .store import POWERUPS_KEY, KeyValueStore, PersistentTracker

logger = logging.getLogger(__name__)

STARTING_COINS = 500
DAILY_BONUS_COINS = 100
MIN_GAME_COINS = 5
MAX_GAME_COINS = 1000
PERFECT_GAME_COINS = 50
COMBO_COIN_THRESHOLD = 3


def coins_for_game(score: int, words_found: int, perfect_game: bool, combo_level: int) -> int:
    """
    Coins earned for a finished game.

    score // 100, plus 2 per word, plus 50 for a perfect game, plus
    10 per combo level from level 3 up; clamped to 5..1000.
    """
    coins = score // 100 + words_found * 2
    if perfect_game:
        coins += PERFECT_GAME_COINS
    if combo_level >= COMBO_COIN_THRESHOLD:
        coins += combo_level * 10
    return min(max(coins, MIN_GAME_COINS), MAX_GAME_COINS)


class InventoryData(BaseModel):
    coins: int = Field(STARTING_COINS, ge=0)
    quantities: Dict[PowerUpType, int] = Field(default_factory=dict)
    last_daily_bonus: Optional[dt.date] = None


class PowerUpInventory(PersistentTracker):
    """Owned power-ups per type and the coin balance they are bought with."""

    key = POWERUPS_KEY

    def __init__(self, store: Optional[KeyValueStore] = None):
        super().__init__(store)
        self.reset_defaults()

    @property
    def coins(self) -> int:
        return self.data.coins

    def quantity(self, power_up: PowerUpType) -> int:
        return self.data.quantities.get(power_up, 0)

    def can_afford(self, power_up: PowerUpType) -> bool:
        return self.data.coins >= POWER_UP_CONFIGS[power_up].cost

    def _set(self, coins: int, power_up: Optional[PowerUpType] = None, delta: int = 0) -> None:
        quantities = dict(self.data.quantities)
        if power_up is not None:
            quantities[power_up] = quantities.get(power_up, 0) + delta
        self.data = self.data.model_copy(update={"coins": coins, "quantities": quantities})
        self.persist()

    def purchase(self, power_up: PowerUpType) -> bool:
        """Buy one power-up. Returns False when the balance is too low."""
        cost = POWER_UP_CONFIGS[power_up].cost
        if self.data.coins < cost:
            return False
        self._set(self.data.coins - cost, power_up, 1)
        logger.debug("Purchased %s for %s coins", power_up.value, cost)
        return True

    def use(self, power_up: PowerUpType) -> bool:
        """Spend one owned power-up. Returns False when none are owned."""
        if self.quantity(power_up) <= 0:
            return False
        self._set(self.data.coins, power_up, -1)
        return True

    def add_coins(self, amount: int) -> int:
        if amount < 0:
            raise ValueError(f"Coin amount must be non-negative, got {amount}")
        self._set(self.data.coins + amount)
        return self.data.coins

    def award_coins_for_game(self, session: GameSession) -> int:
        """Credit end-of-game coins. Returns the amount awarded."""
        earned = coins_for_game(
            session.total_score,
            len(session.found_words),
            session.is_perfect,
            session.max_combo_level,
        )
        self.add_coins(earned)
        return earned

    def claim_daily_bonus(self, today: Optional[dt.date] = None) -> int:
        """Credit the once-a-day bonus. Returns 0 if already claimed today."""
        today = today or dt.date.today()
        if self.data.last_daily_bonus == today:
            return 0
        self.data = self.data.model_copy(update={"last_daily_bonus": today})
        self.add_coins(DAILY_BONUS_COINS)
        return DAILY_BONUS_COINS

    def reset_defaults(self) -> None:
        self.data = InventoryData()

    def to_blob(self) -> dict:
        return self.data.model_dump(mode="json")

    def from_blob(self, blob: dict) -> None:
        self.data = InventoryData.model_validate(blob)
