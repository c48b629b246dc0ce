"""Tests for the coin/power-up inventory, lifetime statistics and saved settings."""

import asyncio
from datetime import date, timedelta

import pytest
from src.engine import Difficulty, GameSession, GameSettings, GameState, PowerUpType, Word
from src.progress import (
    GameStats,
    MemoryStore,
    PowerUpInventory,
    SettingsStore,
    StatisticsTracker,
    coins_for_game,
)
from src.progress.inventory import DAILY_BONUS_COINS, STARTING_COINS


def finished(words, score_each=10, invalid_attempts=0, max_combo_level=0):
    return GameSession(
        found_words=[Word(text=w, score=score_each) for w in words],
        invalid_attempts=invalid_attempts,
        max_combo_level=max_combo_level,
        state=GameState.FINISHED,
    )


class TestCoinsForGame:
    """End-of-game coin formula."""

    @pytest.mark.parametrize("score,words,perfect,combo,expected", [
        (0, 0, False, 0, 5),
        (1500, 10, True, 4, 125),
        (250, 3, False, 2, 8),
        (10**6, 500, True, 10, 1000),
    ])
    def test_formula(self, score, words, perfect, combo, expected):
        """Score, words, perfection and combos add up within the bounds."""
        assert coins_for_game(score, words, perfect, combo) == expected


class TestPowerUpInventory:
    """Purchases, use and coin balance."""

    def test_starting_balance(self):
        """New players start with coins and no power-ups."""
        inventory = PowerUpInventory(MemoryStore())
        assert inventory.coins == STARTING_COINS
        assert inventory.quantity(PowerUpType.TIME_FREEZE) == 0

    def test_purchase(self):
        """Buying spends the cost and adds one."""
        inventory = PowerUpInventory(MemoryStore())
        assert inventory.purchase(PowerUpType.TIME_FREEZE) is True
        assert inventory.coins == 450
        assert inventory.quantity(PowerUpType.TIME_FREEZE) == 1

    def test_purchase_needs_coins(self):
        """A purchase above the balance changes nothing."""
        inventory = PowerUpInventory(MemoryStore({"powerups_data": {"coins": 20, "quantities": {}}}))
        asyncio.run(inventory.load())
        assert inventory.can_afford(PowerUpType.LETTER_SHUFFLE) is False
        assert inventory.purchase(PowerUpType.LETTER_SHUFFLE) is False
        assert inventory.coins == 20

    def test_use(self):
        """Using consumes one owned power-up and fails when none are left."""
        inventory = PowerUpInventory(MemoryStore())
        inventory.purchase(PowerUpType.WORD_HINT)
        assert inventory.use(PowerUpType.WORD_HINT) is True
        assert inventory.use(PowerUpType.WORD_HINT) is False
        assert inventory.quantity(PowerUpType.WORD_HINT) == 0

    def test_add_coins_rejects_negative(self):
        """Negative amounts are an error."""
        inventory = PowerUpInventory(MemoryStore())
        with pytest.raises(ValueError):
            inventory.add_coins(-1)

    def test_award_and_daily_bonus(self):
        """Games and the daily bonus add coins."""
        inventory = PowerUpInventory(MemoryStore())
        earned = inventory.award_coins_for_game(finished(["CAT", "TEA"]))
        assert earned == 5
        assert inventory.claim_daily_bonus() == DAILY_BONUS_COINS
        assert inventory.coins == STARTING_COINS + 5 + DAILY_BONUS_COINS

    def test_daily_bonus_once_per_day(self):
        """The daily bonus pays once per calendar day."""
        inventory = PowerUpInventory(MemoryStore())
        day = date(2024, 3, 5)
        assert inventory.claim_daily_bonus(day) == DAILY_BONUS_COINS
        assert inventory.claim_daily_bonus(day) == 0
        assert inventory.claim_daily_bonus(day + timedelta(days=1)) == DAILY_BONUS_COINS
        assert inventory.coins == STARTING_COINS + 2 * DAILY_BONUS_COINS

    def test_round_trip(self):
        """Balances and quantities persist."""
        store = MemoryStore()
        PowerUpInventory(store).purchase(PowerUpType.XRAY_VISION)
        inventory = PowerUpInventory(store)
        asyncio.run(inventory.load())
        assert inventory.coins == 380
        assert inventory.quantity(PowerUpType.XRAY_VISION) == 1


class TestStatisticsTracker:
    """Lifetime totals."""

    def test_record_games(self):
        """Totals, best score and longest word accumulate."""
        tracker = StatisticsTracker(MemoryStore())
        tracker.record_game(finished(["CAT", "STONE"]))
        stats = tracker.record_game(finished(["DONE"], score_each=50))
        assert stats.total_games_played == 2
        assert stats.total_words_found == 3
        assert stats.total_score == 70
        assert stats.best_score == 50
        assert stats.longest_word == "STONE"
        assert stats.average_score == 35.0

    def test_empty_average(self):
        """No games means a zero average."""
        assert GameStats().average_score == 0.0

    def test_round_trip(self):
        """Stats reload, ignoring the derived average."""
        store = MemoryStore()
        StatisticsTracker(store).record_game(finished(["CAT"]))
        assert store.raw("game_stats")["average_score"] == 10.0
        tracker = StatisticsTracker(store)
        asyncio.run(tracker.load())
        assert tracker.stats.total_games_played == 1


class TestSettingsStore:
    """Saved player settings."""

    def test_update_persists(self):
        """Updates are saved and reload."""
        store = MemoryStore()
        SettingsStore(store).update(difficulty=Difficulty.HARD, player_name="Ada")
        settings = SettingsStore(store)
        asyncio.run(settings.load())
        assert settings.settings.difficulty == Difficulty.HARD
        assert settings.settings.player_name == "Ada"

    def test_challenge_fields_not_saved(self):
        """Challenge-mode flags stay out of the saved blob."""
        store = MemoryStore()
        SettingsStore(store).update(is_challenge_mode=True, challenge_id="daily_2024_1_1")
        blob = store.raw("game_settings")
        assert "is_challenge_mode" not in blob
        assert "challenge_id" not in blob

    def test_missing_blob_uses_defaults(self):
        """Nothing saved means the given defaults."""
        defaults = GameSettings(player_name="Guest")
        settings = SettingsStore(MemoryStore(), defaults=defaults)
        asyncio.run(settings.load())
        assert settings.settings == defaults
