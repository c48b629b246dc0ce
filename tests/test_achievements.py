"""Tests for achievement tracking."""

import asyncio

from src.engine import GameSession, GameSettings, GameState, Word
from src.progress import AchievementTracker, AchievementType, MemoryStore
from src.progress.achievements import ACHIEVEMENT_INFO


def game(words, invalid_attempts=0, state=GameState.FINISHED):
    return GameSession(
        settings=GameSettings(),
        found_words=[Word(text=w, score=10, time_to_find=8.0) for w in words],
        invalid_attempts=invalid_attempts,
        state=state,
    )


class TestAchievementTypes:
    """Static achievement data."""

    def test_every_type_described(self):
        """Each type has a name, description, points and target."""
        assert set(ACHIEVEMENT_INFO) == set(AchievementType)
        assert AchievementType.WORD_MASTER.target == 100
        assert AchievementType.DICTIONARY.display_name == "Dictionary"
        assert AchievementType.PERFECT_GAME.points == 300


class TestAchievementTracker:
    """Progress and unlocking."""

    def test_first_word_and_speed_demon(self):
        """A quick first word unlocks two achievements."""
        tracker = AchievementTracker(MemoryStore())
        unlocked = tracker.track_word_found(Word(text="CAT", time_to_find=2.5))
        assert {a.type for a in unlocked} == {AchievementType.FIRST_WORD, AchievementType.SPEED_DEMON}
        assert tracker.get(AchievementType.WORD_MASTER).progress == 1

    def test_slow_word_is_not_speedy(self):
        """Finds of five seconds or more don't count as speedy."""
        tracker = AchievementTracker(MemoryStore())
        tracker.track_word_found(Word(text="CAT", time_to_find=5.0))
        assert not tracker.get(AchievementType.SPEED_DEMON).unlocked

    def test_word_counters(self):
        """Quick finds and long words are counted from the word itself."""
        tracker = AchievementTracker(MemoryStore())
        tracker.track_word_found(Word(text="CAT", time_to_find=9.0))
        tracker.track_word_found(Word(text="STRANGER", time_to_find=3.0))
        assert tracker.statistics.quick_finds == 1
        assert tracker.statistics.long_words_found == 1
        assert tracker.get(AchievementType.DICTIONARY).unlocked

    def test_unlock_is_idempotent(self):
        """Meeting a target twice unlocks and reports once."""
        tracker = AchievementTracker(MemoryStore())
        tracker.track_word_found(Word(text="CAT", time_to_find=9.0))
        tracker.track_word_found(Word(text="TEA", time_to_find=9.0))

        first_word = tracker.get(AchievementType.FIRST_WORD)
        assert first_word.unlocked is True
        assert first_word.progress == first_word.target
        newly = [a.type for a in tracker.newly_unlocked]
        assert newly.count(AchievementType.FIRST_WORD) == 1

    def test_drain_newly_unlocked(self):
        """Draining returns unlocks once."""
        tracker = AchievementTracker(MemoryStore())
        tracker.track_word_found(Word(text="ELEPHANT", time_to_find=9.0))
        drained = tracker.drain_newly_unlocked()
        assert {a.type for a in drained} == {AchievementType.FIRST_WORD, AchievementType.DICTIONARY}
        assert tracker.drain_newly_unlocked() == []

    def test_perfect_game(self):
        """Five words with no mistakes is a perfect game."""
        tracker = AchievementTracker(MemoryStore())
        unlocked = tracker.track_game_completed(game(["CAT", "TEA", "EAT", "ONE", "END"]))
        assert AchievementType.PERFECT_GAME in {a.type for a in unlocked}

    def test_mistakes_spoil_perfect_game(self):
        """Any invalid attempt rules out a perfect game."""
        tracker = AchievementTracker(MemoryStore())
        tracker.track_game_completed(game(["CAT", "TEA", "EAT", "ONE", "END"], invalid_attempts=1))
        assert tracker.statistics.perfect_games == 0

    def test_time_challenger(self):
        """Ten words in one game unlocks time challenger."""
        tracker = AchievementTracker(MemoryStore())
        tracker.track_game_completed(game(["W"] * 9))
        assert tracker.get(AchievementType.TIME_CHALLENGER).progress == 9
        tracker.track_game_completed(game(["W"] * 10))
        assert tracker.get(AchievementType.TIME_CHALLENGER).unlocked

    def test_total_points(self):
        """Points sum over unlocked achievements."""
        tracker = AchievementTracker(MemoryStore())
        tracker.track_word_found(Word(text="CAT", time_to_find=9.0))
        assert tracker.total_points == 50

    def test_reset(self):
        """Reset locks everything and zeroes statistics."""
        tracker = AchievementTracker(MemoryStore())
        tracker.track_word_found(Word(text="CAT", time_to_find=1.0))
        tracker.reset()
        assert tracker.unlocked == []
        assert tracker.statistics.total_words_found == 0


class TestAchievementPersistence:
    """Round trips through the store."""

    def test_round_trip(self):
        """Achievements and statistics reload from the store."""
        store = MemoryStore()
        AchievementTracker(store).track_word_found(Word(text="CAT", time_to_find=1.0))

        tracker = AchievementTracker(store)
        asyncio.run(tracker.load())
        assert tracker.get(AchievementType.SPEED_DEMON).unlocked
        assert tracker.statistics.total_words_found == 1
        assert tracker.statistics.fastest_word_time == 1.0
        assert tracker.newly_unlocked == []

    def test_missing_data_defaults(self):
        """An empty store yields locked achievements."""
        tracker = AchievementTracker(MemoryStore())
        asyncio.run(tracker.load())
        assert len(tracker.locked) == len(AchievementType)
