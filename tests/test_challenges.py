"""Tests for daily challenges and streaks."""

import asyncio
from datetime import date, datetime, timedelta

import pytest
from src.engine import GameSession, GameSettings, GameState, Word
from src.progress import (
    ChallengeTracker,
    ChallengeType,
    DailyChallenge,
    MemoryStore,
    generate_for_date,
    generate_week,
    settings_for,
)
from src.progress.challenges import evaluate

DAY = date(2024, 3, 5)


def challenge(challenge_id="c1", target=2, challenge_type=ChallengeType.WORD_COUNT, **parameters):
    return DailyChallenge(
        id=challenge_id,
        type=challenge_type,
        title="Test",
        description="Test challenge",
        parameters=parameters,
        target=target,
        reward_points=10,
        date=DAY,
    )


def challenge_session(challenge_id, words, **fields):
    time_to_find = fields.pop("time_to_find", 4.0)
    settings = GameSettings(is_challenge_mode=True, challenge_id=challenge_id, target_words=len(words))
    return GameSession(
        settings=settings,
        found_words=[Word(text=w, score=10, time_to_find=time_to_find) for w in words],
        state=GameState.FINISHED,
        **fields,
    )


class TestGeneration:
    """Date-seeded challenge generation."""

    def test_same_date_same_challenge(self):
        """Generation is deterministic per date."""
        assert generate_for_date(DAY) == generate_for_date(DAY)

    def test_datetime_truncated(self):
        """A datetime generates the challenge of its date."""
        assert generate_for_date(datetime(2024, 3, 5, 23, 59)) == generate_for_date(DAY)

    def test_id_and_fields(self):
        """Challenges carry an id derived from the date and a positive target."""
        c = generate_for_date(DAY)
        assert c.id == "daily_2024_3_5"
        assert c.date == DAY
        assert c.target >= 1
        assert c.reward_points > 0

    def test_week(self):
        """A week is seven consecutive daily challenges."""
        week = generate_week(DAY)
        assert [c.date for c in week] == [DAY + timedelta(days=i) for i in range(7)]
        assert len({c.id for c in week}) == 7

    def test_all_types_reachable(self):
        """Every challenge type appears over a year of dates."""
        seen = {generate_for_date(DAY + timedelta(days=i)).type for i in range(365)}
        assert seen == set(ChallengeType)

    def test_settings_for(self):
        """Challenge settings enable challenge mode and keep the player name."""
        c = challenge(target=5, challenge_type=ChallengeType.TIME_LIMIT, time_limit=60)
        settings = settings_for(c, GameSettings(player_name="Ada"))
        assert settings.is_challenge_mode is True
        assert settings.challenge_id == "c1"
        assert settings.target_words == 5
        assert settings.time_limit == 60
        assert settings.player_name == "Ada"


class TestEvaluate:
    """Per-type progress rules."""

    def test_long_words(self):
        """Only words at the minimum length count."""
        c = challenge(challenge_type=ChallengeType.LONG_WORDS, min_length=6)
        session = challenge_session("c1", ["CAT", "STONES", "GARDENS"])
        assert evaluate(c, session) == 2

    def test_no_hints(self):
        """Using a hint zeroes no-hints progress."""
        c = challenge(challenge_type=ChallengeType.NO_HINTS)
        assert evaluate(c, challenge_session("c1", ["CAT", "TEA"])) == 2
        assert evaluate(c, challenge_session("c1", ["CAT", "TEA"], hints_used=1)) == 0

    def test_speed_run(self):
        """Speed runs count words found within the time per word."""
        c = challenge(challenge_type=ChallengeType.SPEED_RUN, max_time_per_word=3.0)
        assert evaluate(c, challenge_session("c1", ["CAT"], time_to_find=2.0)) == 1
        assert evaluate(c, challenge_session("c1", ["CAT"], time_to_find=4.0)) == 0

    def test_theme_words(self):
        """Theme challenges count words from the theme list."""
        c = challenge(challenge_type=ChallengeType.THEME_WORDS, theme="ANIMALS")
        assert evaluate(c, challenge_session("c1", ["CAT", "DOG", "TEA"])) == 2


class TestStreak:
    """Completion and daily streak bookkeeping."""

    def test_first_completion(self):
        """The first completion starts a streak of one."""
        tracker = ChallengeTracker(MemoryStore())
        assert tracker.update_progress(challenge_session("c1", ["CAT", "TEA"]), challenge(), today=DAY)
        assert tracker.is_completed("c1")
        assert tracker.streak == 1
        assert tracker.progress_for("c1") == 2

    def test_completion_counted_once(self):
        """Completing the same challenge again reports nothing new."""
        tracker = ChallengeTracker(MemoryStore())
        tracker.update_progress(challenge_session("c1", ["CAT", "TEA"]), challenge(), today=DAY)
        assert not tracker.update_progress(challenge_session("c1", ["CAT", "TEA"]), challenge(), today=DAY)
        assert tracker.streak == 1

    @pytest.mark.parametrize("gap,expected", [(0, 1), (1, 2), (3, 1)])
    def test_streak_rules(self, gap, expected):
        """Consecutive days extend, same day holds, gaps reset."""
        tracker = ChallengeTracker(MemoryStore())
        tracker.update_progress(challenge_session("c1", ["CAT", "TEA"]), challenge("c1"), today=DAY)
        tracker.update_progress(
            challenge_session("c2", ["CAT", "TEA"]), challenge("c2"), today=DAY + timedelta(days=gap)
        )
        assert tracker.streak == expected

    def test_incomplete_progress(self):
        """Falling short records progress without completion."""
        tracker = ChallengeTracker(MemoryStore())
        c = challenge(target=4)
        assert not tracker.update_progress(challenge_session("c1", ["CAT"]), c, today=DAY)
        assert tracker.completion_percentage(c) == 0.25
        assert tracker.streak == 0

    def test_target_score_without_challenge(self):
        """Without a challenge object the settings' targets decide."""
        tracker = ChallengeTracker(MemoryStore())
        session = GameSession(
            settings=GameSettings(is_challenge_mode=True, challenge_id="c9", target_score=15),
            found_words=[Word(text="CAT", score=10), Word(text="TEA", score=10)],
            state=GameState.FINISHED,
        )
        assert tracker.update_progress(session, today=DAY)
        assert tracker.progress_for("c9") == 20

    def test_regular_games_ignored(self):
        """Sessions outside challenge mode don't count."""
        tracker = ChallengeTracker(MemoryStore())
        session = GameSession(found_words=[Word(text="CAT")], state=GameState.FINISHED)
        assert tracker.update_progress(session, challenge(), today=DAY) is False

    def test_rewards(self):
        """Rewards grow per streak day and cap the bonus."""
        tracker = ChallengeTracker(MemoryStore())
        assert tracker.streak_reward_coins() == 0
        tracker.update_progress(challenge_session("c1", ["CAT", "TEA"]), challenge(), today=DAY)
        assert tracker.streak_reward_coins() == 50
        assert tracker.can_claim_daily_reward(DAY)
        assert not tracker.can_claim_daily_reward(DAY + timedelta(days=1))
        tracker.streak = 30
        assert tracker.streak_reward_coins() == 250

    def test_round_trip(self):
        """Streak state reloads from the store."""
        store = MemoryStore()
        ChallengeTracker(store).update_progress(
            challenge_session("c1", ["CAT", "TEA"]), challenge(), today=DAY
        )
        tracker = ChallengeTracker(store)
        asyncio.run(tracker.load())
        assert tracker.is_completed("c1")
        assert tracker.last_completion == DAY
        assert tracker.streak == 1

    def test_claim_reward_once_per_day(self):
        """The streak reward pays once per completion day and survives reloads."""
        store = MemoryStore()
        tracker = ChallengeTracker(store)
        assert tracker.claim_daily_reward(DAY) == 0
        tracker.update_progress(challenge_session("c1", ["CAT", "TEA"]), challenge(), today=DAY)
        assert tracker.claim_daily_reward(DAY) == 50
        assert tracker.claim_daily_reward(DAY) == 0
        assert not tracker.can_claim_daily_reward(DAY)

        reloaded = ChallengeTracker(store)
        asyncio.run(reloaded.load())
        assert reloaded.last_reward_claim == DAY
        assert reloaded.claim_daily_reward(DAY) == 0
