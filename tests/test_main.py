"""Tests for the command-line interface."""

import asyncio
import json
import threading
from datetime import date

import pytest
import src.main
from src.config import AppConfig
from src.engine import Difficulty, GameState, PowerUpType
from src.main import handle_command, main, play, render_letters
from src.progress import MemoryStore, ProgressRecorder


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(f"storage_dir: {tmp_path / 'data'}\nlog_level: ERROR\n")
    return path


class TestMain:
    """Subcommands end to end."""

    def test_scores_empty(self, config_file, capsys):
        """Scores prints every difficulty even with no games."""
        assert main(["--config", str(config_file), "scores"]) == 0
        out = capsys.readouterr().out
        assert "=== Easy ===" in out
        assert "(no scores yet)" in out

    def test_buy(self, config_file, tmp_path):
        """Buying spends coins and is saved."""
        assert main(["--config", str(config_file), "buy", "time_freeze"]) == 0
        blob = json.loads((tmp_path / "data" / "powerups_data.json").read_text())
        assert blob["coins"] == 450
        assert blob["quantities"] == {"time_freeze": 1}

    def test_buy_without_coins(self, config_file, tmp_path, capsys):
        """A purchase the balance can't cover fails."""
        data = tmp_path / "data"
        data.mkdir()
        (data / "powerups_data.json").write_text(json.dumps({"coins": 10, "quantities": {}}))
        assert main(["--config", str(config_file), "buy", "xray_vision"]) == 1
        assert "Not enough coins" in capsys.readouterr().err

    def test_challenges_week(self, config_file, capsys):
        """The week view lists seven challenges and the streak."""
        assert main(["--config", str(config_file), "challenges", "--week"]) == 0
        out = capsys.readouterr().out
        assert out.count(" pts, ") == 7
        assert "Streak: 0 days" in out

    def test_stats(self, config_file, capsys):
        """Stats shows totals, achievements and inventory."""
        assert main(["--config", str(config_file), "stats"]) == 0
        out = capsys.readouterr().out
        assert "Games played:  0" in out
        assert "First Word" in out
        assert "Coins: 500" in out

    def test_unusable_storage_dir(self, tmp_path, capsys):
        """A storage path that can't be a directory degrades to defaults."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        path = tmp_path / "config.yaml"
        path.write_text(f"storage_dir: {blocker / 'data'}\nlog_level: ERROR\n")
        assert main(["--config", str(path), "scores"]) == 0
        assert main(["--config", str(path), "buy", "time_freeze"]) == 0
        assert "(no scores yet)" in capsys.readouterr().out

    def test_claim(self, config_file, tmp_path, capsys):
        """Claim credits the daily bonus once per day."""
        assert main(["--config", str(config_file), "claim"]) == 0
        assert "Daily bonus: +100 coins" in capsys.readouterr().out
        assert main(["--config", str(config_file), "claim"]) == 0
        assert "Nothing to claim today." in capsys.readouterr().out
        blob = json.loads((tmp_path / "data" / "powerups_data.json").read_text())
        assert blob["coins"] == 600

    def test_claim_streak_reward(self, config_file, tmp_path, capsys):
        """A challenge completed today pays its streak reward."""
        data = tmp_path / "data"
        data.mkdir()
        (data / "challenge_progress.json").write_text(json.dumps({
            "completed": ["c1"], "progress": {"c1": 5}, "streak": 3,
            "last_completion": date.today().isoformat(),
        }))
        assert main(["--config", str(config_file), "claim"]) == 0
        assert "Streak reward (3 days): +70 coins" in capsys.readouterr().out
        blob = json.loads((data / "powerups_data.json").read_text())
        assert blob["coins"] == 670

    def test_missing_config(self, tmp_path, capsys):
        """A missing config file exits with an error."""
        assert main(["--config", str(tmp_path / "missing.yaml"), "stats"]) == 1
        assert "Error loading config" in capsys.readouterr().err


class TestHandleCommand:
    """One line of player input."""

    def test_word_submission(self, machine, capsys):
        """Plain words are submitted."""
        progress = ProgressRecorder(MemoryStore())
        assert handle_command("cat", machine, progress) is True
        assert machine.session.found_texts == ["CAT"]
        assert "CAT" in capsys.readouterr().out

    def test_rejected_word_clears_input(self, machine):
        """A rejected word leaves a clean input line."""
        progress = ProgressRecorder(MemoryStore())
        handle_command("zzz", machine, progress)
        assert machine.session.current_input == ""
        assert machine.session.invalid_attempts == 1

    def test_quit(self, machine):
        """Quit ends the game."""
        progress = ProgressRecorder(MemoryStore())
        assert handle_command("!quit", machine, progress) is False
        assert machine.session.state == GameState.FINISHED

    def test_power_up_needs_inventory(self, machine, capsys):
        """Power-ups not owned are refused."""
        progress = ProgressRecorder(MemoryStore())
        handle_command("!time", machine, progress)
        assert machine.session.time_remaining == 90
        assert "don't own" in capsys.readouterr().out

    def test_power_up_consumes_inventory(self, machine):
        """An accepted power-up is taken from the inventory."""
        progress = ProgressRecorder(MemoryStore())
        progress.inventory.purchase(PowerUpType.EXTRA_TIME)
        handle_command("!time", machine, progress)
        assert machine.session.time_remaining == 120
        assert progress.inventory.quantity(PowerUpType.EXTRA_TIME) == 0

    def test_pause_resume(self, machine):
        """Pause and resume commands drive the session."""
        progress = ProgressRecorder(MemoryStore())
        handle_command("!pause", machine, progress)
        assert machine.session.state == GameState.PAUSED
        handle_command("!resume", machine, progress)
        assert machine.session.state == GameState.PLAYING

    def test_unknown_command_prints_help(self, machine, capsys):
        """Unknown commands print the help text."""
        progress = ProgressRecorder(MemoryStore())
        handle_command("!dance", machine, progress)
        assert "Commands:" in capsys.readouterr().out


class TestRenderLetters:
    """Tile grid rendering."""

    def test_rows(self, machine):
        """Easy pools render as three rows of three."""
        rows = render_letters(machine.session).splitlines()
        assert rows == ["C  A  T", "E  D  O", "N  R  S"]


class TestPlay:
    """The interactive game loop."""

    def test_cancelled_game_is_recorded(self, tmp_path, monkeypatch):
        """Cancelling play (Ctrl-C) still records the game before re-raising."""
        release = threading.Event()

        def blocking_input(prompt=""):
            release.wait(5)
            raise EOFError

        monkeypatch.setattr(src.main, "input", blocking_input, raising=False)
        config = AppConfig(storage_dir=tmp_path, difficulty=Difficulty.EASY, seed=3)
        progress = ProgressRecorder(MemoryStore())

        async def scenario():
            task = asyncio.create_task(play(config, progress))
            await asyncio.sleep(0.1)
            task.cancel()
            try:
                with pytest.raises(asyncio.CancelledError):
                    await task
            finally:
                release.set()

        asyncio.run(scenario())
        assert progress.statistics.stats.total_games_played == 1
        assert len(progress.high_scores.scores_for(Difficulty.EASY)) == 1

    def test_end_of_input_finishes_game(self, tmp_path, monkeypatch, capsys):
        """Closing stdin ends and records the game normally."""

        def closed_input(prompt=""):
            raise EOFError

        monkeypatch.setattr(src.main, "input", closed_input, raising=False)
        config = AppConfig(storage_dir=tmp_path, difficulty=Difficulty.EASY, seed=3)
        progress = ProgressRecorder(MemoryStore())

        assert asyncio.run(play(config, progress)) == 0
        assert "=== Game Summary ===" in capsys.readouterr().out
        assert progress.statistics.stats.total_games_played == 1
