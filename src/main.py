"""
Main entry point for the word-finding game.

Usage:
    python -m src.main play --difficulty easy
    python -m src.main play --challenge --config config.yaml
    python -m src.main scores
    python -m src.main challenges --week
    python -m src.main stats
    python -m src.main buy time_freeze
    python -m src.main claim
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import Optional

from .config import AppConfig, load_config
from .engine import (
    Difficulty,
    EventQueue,
    EventType,
    GameSession,
    PowerUpType,
    POWER_UP_CONFIGS,
    SessionClock,
    SessionStateMachine,
)
from .progress import (
    DailyChallenge,
    JsonFileStore,
    ProgressRecorder,
    generate_for_date,
    generate_week,
    settings_for,
)
from .words import Dictionary, LetterPoolGenerator, WordValidator

logger = logging.getLogger(__name__)

GAME_HELP = """Type a word and press Enter to submit it.
Commands:
  !shuffle | !hint | !freeze | !time | !double | !boost | !clear | !xray   use a power-up
  !pause   | !resume | !quit
"""

POWER_UP_COMMANDS = {
    "!freeze": PowerUpType.TIME_FREEZE,
    "!time": PowerUpType.EXTRA_TIME,
    "!hint": PowerUpType.WORD_HINT,
    "!shuffle": PowerUpType.LETTER_SHUFFLE,
    "!double": PowerUpType.DOUBLE_POINTS,
    "!boost": PowerUpType.COMBO_BOOST,
    "!clear": PowerUpType.CLEAR_MISTAKES,
    "!xray": PowerUpType.XRAY_VISION,
}


def build_machine(config: AppConfig) -> SessionStateMachine:
    """Wire a state machine from the configuration."""
    dictionary = Dictionary.load(config.dictionary_path)
    validator = WordValidator(dictionary)
    generator = LetterPoolGenerator(
        validator,
        min_solutions=config.min_solutions,
        max_attempts=config.max_attempts,
        seed=config.seed,
    )
    return SessionStateMachine(
        settings=config.game_settings(),
        validator=validator,
        generator=generator,
        events=EventQueue(),
    )


def render_letters(session: GameSession) -> str:
    columns = session.difficulty.grid_columns
    rows = [
        "  ".join(session.letters[i:i + columns])
        for i in range(0, len(session.letters), columns)
    ]
    return "\n".join(rows)


def print_events(machine: SessionStateMachine) -> None:
    for event in machine.events.drain():
        if event.type == EventType.COMBO_LEVEL_UP:
            print(f"  Combo level {event.data['level']} ({event.data['multiplier']:.2f}x)")
        elif event.type == EventType.ACHIEVEMENT_UNLOCKED:
            print(f"  Achievement unlocked: {event.data['achievement']} (+{event.data['points']})")
        elif event.type == EventType.POWER_UP_EXPIRED:
            print(f"  {event.data['power_up']} wore off")
        elif event.type == EventType.LETTERS_SHUFFLED:
            print(render_letters(machine.session))


def handle_command(line: str, machine: SessionStateMachine, progress: ProgressRecorder) -> bool:
    """
    Apply one line of player input.

    Returns:
        False when the player asked to quit
    """
    command = line.strip().lower()
    if not command:
        return True

    if command == "!quit":
        machine.end_game()
        return False
    if command == "!pause":
        machine.pause()
        print("Paused. Type !resume to continue.")
        return True
    if command == "!resume":
        machine.resume()
        print(render_letters(machine.session))
        return True
    if command in POWER_UP_COMMANDS:
        power_up = POWER_UP_COMMANDS[command]
        if progress.inventory.quantity(power_up) <= 0:
            print(f"  You don't own any {POWER_UP_CONFIGS[power_up].name}")
            return True
        activation = machine.activate_power_up(power_up)
        if activation.accepted:
            progress.inventory.use(power_up)
        print(f"  {activation.message}")
        if activation.hints and power_up == PowerUpType.XRAY_VISION:
            print("  " + ", ".join(activation.hints))
        return True
    if command.startswith("!"):
        print(GAME_HELP)
        return True

    machine.set_input(command)
    result = machine.submit_word()
    if result.success:
        print(f"  {result.word.text}: {result.message} [{machine.session.time_remaining}s left]")
    else:
        print(f"  {result.message}")
        machine.clear_selection()
    return True


async def play(
    config: AppConfig,
    progress: ProgressRecorder,
    challenge: Optional[DailyChallenge] = None,
) -> int:
    machine = build_machine(config)
    settings = progress.settings.settings.model_copy(update={
        "difficulty": config.difficulty,
        "player_name": config.player_name,
        "score_time_bonus": config.score_time_bonus,
    })
    if challenge is not None:
        settings = settings_for(challenge, settings)
        print(f"Daily challenge: {challenge.title} - {challenge.description}")

    clock = SessionClock(machine)
    progress.watch(machine)
    session = machine.start(settings)
    await clock.start()

    print(GAME_HELP)
    print(f"{session.difficulty.display_name}: {session.time_remaining} seconds, "
          f"words of {session.difficulty.min_word_length}+ letters")
    print(render_letters(session))

    loop = asyncio.get_running_loop()
    interrupted = False
    try:
        while machine.session.is_active:
            line = await loop.run_in_executor(None, input, "> ")
            if machine.session.is_finished:
                break
            if not handle_command(line, machine, progress):
                break
            print_events(machine)
    except (EOFError, KeyboardInterrupt):
        machine.end_game()
    except asyncio.CancelledError:
        # Ctrl-C under asyncio.run cancels this task
        logger.info("Game interrupted, recording session %s", machine.session.id)
        machine.end_game()
        interrupted = True
    finally:
        await clock.stop()

    session = machine.session
    report = progress.record(session, challenge)
    print_events(machine)
    await progress.flush()

    print()
    print("=== Game Summary ===")
    print(f"Score: {session.total_score}")
    print(f"Words: {len(session.found_words)}")
    if session.longest_word:
        print(f"Longest word: {session.longest_word.text}")
    if session.found_words:
        print("By length: " + ", ".join(
            f"{length} letters x{len(words)}"
            for length, words in sorted(session.words_by_length.items())
        ))
    if report.high_score:
        print("New high score!")
    for achievement in report.achievements:
        print(f"Achievement: {achievement.type.display_name} (+{achievement.type.points})")
    if report.challenge_completed:
        print(f"Challenge complete! Streak: {progress.challenges.streak} days")
    print(f"Coins earned: {report.coins_awarded} (balance {progress.inventory.coins})")
    if interrupted:
        raise asyncio.CancelledError
    return 0


def show_scores(progress: ProgressRecorder, difficulty: Optional[Difficulty]) -> int:
    difficulties = [difficulty] if difficulty else list(Difficulty)
    for d in difficulties:
        print(f"=== {d.display_name} ===")
        scores = progress.high_scores.scores_for(d)
        if not scores:
            print("  (no scores yet)")
        for rank, entry in enumerate(scores, 1):
            print(f"  {rank:2}. {entry.player_name:<16} {entry.score:>6}  "
                  f"{entry.words_found} words  {entry.longest_word}")
    return 0


def show_challenges(progress: ProgressRecorder, week: bool) -> int:
    today = date.today()
    challenges = generate_week(today) if week else [generate_for_date(today)]
    for challenge in challenges:
        status = "done" if progress.challenges.is_completed(challenge.id) else (
            f"{progress.challenges.completion_percentage(challenge):.0%}"
        )
        print(f"{challenge.date.isoformat()}  {challenge.title:<18} {challenge.description} "
              f"[{challenge.reward_points} pts, {status}]")
    print(f"Streak: {progress.challenges.streak} days")
    if progress.challenges.can_claim_daily_reward(today):
        print(f"Streak reward available: {progress.challenges.streak_reward_coins()} coins "
              f"(run `claim`)")
    return 0


def show_stats(progress: ProgressRecorder) -> int:
    stats = progress.statistics.stats
    print("=== Statistics ===")
    print(f"Games played:  {stats.total_games_played}")
    print(f"Words found:   {stats.total_words_found}")
    print(f"Total score:   {stats.total_score}")
    print(f"Average score: {stats.average_score:.1f}")
    print(f"Best score:    {stats.best_score}")
    print(f"Longest word:  {stats.longest_word or '-'}")
    print()
    print("=== Achievements ===")
    for achievement in progress.achievements.achievements.values():
        mark = "x" if achievement.unlocked else " "
        print(f"  [{mark}] {achievement.type.display_name:<16} "
              f"{achievement.progress}/{achievement.target}  {achievement.type.description}")
    print(f"Achievement points: {progress.achievements.total_points}")
    print()
    print(f"Coins: {progress.inventory.coins}")
    for power_up, config in POWER_UP_CONFIGS.items():
        print(f"  {config.name:<15} x{progress.inventory.quantity(power_up)}  ({config.cost} coins)")
    return 0


async def claim(progress: ProgressRecorder) -> int:
    today = date.today()
    bonus = progress.inventory.claim_daily_bonus(today)
    reward = progress.challenges.claim_daily_reward(today)
    if reward:
        progress.inventory.add_coins(reward)
    await progress.flush()

    if not bonus and not reward:
        print("Nothing to claim today.")
        return 0
    if bonus:
        print(f"Daily bonus: +{bonus} coins")
    if reward:
        print(f"Streak reward ({progress.challenges.streak} days): +{reward} coins")
    print(f"Coins: {progress.inventory.coins}")
    return 0


async def buy(progress: ProgressRecorder, power_up: PowerUpType) -> int:
    config = POWER_UP_CONFIGS[power_up]
    if not progress.inventory.purchase(power_up):
        print(f"Not enough coins for {config.name} ({config.cost} needed, "
              f"{progress.inventory.coins} available)", file=sys.stderr)
        return 1
    await progress.flush()
    print(f"Bought {config.name}. Coins left: {progress.inventory.coins}")
    return 0


async def run(args: argparse.Namespace, config: AppConfig) -> int:
    progress = ProgressRecorder(JsonFileStore(config.storage_dir))
    await progress.load()

    if args.command == "play":
        if args.difficulty:
            config = config.model_copy(update={"difficulty": Difficulty(args.difficulty)})
        if args.name:
            config = config.model_copy(update={"player_name": args.name})
        challenge = generate_for_date(date.today()) if args.challenge else None
        return await play(config, progress, challenge)
    if args.command == "scores":
        return show_scores(progress, Difficulty(args.difficulty) if args.difficulty else None)
    if args.command == "challenges":
        return show_challenges(progress, args.week)
    if args.command == "stats":
        return show_stats(progress)
    if args.command == "buy":
        return await buy(progress, PowerUpType(args.power_up))
    if args.command == "claim":
        return await claim(progress)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Timed letter-tile word-finding game",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example config.yaml:
  storage_dir: data
  log_level: INFO
  difficulty: medium
  player_name: Ada
  score_time_bonus: true   # each word adds its score to the timer, in seconds
        """
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to YAML configuration file"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    difficulties = [d.value for d in Difficulty]

    play_parser = subparsers.add_parser("play", help="Play a game")
    play_parser.add_argument("--difficulty", "-d", choices=difficulties)
    play_parser.add_argument("--name", "-n", help="Player name")
    play_parser.add_argument(
        "--challenge",
        action="store_true",
        help="Play today's daily challenge"
    )

    scores_parser = subparsers.add_parser("scores", help="Show high scores")
    scores_parser.add_argument("--difficulty", "-d", choices=difficulties)

    challenges_parser = subparsers.add_parser("challenges", help="Show daily challenges")
    challenges_parser.add_argument(
        "--week",
        action="store_true",
        help="Show the next seven days"
    )

    subparsers.add_parser("stats", help="Show statistics, achievements and inventory")

    buy_parser = subparsers.add_parser("buy", help="Buy a power-up with coins")
    buy_parser.add_argument("power_up", choices=[p.value for p in PowerUpType])

    subparsers.add_parser("claim", help="Claim the daily bonus and any streak reward")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(run(args, config))
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
