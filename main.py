"""CLI entrypoint for the Cluegrid daily puzzle engine."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Callable, List

from cluegrid.core.constants import MAIN_TARGET, GameStatus
from cluegrid.core.exceptions import PuzzleLoadError, WordListLoadError
from cluegrid.data.word_list import WordList
from cluegrid.engine.game import GameController
from cluegrid.engine.geometry import validate_puzzle
from cluegrid.engine.stats import StatsTracker
from cluegrid.io.puzzle_client import PuzzleClient, load_puzzle_file
from cluegrid.io.session_store import SessionStore
from cluegrid.io.stats_store import DEFAULT_PLAYER, StatsStore
from cluegrid.io.storage import DEFAULT_STORE_DIR, JsonFileStorage
from cluegrid.utils.logger import configure_logging
from cluegrid.utils.pretty import format_board, format_stats, generate_share_text


PLAY_HELP = (
    "Type a word to guess the selected target. Commands: "
    ":select <id>, :main, :reset, :help, :quit"
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play and validate Cluegrid puzzles")
    parser.add_argument(
        "--store-dir",
        type=Path,
        default=DEFAULT_STORE_DIR,
        help="Directory holding session and statistics documents",
    )
    parser.add_argument("--player", type=str, default=DEFAULT_PLAYER, help="Player id for statistics")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Check a puzzle file's geometry")
    validate.add_argument("puzzle", type=Path, help="Puzzle JSON file")

    play = sub.add_parser("play", help="Play a puzzle in the terminal")
    source = play.add_mutually_exclusive_group(required=True)
    source.add_argument("--puzzle", type=Path, help="Puzzle JSON file")
    source.add_argument("--date", type=str, help="Fetch the puzzle for YYYY-MM-DD from the API")
    play.add_argument("--api-url", type=str, help="Puzzle API base URL (default: $CLUEGRID_API_URL)")
    play.add_argument("--word-list", type=Path, help="Accepted guesses, one word per line")

    sub.add_parser("stats", help="Show player statistics")
    sub.add_parser("grace-save", help="Spend a grace save to keep a paused streak")
    return parser


def run_validate(path: Path) -> int:
    try:
        puzzle = load_puzzle_file(path)
    except PuzzleLoadError as exc:
        print(f"error: {exc}")
        return 2
    report = validate_puzzle(puzzle)
    print(json.dumps({"valid": report.valid, "errors": report.errors, "warnings": report.warnings}, indent=2))
    return 0 if report.valid else 1


def run_play(controller: GameController, read: Callable[[str], str] = input) -> int:
    session = controller.session
    if session is None:
        print(f"error: {controller.error or 'no puzzle loaded'}")
        return 2
    puzzle = session.puzzle
    print(PLAY_HELP)
    for badge in controller.pending_badges:
        print(f"Badge earned: {badge.name}")

    while True:
        print(format_board(puzzle, session.state))
        if session.status != GameStatus.PLAYING:
            break
        for crosser in puzzle.crossers:
            mark = "x" if crosser.id in session.state.solved else " "
            print(f"  [{mark}] {crosser.id}: {crosser.clue} ({crosser.length})")
        prompt = f"{session.selected_target} ({session.target_length} letters, {session.guesses_remaining} left)> "
        try:
            line = read(prompt).strip()
        except EOFError:
            return 0

        if line in (":quit", ":q"):
            return 0
        if line == ":help":
            print(PLAY_HELP)
            continue
        if line == ":reset":
            controller.reset()
            continue
        if line == ":main" or line.startswith(":select"):
            target = MAIN_TARGET if line == ":main" else line.partition(" ")[2].strip()
            if not session.select_target(target):
                print(f"Cannot select {target!r}")
            continue

        session.current_guess = ""
        for letter in line:
            session.append_letter(letter)
        outcome = session.submit_guess()
        if not outcome.accepted:
            print(outcome.message)
            continue
        if outcome.revealed:
            print(f"Revealed {outcome.revealed.letter} at column {outcome.revealed.col}")
        for badge in outcome.badges:
            print(f"Badge earned: {badge.name}")

    print("Solved!" if session.status == GameStatus.WON else f"Out of guesses. It was {puzzle.main_word.text}.")
    print(generate_share_text(puzzle, session.state))
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "validate":
        return run_validate(args.puzzle)

    backend = JsonFileStorage(args.store_dir)
    stats = StatsTracker(StatsStore(backend, player_id=args.player))

    if args.command == "stats":
        print(format_stats(stats.stats))
        if stats.is_streak_paused():
            print("Your streak is paused. Run 'grace-save' to keep it.")
        return 0

    if args.command == "grace-save":
        if stats.use_grace_save():
            print(f"Streak of {stats.stats.current_streak} saved.")
            return 0
        print("No grace save available.")
        return 1

    word_list = None
    if args.word_list:
        try:
            word_list = WordList.from_file(args.word_list)
        except WordListLoadError as exc:
            print(f"error: {exc}")
            return 2

    controller = GameController(SessionStore(backend), stats, word_validator=word_list)
    try:
        if args.puzzle:
            loaded = controller.load(puzzle=load_puzzle_file(args.puzzle))
        else:
            controller.client = PuzzleClient(base_url=args.api_url)
            loaded = controller.load(date=args.date)
    except PuzzleLoadError as exc:
        print(f"error: {exc}")
        return 2
    if not loaded:
        print(f"error: {controller.error}")
        return 2
    for warning in controller.warnings:
        print(f"warning: {warning}")
    return run_play(controller)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
