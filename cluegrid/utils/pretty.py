"""Pretty-print helpers for puzzles, sessions and statistics."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Dict, Tuple

from ..core.constants import MAIN_TARGET, MAX_GUESSES, PUZZLE_EPOCH, GameStatus, LetterStatus

if TYPE_CHECKING:
    from ..core.models import GameStats, Puzzle, SessionState


EMOJI = {
    LetterStatus.CORRECT: "\U0001F7E9",
    LetterStatus.PRESENT: "\U0001F7E8",
    LetterStatus.ABSENT: "⬛",
}


def _visible_letters(puzzle: Puzzle, state: SessionState | None, reveal_all: bool) -> Dict[Tuple[int, int], str]:
    cells: Dict[Tuple[int, int], str] = {}
    solved = state.solved if state else frozenset()
    main = puzzle.main_word

    for crosser in puzzle.crossers:
        shown = reveal_all or crosser.id in solved
        for index, cell in enumerate(crosser.cells):
            cells[cell] = crosser.word[index] if shown else "."

    main_shown = reveal_all or MAIN_TARGET in solved
    for offset, cell in enumerate(main.cells):
        cells[cell] = main.text[offset] if main_shown else "_"
    if state and not main_shown:
        for letter in state.revealed:
            cells[(letter.row, letter.col)] = letter.letter
    return cells


def format_board(puzzle: Puzzle, state: SessionState | None = None, *, reveal_all: bool = False) -> str:
    """Render the grid; unsolved crossers are dots, hidden main letters underscores."""
    cells = _visible_letters(puzzle, state, reveal_all)
    header_cells = [f"{c:>2}" for c in range(puzzle.cols)]
    lines = ["    " + " ".join(header_cells)]
    lines.append("    " + "-" * (3 * puzzle.cols - 1))
    for r in range(puzzle.rows):
        row_cells = [cells.get((r, c), " ") for c in range(puzzle.cols)]
        row_render = " ".join(f"{symbol:>2}" for symbol in row_cells)
        marker = " <" if r == puzzle.main_word.row else ""
        lines.append(f"{r:>2} | {row_render}{marker}")
    return "\n".join(lines)


def puzzle_number(puzzle_date: str) -> int:
    """Days since the first puzzle, counting from 1."""
    try:
        return (date.fromisoformat(puzzle_date) - PUZZLE_EPOCH).days + 1
    except ValueError:
        return 0


def generate_share_text(puzzle: Puzzle, state: SessionState) -> str:
    """Spoiler-free summary: score line, emoji rows for main guesses, crossers solved."""
    won = state.status == GameStatus.WON
    score = f"{state.main_guess_count}/{MAX_GUESSES}" if won else f"X/{MAX_GUESSES}"
    rows = [
        "".join(EMOJI[item.status] for item in guess.feedback)
        for guess in state.guesses
        if guess.target_id == MAIN_TARGET
    ]
    crossers_solved = sum(1 for crosser in puzzle.crossers if crosser.id in state.solved)
    lines = [
        f"Cluegrid #{puzzle_number(puzzle.date)} {score}",
        "",
        *rows,
        "",
        f"Crossers: {crossers_solved}/{len(puzzle.crossers)}",
    ]
    return "\n".join(lines)


def format_stats(stats: GameStats) -> str:
    win_pct = round(100 * stats.games_won / stats.games_played) if stats.games_played else 0
    top = max(stats.guess_distribution.values(), default=0) or 1
    lines = [
        f"Played: {stats.games_played}  Win %: {win_pct}  "
        f"Streak: {stats.current_streak}  Max: {stats.max_streak}",
        f"Grace saves: {stats.grace_saves_available}"
        + ("  (streak saved by grace)" if stats.streak_saved_by_grace else ""),
        "Guess distribution:",
    ]
    for bucket in range(1, MAX_GUESSES + 1):
        count = stats.guess_distribution.get(bucket, 0)
        bar = "#" * max(1, round(20 * count / top)) if count else ""
        lines.append(f"  {bucket} | {bar} {count}")
    if stats.badges:
        lines.append("Badges: " + ", ".join(badge.name for badge in stats.badges))
    return "\n".join(lines)

