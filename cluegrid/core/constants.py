"""Shared constants and enumerations for the puzzle engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


MAIN_TARGET = "main"
MAX_GUESSES = 6

GRACE_SAVE_BALANCE = 1
GRACE_SAVE_REFRESH_DAYS = 30

PERFECTIONIST_RUN = 5
HISTORY_PRUNE_FRACTION = 0.2

# Puzzle #1 was published on this date.
PUZZLE_EPOCH = date(2024, 1, 1)


class Direction(str, Enum):
    """Crosser orientation. Only vertical crossers exist."""

    DOWN = "down"


class LetterStatus(str, Enum):
    """Per-letter verdict for a scored guess."""

    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"


class GameStatus(str, Enum):
    """Lifecycle of a single puzzle session."""

    PLAYING = "playing"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.PLAYING


class PuzzleStatus(str, Enum):
    """Publishing state of an authored puzzle."""

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    ARCHIVED = "archived"

    @property
    def is_locked(self) -> bool:
        return self in (PuzzleStatus.PUBLISHED, PuzzleStatus.ARCHIVED)


class RejectReason(str, Enum):
    """Why a guess submission was refused."""

    NOT_PLAYING = "not_playing"
    NO_GUESSES_REMAINING = "no_guesses_remaining"
    NOT_ENOUGH_LETTERS = "not_enough_letters"
    ALREADY_SOLVED = "already_solved"
    NOT_IN_WORD_LIST = "not_in_word_list"


REJECT_MESSAGES = {
    RejectReason.NOT_PLAYING: "Game over",
    RejectReason.NO_GUESSES_REMAINING: "No guesses remaining",
    RejectReason.NOT_ENOUGH_LETTERS: "Not enough letters",
    RejectReason.ALREADY_SOLVED: "Already solved",
    RejectReason.NOT_IN_WORD_LIST: "Not in word list",
}


class BadgeId(str, Enum):
    """Identifiers of every badge a player can earn."""

    FIRST_WIN = "first_win"
    GENIUS = "genius"
    QUICK_THINKER = "quick_thinker"
    HINT_MASTER = "hint_master"
    STREAK_3 = "streak_3"
    STREAK_7 = "streak_7"
    STREAK_30 = "streak_30"
    CENTURY = "century"
    PERFECTIONIST = "perfectionist"


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols
