"""Data models shared by the geometry, session and statistics engines."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .constants import (
    GRACE_SAVE_BALANCE,
    MAIN_TARGET,
    MAX_GUESSES,
    Direction,
    GameStatus,
    LetterStatus,
    PuzzleStatus,
)
from .exceptions import PuzzleLockedError


def _pick(payload: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, accepting both wire and snake_case names."""
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _mapping(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be an object, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class MainWord:
    """The horizontal answer word. ``length`` always follows ``text``."""

    text: str
    row: int
    col: int

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def cells(self) -> List[Tuple[int, int]]:
        return [(self.row, self.col + i) for i in range(self.length)]


@dataclass(frozen=True)
class Crosser:
    """A vertical clue word passing through the main word row."""

    id: str
    word: str
    clue: str
    start_row: int
    start_col: int
    intersection_index: int
    direction: Direction = Direction.DOWN

    @property
    def length(self) -> int:
        return len(self.word)

    @property
    def cells(self) -> List[Tuple[int, int]]:
        return [(self.start_row + i, self.start_col) for i in range(self.length)]

    @property
    def intersection_letter(self) -> Optional[str]:
        if 0 <= self.intersection_index < self.length:
            return self.word[self.intersection_index]
        return None

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "word": self.word,
            "clue": self.clue,
            "direction": self.direction.value,
            "startRow": self.start_row,
            "startCol": self.start_col,
            "intersectionIndex": self.intersection_index,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Crosser":
        payload = _mapping(payload, "crosser")
        position = _mapping(payload.get("startPosition") or {}, "startPosition")
        return cls(
            id=str(payload["id"]),
            word=str(payload["word"]).strip().upper(),
            clue=str(payload.get("clue", "")),
            start_row=int(_pick(payload, "startRow", "start_row", default=position.get("row"))),
            start_col=int(_pick(payload, "startCol", "start_col", default=position.get("col"))),
            intersection_index=int(_pick(payload, "intersectionIndex", "intersection_index")),
        )


@dataclass
class Puzzle:
    """A daily puzzle: one main word and its ordered crossers."""

    id: str
    date: str
    main_word: MainWord
    rows: int
    cols: int
    crossers: List[Crosser] = field(default_factory=list)
    theme: Optional[str] = None
    theme_hint: Optional[str] = None
    status: PuzzleStatus = PuzzleStatus.PUBLISHED

    def crosser(self, crosser_id: str) -> Optional[Crosser]:
        for crosser in self.crossers:
            if crosser.id == crosser_id:
                return crosser
        return None

    def target_word(self, target_id: str) -> Optional[str]:
        if target_id == MAIN_TARGET:
            return self.main_word.text
        crosser = self.crosser(target_id)
        return crosser.word if crosser else None

    def replace_crosser(self, crosser_id: str, **changes: Any) -> Crosser:
        """Swap a crosser for an edited copy. Only drafts may be edited."""
        if self.status.is_locked:
            raise PuzzleLockedError(
                f"Puzzle {self.id} is {self.status.value}; crossers are immutable"
            )
        for index, crosser in enumerate(self.crossers):
            if crosser.id == crosser_id:
                updated = dataclasses.replace(crosser, **changes)
                self.crossers[index] = updated
                return updated
        raise KeyError(crosser_id)

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "status": self.status.value,
            "mainWord": {
                "word": self.main_word.text,
                "row": self.main_word.row,
                "col": self.main_word.col,
                "length": self.main_word.length,
            },
            "gridSize": {"rows": self.rows, "cols": self.cols},
            "crossers": [crosser.to_jsonable() for crosser in self.crossers],
            "theme": self.theme,
            "themeHint": self.theme_hint,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Puzzle":
        raw_main = _pick(payload, "mainWord", "main_word")
        if isinstance(raw_main, dict):
            main_word = MainWord(
                text=str(raw_main["word"]).strip().upper(),
                row=int(raw_main["row"]),
                col=int(raw_main.get("col", 0)),
            )
        else:
            main_word = MainWord(
                text=str(raw_main).strip().upper(),
                row=int(_pick(payload, "mainWordRow", "main_word_row")),
                col=int(_pick(payload, "mainWordCol", "main_word_col", default=0)),
            )
        grid = _mapping(payload.get("gridSize") or {}, "gridSize")
        return cls(
            id=str(payload["id"]),
            date=str(payload["date"]),
            main_word=main_word,
            rows=int(_pick(payload, "gridRows", "rows", default=grid.get("rows"))),
            cols=int(_pick(payload, "gridCols", "cols", default=grid.get("cols"))),
            crossers=[Crosser.from_dict(item) for item in payload.get("crossers", [])],
            theme=payload.get("theme"),
            theme_hint=_pick(payload, "themeHint", "theme_hint"),
            status=PuzzleStatus(payload.get("status", PuzzleStatus.PUBLISHED.value)),
        )


@dataclass(frozen=True)
class LetterFeedback:
    letter: str
    status: LetterStatus


@dataclass(frozen=True)
class Guess:
    """A submitted word and its score. Never edited once appended."""

    word: str
    target_id: str
    feedback: Tuple[LetterFeedback, ...]
    timestamp: float = 0.0

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "targetId": self.target_id,
            "feedback": [
                {"letter": item.letter, "status": item.status.value} for item in self.feedback
            ],
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Guess":
        return cls(
            word=payload["word"],
            target_id=_pick(payload, "targetId", "target_id"),
            feedback=tuple(
                LetterFeedback(letter=item["letter"], status=LetterStatus(item["status"]))
                for item in payload.get("feedback", [])
            ),
            timestamp=float(payload.get("timestamp", 0.0)),
        )


@dataclass(frozen=True)
class RevealedLetter:
    """A main-word letter uncovered by solving a crosser."""

    row: int
    col: int
    letter: str
    source: Optional[str] = None

    def to_jsonable(self) -> Dict[str, Any]:
        return {"row": self.row, "col": self.col, "letter": self.letter, "source": self.source}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RevealedLetter":
        return cls(
            row=int(payload["row"]),
            col=int(payload["col"]),
            letter=payload["letter"],
            source=payload.get("source"),
        )


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of one player's progress on one puzzle.

    Every transition produces a new snapshot via ``dataclasses.replace`` so the
    solved set and history are never mutated in place.
    """

    puzzle_id: str
    guesses: Tuple[Guess, ...] = ()
    solved: FrozenSet[str] = frozenset()
    revealed: Tuple[RevealedLetter, ...] = ()
    status: GameStatus = GameStatus.PLAYING
    selected_target: str = MAIN_TARGET
    stats_recorded: bool = False
    hints_used: int = 0
    main_guess_count: int = 0

    @property
    def guesses_remaining(self) -> int:
        return max(0, MAX_GUESSES - self.main_guess_count)

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "puzzleId": self.puzzle_id,
            "guesses": [guess.to_jsonable() for guess in self.guesses],
            "solvedWords": sorted(self.solved),
            "revealedLetters": [letter.to_jsonable() for letter in self.revealed],
            "status": self.status.value,
            "selectedTarget": self.selected_target,
            "statsRecorded": self.stats_recorded,
            "hintsUsed": self.hints_used,
            "mainGuessCount": self.main_guess_count,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SessionState":
        return cls(
            puzzle_id=str(payload["puzzleId"]),
            guesses=tuple(Guess.from_dict(item) for item in payload.get("guesses", [])),
            solved=frozenset(payload.get("solvedWords", [])),
            revealed=tuple(
                RevealedLetter.from_dict(item) for item in payload.get("revealedLetters", [])
            ),
            status=GameStatus(payload.get("status", GameStatus.PLAYING.value)),
            selected_target=payload.get("selectedTarget") or MAIN_TARGET,
            stats_recorded=bool(payload.get("statsRecorded", False)),
            hints_used=int(payload.get("hintsUsed", 0)),
            main_guess_count=int(payload.get("mainGuessCount", 0)),
        )


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    icon: str
    earned_at: str

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "earnedAt": self.earned_at,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Badge":
        return cls(
            id=payload["id"],
            name=payload.get("name", payload["id"]),
            description=payload.get("description", ""),
            icon=payload.get("icon", ""),
            earned_at=_pick(payload, "earnedAt", "earned_at", default=""),
        )


@dataclass(frozen=True)
class GameResult:
    """Outcome of a finished session, handed to the statistics engine."""

    won: bool
    guess_count: int
    hints_used: int
    total_crossers: int
    star_rating: int
    puzzle_id: str = ""
    puzzle_date: Optional[str] = None
    guess_words: Tuple[str, ...] = ()


def _empty_distribution() -> Dict[int, int]:
    return {bucket: 0 for bucket in range(1, MAX_GUESSES + 1)}


@dataclass
class GameStats:
    """Per-player long-run statistics."""

    games_played: int = 0
    games_won: int = 0
    current_streak: int = 0
    max_streak: int = 0
    guess_distribution: Dict[int, int] = field(default_factory=_empty_distribution)
    last_played_date: Optional[str] = None
    last_win_date: Optional[str] = None
    grace_saves_available: int = GRACE_SAVE_BALANCE
    last_grace_save_refresh: Optional[str] = None
    streak_saved_by_grace: bool = False
    badges: List[Badge] = field(default_factory=list)
    consecutive_three_star: int = 0

    def has_badge(self, badge_id: str) -> bool:
        return any(badge.id == badge_id for badge in self.badges)

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "gamesPlayed": self.games_played,
            "gamesWon": self.games_won,
            "currentStreak": self.current_streak,
            "maxStreak": self.max_streak,
            "guessDistribution": {str(k): v for k, v in sorted(self.guess_distribution.items())},
            "lastPlayedDate": self.last_played_date,
            "lastWinDate": self.last_win_date,
            "graceSavesAvailable": self.grace_saves_available,
            "lastGraceSaveRefresh": self.last_grace_save_refresh,
            "streakSavedByGrace": self.streak_saved_by_grace,
            "badges": [badge.to_jsonable() for badge in self.badges],
            "consecutiveThreeStar": self.consecutive_three_star,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GameStats":
        distribution = _empty_distribution()
        for key, value in (payload.get("guessDistribution") or {}).items():
            distribution[int(key)] = int(value)
        return cls(
            games_played=int(payload.get("gamesPlayed", 0)),
            games_won=int(payload.get("gamesWon", 0)),
            current_streak=int(payload.get("currentStreak", 0)),
            max_streak=int(payload.get("maxStreak", 0)),
            guess_distribution=distribution,
            last_played_date=payload.get("lastPlayedDate"),
            last_win_date=payload.get("lastWinDate"),
            grace_saves_available=int(payload.get("graceSavesAvailable", GRACE_SAVE_BALANCE)),
            last_grace_save_refresh=payload.get("lastGraceSaveRefresh"),
            streak_saved_by_grace=bool(payload.get("streakSavedByGrace", False)),
            badges=[Badge.from_dict(item) for item in payload.get("badges", [])],
            consecutive_three_star=int(payload.get("consecutiveThreeStar", 0)),
        )


@dataclass
class GameHistoryEntry:
    """One finished puzzle in the auxiliary history log."""

    puzzle_id: str
    puzzle_date: Optional[str]
    played_at: str
    status: str
    guess_count: int
    hints_used: int
    star_rating: int
    guess_words: List[str] = field(default_factory=list)

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "puzzleId": self.puzzle_id,
            "puzzleDate": self.puzzle_date,
            "playedAt": self.played_at,
            "status": self.status,
            "guessCount": self.guess_count,
            "hintsUsed": self.hints_used,
            "starRating": self.star_rating,
            "guessWords": list(self.guess_words),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GameHistoryEntry":
        return cls(
            puzzle_id=str(_pick(payload, "puzzleId", "puzzle_id")),
            puzzle_date=_pick(payload, "puzzleDate", "puzzle_date"),
            played_at=_pick(payload, "playedAt", "played_at", default=""),
            status=payload.get("status", ""),
            guess_count=int(_pick(payload, "guessCount", "guess_count", default=0)),
            hints_used=int(_pick(payload, "hintsUsed", "hints_used", default=0)),
            star_rating=int(_pick(payload, "starRating", "star_rating", default=0)),
            guess_words=list(_pick(payload, "guessWords", "guess_words", default=[])),
        )
