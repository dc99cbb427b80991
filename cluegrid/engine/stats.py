"""Continuity and rewards: streaks, grace saves, histogram and badges."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from ..core.constants import (
    GRACE_SAVE_BALANCE,
    GRACE_SAVE_REFRESH_DAYS,
    MAX_GUESSES,
    GameStatus,
)
from ..core.models import Badge, GameHistoryEntry, GameResult, GameStats
from ..io.stats_store import StatsStore
from ..utils.logger import get_logger
from .badges import eligible_badges, make_badge


LOGGER = get_logger(__name__)


def days_between(first: str, second: str) -> int:
    """Whole days between two ``YYYY-MM-DD`` dates, order-independent."""
    return abs((date.fromisoformat(second) - date.fromisoformat(first)).days)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StatsTracker:
    """Owns one player's :class:`GameStats` and keeps it persisted.

    Streaks break lazily: a loss leaves ``current_streak`` untouched and the
    reset only happens when the next win finds a gap of more than one day.
    Use :meth:`is_streak_paused` to ask whether the displayed streak is at
    risk right now.
    """

    def __init__(
        self,
        store: Optional[StatsStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self._clock = clock or _utc_now
        if store is not None:
            self.stats, self.history = store.load()
        else:
            self.stats, self.history = GameStats(), []

    def today(self) -> str:
        return self._clock().date().isoformat()

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def record_game(self, won: bool, guess_count: int, date: Optional[str] = None) -> GameStats:
        self._apply_game(won, guess_count, date or self.today())
        self._persist()
        return self.stats

    def check_and_award_badges(self, result: GameResult, now: Optional[datetime] = None) -> List[Badge]:
        """Award every badge whose rule fires; returns only the new ones."""
        awarded = self._apply_badges(result, now or self._clock())
        self._persist()
        return awarded

    def record_result(self, result: GameResult) -> List[Badge]:
        """Fold a finished session into stats, badges and history at once."""
        self._apply_game(result.won, result.guess_count, self.today())
        awarded = self._apply_badges(result, self._clock())
        self._append_history(result)
        self._persist()
        LOGGER.info(
            "Recorded %s for %s: streak=%d, played=%d, new badges=%s",
            "win" if result.won else "loss",
            result.puzzle_id or "puzzle",
            self.stats.current_streak,
            self.stats.games_played,
            [badge.id for badge in awarded],
        )
        return awarded

    # ------------------------------------------------------------------
    # Streak queries and grace saves
    # ------------------------------------------------------------------
    def is_streak_paused(self, today: Optional[str] = None) -> bool:
        stats = self.stats
        if not stats.last_win_date or stats.current_streak <= 0:
            return False
        return days_between(stats.last_win_date, today or self.today()) > 1

    def can_use_grace_save(self, today: Optional[str] = None) -> bool:
        return (
            self.stats.grace_saves_available > 0
            and self.stats.current_streak > 0
            and self.is_streak_paused(today)
        )

    def use_grace_save(self, today: Optional[str] = None) -> bool:
        stats = self.stats
        if stats.grace_saves_available <= 0 or stats.current_streak <= 0:
            return False
        stats.grace_saves_available -= 1
        stats.streak_saved_by_grace = True
        # The next win now looks one day after this one.
        stats.last_win_date = today or self.today()
        LOGGER.info("Grace save used; streak %d preserved", stats.current_streak)
        self._persist()
        return True

    def reset(self) -> None:
        self.stats = GameStats()
        self.history = []
        self._persist()

    # ------------------------------------------------------------------
    # History log
    # ------------------------------------------------------------------
    def entry_for_date(self, puzzle_date: str) -> Optional[GameHistoryEntry]:
        """Latest history entry for the puzzle dated ``puzzle_date``."""
        for entry in reversed(self.history):
            if entry.puzzle_date == puzzle_date:
                return entry
        return None

    def played_dates(self) -> List[str]:
        return sorted({entry.puzzle_date for entry in self.history if entry.puzzle_date})

    def clear_history(self) -> None:
        """Drop the history log; statistics and badges are kept."""
        self.history = []
        self._persist()
        LOGGER.info("History cleared")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _apply_game(self, won: bool, guess_count: int, day: str) -> None:
        stats = self.stats

        if (
            stats.last_grace_save_refresh is None
            or days_between(stats.last_grace_save_refresh, day) > GRACE_SAVE_REFRESH_DAYS
        ):
            stats.grace_saves_available = GRACE_SAVE_BALANCE
            stats.last_grace_save_refresh = day

        stats.games_played += 1
        if won:
            stats.games_won += 1

        if won:
            if stats.last_win_date:
                gap = days_between(stats.last_win_date, day)
                if gap == 1:
                    stats.current_streak += 1
                    stats.streak_saved_by_grace = False
                elif gap > 1:
                    stats.current_streak = 1
                    stats.streak_saved_by_grace = False
            else:
                stats.current_streak = 1
                stats.streak_saved_by_grace = False

        stats.max_streak = max(stats.max_streak, stats.current_streak)
        if won and 1 <= guess_count <= MAX_GUESSES:
            stats.guess_distribution[guess_count] = stats.guess_distribution.get(guess_count, 0) + 1

        stats.last_played_date = day
        if won:
            stats.last_win_date = day
        LOGGER.debug("Stats after %s on %s: %s", "win" if won else "loss", day, stats)

    def _apply_badges(self, result: GameResult, now: datetime) -> List[Badge]:
        stats = self.stats
        if result.won and result.star_rating == 3:
            stats.consecutive_three_star += 1
        else:
            stats.consecutive_three_star = 0

        earned_at = now.isoformat()
        awarded = [make_badge(badge_id, earned_at) for badge_id in eligible_badges(result, stats)]
        for badge in awarded:
            LOGGER.info("Badge earned: %s", badge.id)
        stats.badges.extend(awarded)
        return awarded

    def _append_history(self, result: GameResult) -> None:
        if result.puzzle_id and any(entry.puzzle_id == result.puzzle_id for entry in self.history):
            return
        self.history.append(
            GameHistoryEntry(
                puzzle_id=result.puzzle_id,
                puzzle_date=result.puzzle_date,
                played_at=self._clock().isoformat(),
                status=(GameStatus.WON if result.won else GameStatus.LOST).value,
                guess_count=result.guess_count,
                hints_used=result.hints_used,
                star_rating=result.star_rating,
                guess_words=list(result.guess_words),
            )
        )

    def _persist(self) -> None:
        if self.store is None:
            return
        self.history = self.store.save(self.stats, self.history)
