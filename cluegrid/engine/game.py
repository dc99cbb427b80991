"""Wires puzzle loading, sessions and statistics together."""

from __future__ import annotations

from typing import List, Optional

from ..core.exceptions import GeometryError, PuzzleLoadError
from ..core.models import Badge, Puzzle
from ..io.puzzle_client import PuzzleClient
from ..io.session_store import SessionStore
from ..utils.logger import get_logger
from .geometry import validate_puzzle
from .session import GameSession, WordValidator
from .stats import StatsTracker


LOGGER = get_logger(__name__)


class GameController:
    """Loads a puzzle, restores its session and routes outcomes to stats.

    A failed load leaves ``session`` as ``None`` and ``error`` set; call
    :meth:`retry` to try the same request again.
    """

    def __init__(
        self,
        session_store: SessionStore,
        stats: StatsTracker,
        client: Optional[PuzzleClient] = None,
        word_validator: Optional[WordValidator] = None,
    ) -> None:
        self.session_store = session_store
        self.stats = stats
        self.client = client
        self.word_validator = word_validator
        self.session: Optional[GameSession] = None
        self.error: Optional[str] = None
        self.warnings: List[str] = []
        self.pending_badges: List[Badge] = []
        self._last_puzzle: Optional[Puzzle] = None
        self._last_date: Optional[str] = None

    @property
    def has_puzzle(self) -> bool:
        return self.session is not None

    def load(self, puzzle: Optional[Puzzle] = None, date: Optional[str] = None) -> bool:
        """Load ``puzzle`` directly, or fetch the one for ``date`` (default today)."""
        self.session = None
        self.error = None
        self.warnings = []
        self.pending_badges = []
        self._last_puzzle = puzzle
        self._last_date = date

        try:
            if puzzle is None:
                if self.client is None:
                    raise PuzzleLoadError("No puzzle source configured")
                puzzle = self.client.fetch(date or self.stats.today())
            report = validate_puzzle(puzzle)
            if not report.valid:
                raise GeometryError(report.errors)
        except GeometryError as exc:
            self.error = f"Puzzle {puzzle.id if puzzle else '?'} is invalid: {exc}"
            LOGGER.error(self.error)
            return False
        except PuzzleLoadError as exc:
            self.error = str(exc)
            LOGGER.warning("Puzzle load failed: %s", exc)
            return False

        self.warnings = report.warnings
        state = self.session_store.load(puzzle.id)
        session = GameSession(
            puzzle,
            state=state,
            store=self.session_store,
            on_complete=self.stats.record_result,
            word_validator=self.word_validator,
        )
        if state is not None:
            LOGGER.info("Resumed session for %s (%s)", puzzle.id, state.status.value)
            # A finished game whose stats never landed is recorded now.
            self.pending_badges = session.finalize()
            if session.state is not state:
                self.session_store.save(session.state)
        else:
            LOGGER.info("Started new session for %s", puzzle.id)
        self.session = session
        return True

    def retry(self) -> bool:
        return self.load(puzzle=self._last_puzzle, date=self._last_date)

    def reset(self) -> bool:
        if self.session is None:
            return False
        self.session.reset()
        return True
