"""Per-player persistence for statistics and the game history log."""

from __future__ import annotations

import json
from typing import List, Sequence, Tuple

from ..core.constants import HISTORY_PRUNE_FRACTION
from ..core.exceptions import StorageError, StorageQuotaError
from ..core.models import GameHistoryEntry, GameStats
from ..utils.logger import get_logger
from .storage import StorageBackend


LOGGER = get_logger(__name__)

DEFAULT_PLAYER = "default"


def stats_key(player_id: str) -> str:
    return f"cluegrid:stats:{player_id}"


class StatsStore:
    """Save the statistics record together with its auxiliary history.

    The statistics record must survive a full backend. When a write hits the
    quota the oldest fifth of the history is dropped and the write retried;
    if that still does not fit the history is dropped entirely.
    """

    def __init__(self, backend: StorageBackend, player_id: str = DEFAULT_PLAYER) -> None:
        self.backend = backend
        self.player_id = player_id

    @property
    def key(self) -> str:
        return stats_key(self.player_id)

    def load(self) -> Tuple[GameStats, List[GameHistoryEntry]]:
        try:
            raw = self.backend.get(self.key)
        except StorageError as exc:
            LOGGER.warning("Stats read failed for %s: %s", self.player_id, exc)
            return GameStats(), []
        if raw is None:
            return GameStats(), []

        try:
            doc = json.loads(raw)
            stats = GameStats.from_dict(doc.get("stats") or {})
            history = [GameHistoryEntry.from_dict(item) for item in doc.get("history", [])]
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as exc:
            LOGGER.warning("Discarding unreadable stats for %s: %s", self.player_id, exc)
            return GameStats(), []
        return stats, history

    def save(self, stats: GameStats, history: Sequence[GameHistoryEntry]) -> List[GameHistoryEntry]:
        """Persist and return the history that was actually kept."""
        entries = list(history)
        trim = max(1, int(len(entries) * HISTORY_PRUNE_FRACTION)) if entries else 0
        attempts = [entries]
        if entries:
            attempts.extend([entries[trim:], []])

        for attempt, kept in enumerate(attempts):
            try:
                self._write(stats, kept)
            except StorageQuotaError as exc:
                if attempt + 1 < len(attempts):
                    LOGGER.warning(
                        "Stats write over quota (%s); pruning history from %d to %d entries",
                        exc,
                        len(kept),
                        len(attempts[attempt + 1]),
                    )
                continue
            except StorageError as exc:
                LOGGER.warning("Stats write failed for %s: %s", self.player_id, exc)
                return entries
            return kept

        LOGGER.error("Statistics for %s could not be saved even without history", self.player_id)
        return entries

    def clear(self) -> None:
        try:
            self.backend.remove(self.key)
        except StorageError as exc:
            LOGGER.warning("Stats delete failed for %s: %s", self.player_id, exc)

    def _write(self, stats: GameStats, history: Sequence[GameHistoryEntry]) -> None:
        doc = {
            "player_id": self.player_id,
            "stats": stats.to_jsonable(),
            "history": [entry.to_jsonable() for entry in history],
        }
        self.backend.set(self.key, json.dumps(doc, ensure_ascii=False))
