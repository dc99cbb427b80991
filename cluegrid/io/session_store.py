"""Per-puzzle persistence of session snapshots."""

from __future__ import annotations

import json
from typing import Optional

from ..core.exceptions import StorageError
from ..core.models import SessionState
from ..utils.logger import get_logger
from .storage import StorageBackend


LOGGER = get_logger(__name__)


def session_key(puzzle_id: str) -> str:
    return f"cluegrid:session:{puzzle_id}"


class SessionStore:
    """Save and restore :class:`SessionState` records keyed by puzzle id.

    Writes are best-effort: failures are logged and swallowed so a storage
    problem never undoes a move the player already made.
    """

    def __init__(self, backend: StorageBackend) -> None:
        self.backend = backend

    def load(self, puzzle_id: str) -> Optional[SessionState]:
        try:
            raw = self.backend.get(session_key(puzzle_id))
        except StorageError as exc:
            LOGGER.warning("Session read failed for %s: %s", puzzle_id, exc)
            return None
        if raw is None:
            return None

        try:
            state = SessionState.from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            LOGGER.warning("Discarding unreadable session for %s: %s", puzzle_id, exc)
            return None

        if state.puzzle_id != puzzle_id:
            LOGGER.warning(
                "Stored session belongs to %s, not %s; ignoring", state.puzzle_id, puzzle_id
            )
            return None
        return state

    def save(self, state: SessionState) -> bool:
        payload = json.dumps(state.to_jsonable(), ensure_ascii=False)
        try:
            self.backend.set(session_key(state.puzzle_id), payload)
        except StorageError as exc:
            LOGGER.warning("Session write failed for %s: %s", state.puzzle_id, exc)
            return False
        return True

    def clear(self, puzzle_id: str) -> None:
        try:
            self.backend.remove(session_key(puzzle_id))
        except StorageError as exc:
            LOGGER.warning("Session delete failed for %s: %s", puzzle_id, exc)
