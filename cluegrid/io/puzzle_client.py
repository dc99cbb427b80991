"""Lightweight HTTP client for the puzzle-serving API."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from ..core.exceptions import PuzzleLoadError
from ..core.models import Puzzle
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


def puzzle_from_payload(payload: Any) -> Puzzle:
    """Build a :class:`Puzzle` from the API's ``{"puzzle": {...}}`` document."""
    if isinstance(payload, dict) and isinstance(payload.get("puzzle"), dict):
        payload = payload["puzzle"]
    if not isinstance(payload, dict):
        raise PuzzleLoadError("Puzzle payload is not an object")
    try:
        return Puzzle.from_dict(payload)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise PuzzleLoadError(f"Malformed puzzle payload: {exc!r}") from exc


def load_puzzle_file(path: Path | str) -> Puzzle:
    """Read a puzzle JSON document from disk."""
    source = Path(path)
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PuzzleLoadError(f"Cannot read puzzle file {source}: {exc}") from exc
    return puzzle_from_payload(payload)


class PuzzleClient:
    """Minimal client around ``GET /api/puzzle/{date}``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        base_url_env: str = "CLUEGRID_API_URL",
        timeout_seconds: float = 10.0,
    ) -> None:
        self.base_url = (base_url or os.environ.get(base_url_env) or "").rstrip("/")
        self.timeout_seconds = timeout_seconds
        if not self.base_url:
            raise PuzzleLoadError(
                f"No puzzle API URL given and {base_url_env} is not set"
            )

    def fetch(self, date: str, bust_cache: bool = False) -> Puzzle:
        """Fetch and parse the published puzzle for ``date`` (YYYY-MM-DD)."""
        url = f"{self.base_url}/api/puzzle/{date}"
        params: Dict[str, str] = {"bust": "1"} if bust_cache else {}
        try:
            response = requests.get(url, params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise PuzzleLoadError(f"Puzzle request failed: {exc}") from exc
        except ValueError as exc:
            raise PuzzleLoadError(f"Puzzle response is not JSON: {exc}") from exc

        puzzle = puzzle_from_payload(payload)
        LOGGER.info("Fetched puzzle %s for %s", puzzle.id, puzzle.date)
        return puzzle
