"""Cluegrid daily puzzle engine.

This package exposes the public API surface via:

- ``cluegrid.engine.geometry``: intersection and layout validation for authors.
- ``cluegrid.engine.session.GameSession``: the per-puzzle state machine.
- ``cluegrid.engine.stats.StatsTracker``: streaks, grace saves and badges.
- ``cluegrid.engine.game.GameController``: loading, resuming and wiring.
"""

from .engine.feedback import compute_feedback
from .engine.game import GameController
from .engine.geometry import check_horizontal_conflicts, validate_intersections, validate_puzzle
from .engine.session import GameSession, SubmitOutcome
from .engine.stats import StatsTracker

__all__ = [
    "GameController",
    "GameSession",
    "StatsTracker",
    "SubmitOutcome",
    "check_horizontal_conflicts",
    "compute_feedback",
    "validate_intersections",
    "validate_puzzle",
]

__version__ = "0.1.0"
