"""Star ratings and the declarative badge rule table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from ..core.constants import PERFECTIONIST_RUN, BadgeId
from ..core.models import Badge, GameResult, GameStats


@dataclass(frozen=True)
class BadgeDefinition:
    id: BadgeId
    name: str
    description: str
    icon: str


@dataclass(frozen=True)
class BadgeRule:
    """A badge and the condition that unlocks it.

    Conditions see the finished game and the statistics *after* the game was
    recorded, so streak and win totals already include it.
    """

    badge_id: BadgeId
    condition: Callable[[GameResult, GameStats], bool]


BADGE_DEFINITIONS: Dict[BadgeId, BadgeDefinition] = {
    definition.id: definition
    for definition in (
        BadgeDefinition(BadgeId.FIRST_WIN, "First Win", "Solve your first puzzle", "trophy"),
        BadgeDefinition(BadgeId.GENIUS, "Genius", "Win without using any hints", "brain"),
        BadgeDefinition(
            BadgeId.QUICK_THINKER, "Quick Thinker", "Win in two main-word guesses or fewer", "bolt"
        ),
        BadgeDefinition(BadgeId.HINT_MASTER, "Hint Master", "Win after solving every crosser", "magnifier"),
        BadgeDefinition(BadgeId.STREAK_3, "On Fire", "Reach a 3 day streak", "flame"),
        BadgeDefinition(BadgeId.STREAK_7, "Week Warrior", "Reach a 7 day streak", "power"),
        BadgeDefinition(BadgeId.STREAK_30, "Monthly Master", "Reach a 30 day streak", "crown"),
        BadgeDefinition(BadgeId.CENTURY, "Century", "Win 100 puzzles", "robot"),
        BadgeDefinition(
            BadgeId.PERFECTIONIST,
            "Perfectionist",
            f"Earn 3 stars on {PERFECTIONIST_RUN} wins in a row",
            "star",
        ),
    )
}


BADGE_RULES: Tuple[BadgeRule, ...] = (
    BadgeRule(BadgeId.FIRST_WIN, lambda result, stats: result.won),
    BadgeRule(BadgeId.GENIUS, lambda result, stats: result.won and result.hints_used == 0),
    BadgeRule(BadgeId.QUICK_THINKER, lambda result, stats: result.won and result.guess_count <= 2),
    BadgeRule(
        BadgeId.HINT_MASTER,
        lambda result, stats: result.won
        and result.total_crossers > 0
        and result.hints_used >= result.total_crossers,
    ),
    BadgeRule(BadgeId.STREAK_3, lambda result, stats: stats.current_streak >= 3),
    BadgeRule(BadgeId.STREAK_7, lambda result, stats: stats.current_streak >= 7),
    BadgeRule(BadgeId.STREAK_30, lambda result, stats: stats.current_streak >= 30),
    BadgeRule(BadgeId.CENTURY, lambda result, stats: stats.games_won >= 100),
    BadgeRule(
        BadgeId.PERFECTIONIST,
        lambda result, stats: stats.consecutive_three_star >= PERFECTIONIST_RUN,
    ),
)


def calculate_stars(hints_used: int, total_crossers: int) -> int:
    """0 hints is 3 stars, up to half is 2, fewer than all is 1, all is 0."""
    if hints_used <= 0 or total_crossers <= 0:
        return 3
    ratio = hints_used / total_crossers
    if ratio <= 0.5:
        return 2
    if ratio < 1:
        return 1
    return 0


def eligible_badges(result: GameResult, stats: GameStats) -> List[BadgeId]:
    """Badge ids whose rule fires and which the player does not hold yet."""
    return [
        rule.badge_id
        for rule in BADGE_RULES
        if not stats.has_badge(rule.badge_id.value) and rule.condition(result, stats)
    ]


def make_badge(badge_id: BadgeId, earned_at: str) -> Badge:
    definition = BADGE_DEFINITIONS[badge_id]
    return Badge(
        id=badge_id.value,
        name=definition.name,
        description=definition.description,
        icon=definition.icon,
        earned_at=earned_at,
    )
