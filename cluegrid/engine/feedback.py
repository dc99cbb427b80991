"""Wordle-style scoring of a guess against an answer."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from ..core.constants import LetterStatus
from ..core.models import Guess, LetterFeedback

_KEY_PRECEDENCE = {
    LetterStatus.ABSENT: 0,
    LetterStatus.PRESENT: 1,
    LetterStatus.CORRECT: 2,
}


def compute_feedback(guess: str, answer: str) -> List[LetterFeedback]:
    """Score ``guess`` letter by letter against ``answer``.

    Exact matches are claimed first so a duplicate letter can only be marked
    present while an unclaimed copy remains in the answer. Both strings must
    have the same length; the caller enforces that.
    """
    statuses = [LetterStatus.ABSENT] * len(guess)
    remaining: List[Optional[str]] = list(answer)

    for i, letter in enumerate(guess):
        if letter == answer[i]:
            statuses[i] = LetterStatus.CORRECT
            remaining[i] = None

    for i, letter in enumerate(guess):
        if statuses[i] == LetterStatus.CORRECT:
            continue
        if letter in remaining:
            statuses[i] = LetterStatus.PRESENT
            remaining[remaining.index(letter)] = None

    return [LetterFeedback(letter=letter, status=status) for letter, status in zip(guess, statuses)]


def is_solved(feedback: Sequence[LetterFeedback]) -> bool:
    return bool(feedback) and all(item.status == LetterStatus.CORRECT for item in feedback)


def key_statuses(guesses: Iterable[Guess], target_id: str) -> Dict[str, LetterStatus]:
    """Best known status per letter for one target, for keyboard colouring."""
    statuses: Dict[str, LetterStatus] = {}
    for guess in guesses:
        if guess.target_id != target_id:
            continue
        for item in guess.feedback:
            current = statuses.get(item.letter)
            if current is None or _KEY_PRECEDENCE[item.status] > _KEY_PRECEDENCE[current]:
                statuses[item.letter] = item.status
    return statuses
