"""The per-puzzle session state machine.

``playing`` moves to ``won`` or ``lost`` and never leaves a terminal state
except through :meth:`GameSession.reset`. Every accepted transition builds a
new :class:`~cluegrid.core.models.SessionState`; rejected input leaves the
state untouched and is reported through :class:`SubmitOutcome` instead of an
exception.
"""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..core.constants import (
    MAIN_TARGET,
    MAX_GUESSES,
    REJECT_MESSAGES,
    GameStatus,
    LetterStatus,
    RejectReason,
)
from ..core.models import Badge, GameResult, Guess, Puzzle, RevealedLetter, SessionState
from ..data.normalization import clean_word
from ..io.session_store import SessionStore
from ..utils.logger import get_logger
from .badges import calculate_stars
from .feedback import compute_feedback, is_solved, key_statuses


LOGGER = get_logger(__name__)

CompletionHandler = Callable[[GameResult], Optional[Sequence[Badge]]]
WordValidator = Callable[[str], bool]


@dataclass(frozen=True)
class SubmitOutcome:
    """What happened to a submitted guess."""

    accepted: bool
    reason: Optional[RejectReason] = None
    shake: bool = False
    message: Optional[str] = None
    guess: Optional[Guess] = None
    solved: bool = False
    revealed: Optional[RevealedLetter] = None
    status: GameStatus = GameStatus.PLAYING
    badges: Tuple[Badge, ...] = ()

    @classmethod
    def rejected(cls, reason: RejectReason, status: GameStatus, shake: bool = False) -> "SubmitOutcome":
        return cls(
            accepted=False,
            reason=reason,
            shake=shake,
            message=REJECT_MESSAGES[reason],
            status=status,
        )


class GameSession:
    """Live game for one puzzle: guess buffer, history, reveals and outcome."""

    def __init__(
        self,
        puzzle: Puzzle,
        state: Optional[SessionState] = None,
        store: Optional[SessionStore] = None,
        on_complete: Optional[CompletionHandler] = None,
        word_validator: Optional[WordValidator] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.puzzle = puzzle
        self.store = store
        self.on_complete = on_complete
        self.word_validator = word_validator
        self._clock = clock
        self.current_guess = ""
        self.state = self._sanitize(state) if state else SessionState(puzzle_id=puzzle.id)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def status(self) -> GameStatus:
        return self.state.status

    @property
    def selected_target(self) -> str:
        return self.state.selected_target

    @property
    def target_word(self) -> str:
        return self.puzzle.target_word(self.state.selected_target) or ""

    @property
    def target_length(self) -> int:
        return len(self.target_word)

    @property
    def guesses_remaining(self) -> int:
        return self.state.guesses_remaining

    @property
    def star_rating(self) -> int:
        return calculate_stars(self.state.hints_used, len(self.puzzle.crossers))

    def guesses_for(self, target_id: str) -> List[Guess]:
        return [guess for guess in self.state.guesses if guess.target_id == target_id]

    def key_statuses(self) -> Dict[str, LetterStatus]:
        return key_statuses(self.state.guesses, self.state.selected_target)

    # ------------------------------------------------------------------
    # Input buffer
    # ------------------------------------------------------------------
    def select_target(self, target_id: str) -> bool:
        state = self.state
        if state.status != GameStatus.PLAYING or target_id in state.solved:
            return False
        if self.puzzle.target_word(target_id) is None:
            LOGGER.debug("Ignoring unknown target %s", target_id)
            return False
        self.current_guess = ""
        if target_id != state.selected_target:
            self.state = dataclasses.replace(state, selected_target=target_id)
            self._persist()
        return True

    def append_letter(self, letter: str) -> bool:
        if self.state.status != GameStatus.PLAYING:
            return False
        cleaned = clean_word(letter)
        if len(cleaned) != 1 or len(self.current_guess) >= self.target_length:
            return False
        self.current_guess += cleaned
        return True

    def remove_letter(self) -> bool:
        if self.state.status != GameStatus.PLAYING or not self.current_guess:
            return False
        self.current_guess = self.current_guess[:-1]
        return True

    # ------------------------------------------------------------------
    # Turn
    # ------------------------------------------------------------------
    def submit_guess(self) -> SubmitOutcome:
        state = self.state
        if state.status != GameStatus.PLAYING:
            return SubmitOutcome.rejected(RejectReason.NOT_PLAYING, state.status)

        target = state.selected_target
        is_main = target == MAIN_TARGET
        if is_main and state.guesses_remaining <= 0:
            return SubmitOutcome.rejected(RejectReason.NO_GUESSES_REMAINING, state.status)

        answer = self.target_word
        guess = clean_word(self.current_guess)
        if len(guess) != len(answer):
            return SubmitOutcome.rejected(RejectReason.NOT_ENOUGH_LETTERS, state.status, shake=True)
        if target in state.solved:
            return SubmitOutcome.rejected(RejectReason.ALREADY_SOLVED, state.status)
        if guess != answer and self.word_validator is not None and not self.word_validator(guess):
            return SubmitOutcome.rejected(RejectReason.NOT_IN_WORD_LIST, state.status, shake=True)

        feedback = compute_feedback(guess, answer)
        solved = is_solved(feedback)
        new_guess = Guess(word=guess, target_id=target, feedback=tuple(feedback), timestamp=self._clock())

        solved_set = state.solved
        revealed = state.revealed
        hints_used = state.hints_used
        main_guess_count = state.main_guess_count + (1 if is_main else 0)
        revealed_letter: Optional[RevealedLetter] = None

        if solved:
            solved_set = solved_set | {target}
            if not is_main:
                hints_used += 1
                revealed_letter = self._reveal(target)
                if revealed_letter is not None:
                    revealed = revealed + (revealed_letter,)

        if is_main and solved:
            status = GameStatus.WON
        elif main_guess_count >= MAX_GUESSES:
            status = GameStatus.LOST
        else:
            status = GameStatus.PLAYING

        selected = target
        if status == GameStatus.PLAYING and solved and not is_main:
            selected = self._next_target(target, solved_set)

        self.state = dataclasses.replace(
            state,
            guesses=state.guesses + (new_guess,),
            solved=solved_set,
            revealed=revealed,
            status=status,
            selected_target=selected,
            hints_used=hints_used,
            main_guess_count=main_guess_count,
        )
        self.current_guess = ""
        LOGGER.debug(
            "Guess %s on %s -> %s (status=%s)",
            guess,
            target,
            "".join(item.status.value[0] for item in feedback),
            status.value,
        )

        badges = self.finalize()
        self._persist()
        return SubmitOutcome(
            accepted=True,
            guess=new_guess,
            solved=solved,
            revealed=revealed_letter,
            status=status,
            badges=tuple(badges),
        )

    def finalize(self) -> List[Badge]:
        """Hand a finished game to the statistics engine exactly once."""
        state = self.state
        if not state.status.is_terminal or state.stats_recorded:
            return []

        result = GameResult(
            won=state.status == GameStatus.WON,
            guess_count=state.main_guess_count,
            hints_used=state.hints_used,
            total_crossers=len(self.puzzle.crossers),
            star_rating=calculate_stars(state.hints_used, len(self.puzzle.crossers)),
            puzzle_id=self.puzzle.id,
            puzzle_date=self.puzzle.date,
            guess_words=tuple(guess.word for guess in state.guesses),
        )
        LOGGER.info(
            "Puzzle %s %s in %d guess(es) with %d hint(s)",
            self.puzzle.id,
            state.status.value,
            result.guess_count,
            result.hints_used,
        )
        badges = list(self.on_complete(result) or []) if self.on_complete else []
        self.state = dataclasses.replace(state, stats_recorded=True)
        return badges

    def reset(self) -> None:
        """Discard all progress on this puzzle and start over."""
        if self.store is not None:
            self.store.clear(self.puzzle.id)
        self.state = SessionState(puzzle_id=self.puzzle.id)
        self.current_guess = ""
        LOGGER.info("Session for %s reset", self.puzzle.id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _reveal(self, crosser_id: str) -> Optional[RevealedLetter]:
        crosser = self.puzzle.crosser(crosser_id)
        if crosser is None or crosser.intersection_letter is None:
            return None
        return RevealedLetter(
            row=self.puzzle.main_word.row,
            col=crosser.start_col,
            letter=crosser.intersection_letter,
            source=crosser.id,
        )

    def _next_target(self, after_id: str, solved: frozenset) -> str:
        ids = [crosser.id for crosser in self.puzzle.crossers]
        start = ids.index(after_id) + 1 if after_id in ids else 0
        for offset in range(len(ids)):
            candidate = ids[(start + offset) % len(ids)]
            if candidate not in solved:
                return candidate
        return MAIN_TARGET

    def _sanitize(self, state: SessionState) -> SessionState:
        target = state.selected_target
        if self.puzzle.target_word(target) is None or (
            target in state.solved and state.status == GameStatus.PLAYING
        ):
            return dataclasses.replace(state, selected_target=MAIN_TARGET)
        return state

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save(self.state)
