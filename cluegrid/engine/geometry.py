"""Deterministic geometry validation for authored puzzles.

Everything here is pure: no session state, no storage. The authoring tool
imports these helpers directly to check a draft before publishing, and
:class:`~cluegrid.engine.game.GameController` re-runs :func:`validate_puzzle`
when a puzzle is loaded.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from ..core.constants import Bounds
from ..core.models import Crosser, Puzzle
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

RUN_WARNING_LENGTH = 3


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str]
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class HorizontalConflict:
    """Crosser letters sharing a row outside the main word."""

    row: int
    kind: str  # "run" or "scattered"
    cols: Tuple[int, ...]
    letters: str

    @property
    def message(self) -> str:
        if self.kind == "run":
            return (
                f"Row {self.row}: crossers form the horizontal run '{self.letters}' "
                f"at cols {self.cols[0]}-{self.cols[-1]}"
            )
        return (
            f"Row {self.row}: crosser letters '{self.letters}' share the row "
            f"at cols {', '.join(str(c) for c in self.cols)}"
        )


def validate_intersections(
    main_word: str,
    main_row: int,
    main_col: int,
    crossers: Sequence[Crosser],
) -> ValidationResult:
    """Check that every crosser meets the main word on a matching letter.

    All problems are collected; one bad crosser never hides the next.
    """
    errors: List[str] = []
    main_col_end = main_col + len(main_word) - 1

    for number, crosser in enumerate(crossers, start=1):
        label = f"Crosser {number}"
        in_range = main_col <= crosser.start_col <= main_col_end
        if not in_range:
            errors.append(
                f"{label}: Column {crosser.start_col} is outside main word range "
                f"({main_col}-{main_col_end})"
            )

        end_row = crosser.start_row + crosser.length - 1
        if not crosser.start_row <= main_row <= end_row:
            errors.append(
                f"{label}: Does not pass through main word row {main_row} "
                f"(rows {crosser.start_row}-{end_row})"
            )

        index_ok = 0 <= crosser.intersection_index < crosser.length
        if not index_ok:
            errors.append(
                f"{label}: Intersection index {crosser.intersection_index} is out of bounds "
                f"for word \"{crosser.word}\""
            )

        if in_range and index_ok:
            main_letter = main_word[crosser.start_col - main_col]
            crosser_letter = crosser.word[crosser.intersection_index]
            if main_letter != crosser_letter:
                errors.append(
                    f"{label}: Letter mismatch at intersection. Main word has "
                    f"\"{main_letter}\" but crosser has \"{crosser_letter}\""
                )

        intersection_row = crosser.start_row + crosser.intersection_index
        if intersection_row != main_row:
            errors.append(
                f"{label}: Row alignment error. Expected intersection at row {main_row} "
                f"but calculated row {intersection_row}"
            )

    if errors:
        LOGGER.debug("Intersection check found %d error(s) for %s", len(errors), main_word)
    return ValidationResult(valid=not errors, errors=errors)


def check_horizontal_conflicts(
    main_row: int,
    crossers: Sequence[Crosser],
) -> List[HorizontalConflict]:
    """Flag rows where unrelated crossers may spell accidental words.

    Advisory only: a contiguous run of three or more crosser letters, or two
    or more crosser letters on the same row that are not adjacent.
    """
    rows: Dict[int, Dict[int, str]] = defaultdict(dict)
    for crosser in crossers:
        for index, (row, col) in enumerate(crosser.cells):
            if row == main_row:
                continue
            rows[row].setdefault(col, crosser.word[index])

    conflicts: List[HorizontalConflict] = []
    for row in sorted(rows):
        letters = rows[row]
        cols = sorted(letters)
        if len(cols) < 2:
            continue

        runs: List[List[int]] = [[cols[0]]]
        for col in cols[1:]:
            if col == runs[-1][-1] + 1:
                runs[-1].append(col)
            else:
                runs.append([col])

        for run in runs:
            if len(run) >= RUN_WARNING_LENGTH:
                conflicts.append(
                    HorizontalConflict(
                        row=row,
                        kind="run",
                        cols=tuple(run),
                        letters="".join(letters[c] for c in run),
                    )
                )
        if len(runs) > 1:
            conflicts.append(
                HorizontalConflict(
                    row=row,
                    kind="scattered",
                    cols=tuple(cols),
                    letters="".join(letters[c] for c in cols),
                )
            )
    return conflicts


def check_grid_bounds(puzzle: Puzzle) -> List[str]:
    """Every footprint must fit inside the declared grid."""
    bounds = Bounds(rows=puzzle.rows, cols=puzzle.cols)
    errors: List[str] = []
    if not puzzle.main_word.text:
        errors.append("Main word is empty")
    if any(not bounds.contains(r, c) for r, c in puzzle.main_word.cells):
        errors.append(
            f"Main word at ({puzzle.main_word.row},{puzzle.main_word.col}) does not fit "
            f"the {puzzle.rows}x{puzzle.cols} grid"
        )
    for number, crosser in enumerate(puzzle.crossers, start=1):
        if any(not bounds.contains(r, c) for r, c in crosser.cells):
            errors.append(
                f"Crosser {number}: \"{crosser.word}\" at ({crosser.start_row},{crosser.start_col}) "
                f"does not fit the {puzzle.rows}x{puzzle.cols} grid"
            )
    return errors


def check_overlaps(puzzle: Puzzle) -> List[str]:
    """Two crossers may not claim the same cell with different letters."""
    claimed: Dict[Tuple[int, int], Tuple[int, str]] = {}
    errors: List[str] = []
    for number, crosser in enumerate(puzzle.crossers, start=1):
        for index, cell in enumerate(crosser.cells):
            if cell[0] == puzzle.main_word.row:
                continue
            letter = crosser.word[index]
            if cell in claimed and claimed[cell][1] != letter:
                errors.append(
                    f"Crosser {number}: cell {cell} conflicts with crosser {claimed[cell][0]}"
                )
            claimed.setdefault(cell, (number, letter))
    return errors


def validate_puzzle(puzzle: Puzzle) -> ValidationResult:
    """Full load-time check: bounds, overlaps and intersections, plus warnings."""
    main = puzzle.main_word
    errors = check_grid_bounds(puzzle)
    errors.extend(check_overlaps(puzzle))
    errors.extend(validate_intersections(main.text, main.row, main.col, puzzle.crossers).errors)
    warnings = [conflict.message for conflict in check_horizontal_conflicts(main.row, puzzle.crossers)]

    if errors:
        LOGGER.error("Puzzle %s failed validation: %s", puzzle.id, "; ".join(errors))
    for warning in warnings:
        LOGGER.info("Puzzle %s: %s", puzzle.id, warning)
    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
