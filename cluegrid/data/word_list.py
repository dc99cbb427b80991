"""Accepted-guess word list backing the "Not in word list" check."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Set

from ..core.exceptions import WordListLoadError
from ..utils.logger import get_logger
from .normalization import clean_word, is_word


LOGGER = get_logger(__name__)


class WordList:
    """Set of normalized words; instances are usable as a session word validator.

    Source files hold one word per line. Tab-separated files are accepted and
    only the first column is read. Blank lines and ``#`` comments are skipped.
    """

    def __init__(self, words: Iterable[str] = (), min_length: int = 2, max_length: int = 24) -> None:
        self.min_length = min_length
        self.max_length = max_length
        self._words: Set[str] = set()
        for word in words:
            self.add(word)

    def add(self, word: str) -> bool:
        cleaned = clean_word(word)
        if not is_word(cleaned) or not self.min_length <= len(cleaned) <= self.max_length:
            return False
        self._words.add(cleaned)
        return True

    @classmethod
    def from_file(cls, path: Path | str, **kwargs) -> "WordList":
        source = Path(path)
        try:
            lines = source.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            raise WordListLoadError(f"Cannot read word list {source}: {exc}") from exc

        word_list = cls(**kwargs)
        skipped = 0
        for line in lines:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if not word_list.add(line.split("\t", 1)[0]):
                skipped += 1
        if not word_list:
            raise WordListLoadError(f"Word list {source} has no usable words")
        LOGGER.info("Loaded %d words from %s (%d skipped)", len(word_list), source.name, skipped)
        return word_list

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and clean_word(word) in self._words

    def __call__(self, word: str) -> bool:
        return word in self

    def __len__(self) -> int:
        return len(self._words)
