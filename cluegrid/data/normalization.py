"""Shared helpers for guess and answer normalization."""

from __future__ import annotations

import re
import unicodedata

WORD_RE = re.compile(r"[^A-Z]")
VALID_WORD_RE = re.compile(r"^[A-Z]+$")


def clean_word(text: str) -> str:
    """Return a normalized uppercase ASCII representation of ``text``."""

    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return WORD_RE.sub("", stripped.upper())


def is_word(text: str) -> bool:
    """True when ``text`` is a non-empty run of uppercase letters A-Z."""

    return bool(text) and VALID_WORD_RE.match(text) is not None


__all__ = ["clean_word", "is_word"]
