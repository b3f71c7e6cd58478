"""Focal-character placement for the one-word display."""

from __future__ import annotations

from typing import NamedTuple


class WordParts(NamedTuple):
    left: str
    focal: str
    right: str


def focal_character_index(word: str) -> int:
    """Index of the character the eye should fixate on, by word length."""
    length = len(word)
    if length <= 1:
        return 0
    if length <= 5:
        return 1
    if length <= 9:
        return 2
    if length <= 13:
        return 3
    return min(4, length - 1)


def word_parts(word: str) -> WordParts:
    """Split *word* around its focal character; the parts rejoin to *word*."""
    i = focal_character_index(word)
    return WordParts(word[:i], word[i : i + 1], word[i + 1 :])
