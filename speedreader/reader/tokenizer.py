"""Word tokenizer and trailing-punctuation classifier.

Strategy: collapse every whitespace run to a single space, trim, then split
on that space.  Punctuation is never stripped or split off, so ``well-known``,
``3.14`` and ``U.S.A.`` stay single tokens and a bare ``...`` is a token of
its own.  The classifier looks only at a token's trailing characters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

# \s plus the BOM, which browsers also treat as whitespace.
_WHITESPACE_RE = re.compile(r"[\s\ufeff]+")

EM_DASH = "\u2014"
_CLOSING_QUOTES = "\"'\u201d\u2019\u00bb"
_SENTENCE_END_RE = re.compile(rf"[.!?][{_CLOSING_QUOTES}]?$")
_PAUSE_RE = re.compile(rf"(?:[,:;{EM_DASH}]|--)[{_CLOSING_QUOTES}]?$")


class PunctuationClass(str, Enum):
    SENTENCE_END = "sentence_end"
    PAUSE = "pause"
    NONE = "none"


@dataclass(frozen=True)
class WordToken:
    """A word at a zero-based position, punctuation included."""

    index: int
    text: str

    @property
    def punctuation(self) -> PunctuationClass:
        return classify(self.text)


# ---------------------------------------------------------------------------
# Tokenizing
# ---------------------------------------------------------------------------

def normalize_spaces(text: str) -> str:
    """Replace each whitespace run with one space, keeping the ends."""
    return _WHITESPACE_RE.sub(" ", text)


def collapse_whitespace(text: str) -> str:
    """Replace each whitespace run with one space and trim the ends."""
    return normalize_spaces(text).strip()


def parse_words(text: str) -> list[str]:
    """Split *text* into word strings; see the module docstring for the rule."""
    collapsed = collapse_whitespace(text)
    if not collapsed:
        return []
    return collapsed.split(" ")


def tokenize(text: str) -> list[WordToken]:
    """Return indexed tokens for *text*.  Identical text yields identical indices."""
    return [WordToken(i, word) for i, word in enumerate(parse_words(text))]


# ---------------------------------------------------------------------------
# Classifying
# ---------------------------------------------------------------------------

def ends_sentence(word: str) -> bool:
    """True for a trailing ``.``, ``!`` or ``?``, optionally followed by a closing quote."""
    return bool(_SENTENCE_END_RE.search(word.strip()))


def has_pause_punctuation(word: str) -> bool:
    """True for a trailing ``,`` ``:`` ``;`` em dash or ``--``, optionally quoted."""
    return bool(_PAUSE_RE.search(word.strip()))


def classify(word: str) -> PunctuationClass:
    """Exactly one class per token; sentence ends take precedence over pauses."""
    if ends_sentence(word):
        return PunctuationClass.SENTENCE_END
    if has_pause_punctuation(word):
        return PunctuationClass.PAUSE
    return PunctuationClass.NONE
