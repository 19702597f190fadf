"""Coarse four-way classification of free-text answers.

Usage:
    from ary.extraction.classifier import classify

    classify("Honestly it's been a great week")   # → ResponseCategory.POSITIVE
    classify("Not great, I'm tired")               # → ResponseCategory.NEGATIVE

Precedence, first match wins:

  1. any negative keyword        → NEGATIVE (dominates positive keywords)
  2. any positive keyword        → POSITIVE
  3. more than 15 words          → DETAILED
  4. 3 words or fewer            → VAGUE
  5. more than 8 words           → DETAILED, otherwise VAGUE

Keywords are matched against whole tokens, so "nothing" is not "not" and
"know" is not "no".
"""

from __future__ import annotations

import re

from ary.extraction.word_lists import NEGATIVE_KEYWORDS, POSITIVE_KEYWORDS
from ary.models.records import ResponseCategory

DETAILED_WORD_COUNT = 15
VAGUE_WORD_COUNT = 3
MEDIUM_DETAILED_WORD_COUNT = 8


def _normalize(text: str | None) -> str:
    if not text:
        return ""
    # Normalize curly/smart quotes to straight apostrophes
    text = text.replace("\u2019", "'").replace("\u2018", "'")
    return text.strip().lower()


def _tokenize(text: str) -> list[str]:
    """Tokenize normalized text into words, preserving contractions."""
    return re.findall(r"\b[a-z]+(?:'[a-z]+)?\b", text)


def word_count(text: str | None) -> int:
    """Number of whitespace-separated words in ``text``."""
    return len(_normalize(text).split())


def sentiment_hits(text: str | None) -> tuple[list[str], list[str]]:
    """Return the (positive, negative) keywords found in ``text``, in order."""
    tokens = _tokenize(_normalize(text))
    positive = [t for t in tokens if t in POSITIVE_KEYWORDS]
    negative = [t for t in tokens if t in NEGATIVE_KEYWORDS]
    return positive, negative


def classify(text: str | None) -> ResponseCategory:
    """Classify an answer.  Total: every input, including empty, has a category.

    Parameters
    ----------
    text : str
        Raw user answer.  ``None`` is treated as empty.

    Returns
    -------
    ResponseCategory
    """
    positive, negative = sentiment_hits(text)
    if negative:
        return ResponseCategory.NEGATIVE
    if positive:
        return ResponseCategory.POSITIVE

    count = word_count(text)
    if count > DETAILED_WORD_COUNT:
        return ResponseCategory.DETAILED
    if count <= VAGUE_WORD_COUNT:
        return ResponseCategory.VAGUE
    if count > MEDIUM_DETAILED_WORD_COUNT:
        return ResponseCategory.DETAILED
    return ResponseCategory.VAGUE
