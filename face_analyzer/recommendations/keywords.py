from __future__ import annotations

import re
from collections.abc import Collection

STOP_WORDS: frozenset[str] = frozenset(
    {"and", "or", "the", "a", "for", "in", "to", "of", "with", "on", "is", "it", ""}
)
MIN_KEYWORD_LENGTH = 3

# Anything that is not a word character, whitespace, apostrophe or hyphen.
_STRIP_RE = re.compile(r"[^\w\s'-]")


def extract_keywords(
    text: str | None,
    stop_words: Collection[str] = STOP_WORDS,
    min_length: int = MIN_KEYWORD_LENGTH,
) -> list[str]:
    """
    Lowercase ``text``, drop punctuation and split it into keywords.

    Stop words and tokens shorter than ``min_length`` are removed. Order and
    duplicates are kept, since overlap counts depend on multiplicity.
    """
    if not text:
        return []
    cleaned = _STRIP_RE.sub("", text.lower())
    return [
        word for word in cleaned.split()
        if word not in stop_words and len(word) >= min_length
    ]
