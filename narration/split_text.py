from __future__ import annotations

import logging
import re
from typing import List

logger = logging.getLogger(__name__)

__all__ = ["SENTENCE_TERMINATORS", "split_into_sentences", "pack_words"]

SENTENCE_TERMINATORS = ".?!"
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.?!])")


def split_into_sentences(text: str) -> List[str]:
    """
    Split text into sentences after every ``.``, ``?`` and ``!``.

    Each terminator stays attached to the sentence it ends. Abbreviations and
    decimal numbers are not special-cased, so "Mr. Smith" and "3.14" are split
    as well. Segments are stripped and blank segments are dropped.
    """
    text = text or ""
    if not text.strip():
        return []

    sentences = []
    for part in _SENTENCE_BOUNDARY.split(text):
        part = part.strip()
        if part:
            sentences.append(part)
    return sentences


def pack_words(sentence: str, max_chars: int) -> List[str]:
    """
    Greedily pack whitespace-delimited words into groups of at most ``max_chars``.

    Words are joined by a single space. A word that is longer than ``max_chars``
    on its own is emitted verbatim as its own group rather than being cut.
    """
    if max_chars <= 0:
        raise ValueError("max_chars must be positive.")

    groups: List[str] = []
    current = ""
    for word in sentence.split():
        if not current:
            current = word
            continue
        candidate = f"{current} {word}"
        if len(candidate) <= max_chars:
            current = candidate
        else:
            groups.append(current)
            current = word

    if current:
        groups.append(current)

    oversized = [group for group in groups if len(group) > max_chars]
    if oversized:
        logger.warning(
            "%d word(s) exceed the %d character limit and are kept whole.",
            len(oversized),
            max_chars,
        )
    return groups
