from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

from . import split_text

logger = logging.getLogger(__name__)

__all__ = ["TextChunk", "ChunkBuilder", "chunk_text"]

DEFAULT_MAX_CHUNK_CHARS = 2800


@dataclass(frozen=True)
class TextChunk:
    index: int
    text: str
    sentence_count: int

    def __len__(self) -> int:
        return len(self.text)


class ChunkBuilder:
    """
    Groups sentences into chunks no longer than ``max_chars`` characters.

    Sentences are joined with a single space and never reordered. A sentence
    that is too long on its own is split on word boundaries, and every word
    group becomes a chunk of its own.
    """

    def __init__(self, max_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> None:
        if max_chars <= 0:
            raise ValueError("max_chars must be positive.")
        self.max_chars = max_chars

    def build_chunks(self, sentences: Iterable[str]) -> List[TextChunk]:
        chunks: List[TextChunk] = []
        current: List[str] = []
        current_len = 0

        def flush() -> None:
            nonlocal current, current_len
            if current:
                self._append(chunks, " ".join(current), len(current))
                current = []
                current_len = 0

        for sentence in sentences:
            sentence = sentence.strip()
            if not sentence:
                continue

            if len(sentence) > self.max_chars:
                flush()
                fragments = split_text.pack_words(sentence, self.max_chars)
                logger.debug(
                    "Sentence of %d chars exceeds max %d; split into %d word groups.",
                    len(sentence),
                    self.max_chars,
                    len(fragments),
                )
                for fragment in fragments:
                    self._append(chunks, fragment, 1)
                continue

            separator = 1 if current else 0
            if current and current_len + separator + len(sentence) > self.max_chars:
                flush()
                separator = 0

            current.append(sentence)
            current_len += separator + len(sentence)

        flush()
        logger.debug("Built %d chunk(s) with max %d chars.", len(chunks), self.max_chars)
        return chunks

    @staticmethod
    def _append(chunks: List[TextChunk], text: str, sentence_count: int) -> None:
        chunks.append(TextChunk(index=len(chunks), text=text, sentence_count=sentence_count))


def chunk_text(text: str, max_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> List[TextChunk]:
    return ChunkBuilder(max_chars).build_chunks(split_text.split_into_sentences(text))
