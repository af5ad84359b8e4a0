"""
Sentence chunker with token-estimated overlap.

Splits long text into ordered, bounded chunks. Sentences are never split:
an oversize sentence becomes a chunk of its own. Each new chunk is seeded
with the tail words of the previous one so concepts that straddle a
boundary stay retrievable from both sides.

Dependencies: re, math
System role: First stage of knowledge ingestion
"""

import math
import re
from typing import Iterator

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")

DEFAULT_MAX_TOKENS = 500
DEFAULT_OVERLAP_TOKENS = 50


def estimate_tokens(text: str) -> int:
    """
    Estimate token count (~4 characters per token, rounded up).

    Heuristic only; used for chunk-size accounting, never billing.
    """
    return math.ceil(len(text) / 4)


def split_sentences(text: str) -> list[str]:
    """Split text at sentence punctuation followed by whitespace."""
    return [s.strip() for s in SENTENCE_BOUNDARY.split(text.strip()) if s.strip()]


def _overlap_tail(chunk: str, overlap_tokens: int) -> str:
    """Walk backward word by word until the accumulated cost reaches overlap_tokens."""
    tail: list[str] = []
    count = 0
    for word in reversed(chunk.split()):
        if count >= overlap_tokens:
            break
        tail.append(word)
        count += estimate_tokens(word)
    return " ".join(reversed(tail))


def iter_chunks(
    text: str,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    overlap_tokens: int = DEFAULT_OVERLAP_TOKENS,
) -> Iterator[str]:
    """
    Lazily yield chunks of text.

    Args:
        text: Source text
        max_tokens: Estimated token budget per chunk
        overlap_tokens: Estimated tokens carried over from the previous chunk

    Yields:
        str: Non-empty, stripped chunk text in source order

    Raises:
        ValueError: If max_tokens < 1 or overlap_tokens < 0
    """
    if max_tokens < 1:
        raise ValueError("max_tokens must be at least 1")
    if overlap_tokens < 0:
        raise ValueError("overlap_tokens cannot be negative")

    current = ""
    current_tokens = 0

    for sentence in split_sentences(text):
        sentence_tokens = estimate_tokens(sentence)

        if current_tokens + sentence_tokens > max_tokens and current:
            yield current.strip()

            overlap = _overlap_tail(current, overlap_tokens)
            current = f"{overlap} {sentence}" if overlap else sentence
            current_tokens = estimate_tokens(current)
        else:
            current = f"{current} {sentence}" if current else sentence
            current_tokens += sentence_tokens

    if current.strip():
        yield current.strip()


def chunk_text(
    text: str,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    overlap_tokens: int = DEFAULT_OVERLAP_TOKENS,
) -> list[str]:
    """Chunk text eagerly. See iter_chunks."""
    return list(iter_chunks(text, max_tokens, overlap_tokens))


class SentenceChunker:
    """Sentence chunker with constructor-held token budgets."""

    def __init__(
        self,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        overlap_tokens: int = DEFAULT_OVERLAP_TOKENS,
    ) -> None:
        """
        Initialize chunker configuration.

        Args:
            max_tokens: Estimated token budget per chunk
            overlap_tokens: Estimated tokens carried over between chunks

        Raises:
            ValueError: When budgets are out of range
        """
        if max_tokens < 1:
            raise ValueError("max_tokens must be at least 1")
        if overlap_tokens < 0:
            raise ValueError("overlap_tokens cannot be negative")
        self.max_tokens = max_tokens
        self.overlap_tokens = overlap_tokens

    def chunk(self, text: str) -> list[str]:
        """
        Split text into overlapping chunks.

        Args:
            text: Artifact text

        Returns:
            list[str]: Ordered chunks (empty for blank text)
        """
        return chunk_text(text, self.max_tokens, self.overlap_tokens)
