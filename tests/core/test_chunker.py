"""
Test suite for the sentence chunker.

Tests sentence splitting, token estimation, overlap seeding between chunks
and the oversize-sentence rule.

System role: Verification of knowledge ingestion chunking
"""

import pytest

from knowledge_core.core.chunker import (
    SentenceChunker,
    _overlap_tail,
    chunk_text,
    estimate_tokens,
    iter_chunks,
    split_sentences,
)


@pytest.fixture
def long_text() -> str:
    """Provide ~1800 estimated tokens of sentence-structured text."""
    sentence = "Sentence number {i} explains how glycolysis feeds cellular energy production."
    return " ".join(sentence.format(i=i) for i in range(90))


class TestEstimateTokens:
    """Test suite for estimate_tokens()."""

    def test_estimate_tokens_should_round_up_quarter_length(self) -> None:
        assert estimate_tokens("") == 0
        assert estimate_tokens("a") == 1
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2


class TestSplitSentences:
    """Test suite for split_sentences()."""

    def test_split_sentences_should_split_on_terminal_punctuation(self) -> None:
        # Act
        sentences = split_sentences("Hola mundo. ¿Qué tal? Muy bien! Fin")

        # Assert
        assert sentences == ["Hola mundo.", "¿Qué tal?", "Muy bien!", "Fin"]

    def test_split_sentences_should_not_split_without_whitespace(self) -> None:
        assert split_sentences("Valor 3.14 aprox.") == ["Valor 3.14 aprox."]

    def test_split_sentences_should_return_empty_for_blank(self) -> None:
        assert split_sentences("   \n\t ") == []


class TestChunkText:
    """Test suite for chunk_text()."""

    def test_chunk_text_should_return_single_chunk_for_short_text(self) -> None:
        # Act
        chunks = chunk_text("Primera oración. Segunda oración.")

        # Assert
        assert chunks == ["Primera oración. Segunda oración."]

    def test_chunk_text_should_return_nothing_for_blank_text(self) -> None:
        assert chunk_text("") == []
        assert chunk_text("   ") == []

    def test_chunk_text_should_produce_at_least_three_chunks_for_long_text(self, long_text: str) -> None:
        # Arrange
        assert 1700 <= estimate_tokens(long_text) <= 1900

        # Act
        chunks = chunk_text(long_text, max_tokens=500, overlap_tokens=50)

        # Assert
        assert len(chunks) >= 3

    def test_chunk_text_should_seed_each_chunk_with_tail_of_previous(self, long_text: str) -> None:
        # Act
        chunks = chunk_text(long_text, max_tokens=500, overlap_tokens=50)

        # Assert
        for previous, following in zip(chunks, chunks[1:]):
            overlap = _overlap_tail(previous, 50)
            assert overlap
            assert previous.endswith(overlap)
            assert following.startswith(overlap)

    def test_chunk_text_should_never_yield_blank_chunks(self, long_text: str) -> None:
        # Act
        chunks = chunk_text(long_text + "   \n\n  ", max_tokens=100, overlap_tokens=10)

        # Assert
        assert all(chunk.strip() for chunk in chunks)
        assert all(chunk == chunk.strip() for chunk in chunks)

    def test_chunk_text_should_keep_oversize_sentence_whole(self) -> None:
        # Arrange
        sentence = " ".join(["palabra"] * 600) + "."

        # Act
        chunks = chunk_text(sentence, max_tokens=500, overlap_tokens=50)

        # Assert
        assert chunks == [sentence]

    def test_chunk_text_should_flush_before_oversize_sentence(self) -> None:
        # Arrange
        short = "Una oración corta."
        huge = " ".join(["palabra"] * 600) + "."

        # Act
        chunks = chunk_text(f"{short} {huge}", max_tokens=500, overlap_tokens=5)

        # Assert
        assert len(chunks) == 2
        assert chunks[0] == short
        assert chunks[1].endswith(huge)

    def test_chunk_text_should_not_overlap_when_overlap_is_zero(self) -> None:
        # Arrange
        text = "Alpha beta gamma. Delta epsilon zeta. Eta theta iota."

        # Act
        chunks = chunk_text(text, max_tokens=5, overlap_tokens=0)

        # Assert
        assert chunks == ["Alpha beta gamma.", "Delta epsilon zeta.", "Eta theta iota."]

    def test_iter_chunks_should_reject_invalid_budgets(self) -> None:
        with pytest.raises(ValueError):
            list(iter_chunks("texto", max_tokens=0))
        with pytest.raises(ValueError):
            list(iter_chunks("texto", overlap_tokens=-1))


class TestSentenceChunker:
    """Test suite for SentenceChunker."""

    def test_chunk_should_use_configured_budgets(self, long_text: str) -> None:
        # Arrange
        chunker = SentenceChunker(max_tokens=200, overlap_tokens=20)

        # Act
        chunks = chunker.chunk(long_text)

        # Assert
        assert chunks == chunk_text(long_text, 200, 20)
        assert len(chunks) > len(chunk_text(long_text, 500, 50))

    def test_init_should_reject_invalid_budgets(self) -> None:
        with pytest.raises(ValueError):
            SentenceChunker(max_tokens=0)
        with pytest.raises(ValueError):
            SentenceChunker(overlap_tokens=-5)
