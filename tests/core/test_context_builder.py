"""
Test suite for context assembly.

Tests entry numbering, labels, relevance rounding and separators.

System role: Verification of the generation-step context block
"""

import uuid

import pytest

from knowledge_core.core.context_builder import (
    ENTRY_SEPARATOR,
    build_context,
    format_entry,
    similarity_percent,
)
from knowledge_core.models.knowledge import MatchType, SearchResult, SourceType


def make_result(content: str, similarity: float, title: str | None = None, **kwargs) -> SearchResult:
    return SearchResult(
        id=uuid.uuid4(),
        content=content,
        similarity=similarity,
        match_type=kwargs.pop("match_type", MatchType.SEMANTIC),
        source_type=kwargs.pop("source_type", SourceType.SLIDE),
        source_id=kwargs.pop("source_id", "s1"),
        title=title,
        **kwargs,
    )


class TestSimilarityPercent:
    """Test suite for similarity_percent()."""

    @pytest.mark.parametrize(
        "similarity, expected",
        [
            (0.95, 95),
            (0.85, 85),
            (0.125, 13),
            (0.004, 0),
            (0.005, 1),
            (1.0, 100),
            (-0.125, -13),
        ],
    )
    def test_similarity_percent_should_round_half_away_from_zero(self, similarity: float, expected: int) -> None:
        assert similarity_percent(similarity) == expected


class TestBuildContext:
    """Test suite for build_context()."""

    def test_build_context_should_return_empty_string_for_no_results(self) -> None:
        assert build_context([]) == ""

    def test_format_entry_should_use_title_as_label(self) -> None:
        # Arrange
        result = make_result("La glucosa es un monosacárido.", 0.95, title="Metabolismo de la Glucosa")

        # Act
        entry = format_entry(1, result)

        # Assert
        assert entry == "[1] (Metabolismo de la Glucosa, relevance: 95%)\nLa glucosa es un monosacárido."

    def test_format_entry_should_fall_back_to_source_label(self) -> None:
        # Arrange
        result = make_result(
            "Notas de clase.",
            0.4471,
            source_type=SourceType.CORNELL_NOTE,
            source_id="note-7",
        )

        # Act
        entry = format_entry(2, result)

        # Assert
        assert entry == "[2] (cornell-note/note-7, relevance: 45%)\nNotas de clase."

    def test_build_context_should_join_entries_in_rank_order(self) -> None:
        # Arrange
        first = make_result("Primero.", 0.95, title="A")
        second = make_result("Segundo.", 0.5, title="B")

        # Act
        context = build_context([first, second])

        # Assert
        assert context == (
            "[1] (A, relevance: 95%)\nPrimero."
            + ENTRY_SEPARATOR
            + "[2] (B, relevance: 50%)\nSegundo."
        )
        assert ENTRY_SEPARATOR == "\n\n---\n\n"

    def test_build_context_should_not_truncate_content(self) -> None:
        # Arrange
        content = "x" * 5000

        # Act
        context = build_context([make_result(content, 0.3)])

        # Assert
        assert context.endswith(content)
