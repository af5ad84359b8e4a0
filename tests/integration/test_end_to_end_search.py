"""
End-to-end test of index -> search -> context on a small study corpus.

System role: Verification of the full retrieval pipeline
"""

from sqlalchemy.ext.asyncio import AsyncSession

from conftest import KeywordEmbeddingClient
from knowledge_core.core.context_builder import build_context
from knowledge_core.core.indexer import Indexer
from knowledge_core.core.retriever import HybridRetriever
from knowledge_core.models.knowledge import IndexStatus, SearchFilters, SourceMetadata, SourceType


async def test_glucosa_search_should_rank_title_hit_first_and_drop_unrelated(
    keyword_client: KeywordEmbeddingClient,
    test_async_db: AsyncSession,
) -> None:
    # Arrange
    indexer = Indexer(keyword_client)
    corpus = [
        (
            SourceMetadata(source_type=SourceType.SLIDE, source_id="1", title="Metabolismo de la Glucosa"),
            "La glucólisis convierte la glucosa en piruvato y produce ATP.",
        ),
        (
            SourceMetadata(source_type=SourceType.TRANSCRIPT, source_id="2"),
            "La glucólisis ocurre en el citoplasma y genera energía en forma de ATP.",
        ),
        (
            SourceMetadata(source_type=SourceType.SUMMARY, source_id="3"),
            "La Revolución Francesa comenzó en 1789 con la toma de la Bastilla.",
        ),
    ]
    for metadata, content in corpus:
        result = await indexer.index(test_async_db, content, metadata)
        assert result.status == IndexStatus.COMPLETE

    retriever = HybridRetriever(keyword_client)

    # Act
    results = await retriever.search(test_async_db, "glucosa", filters=SearchFilters(min_similarity=0.2))
    context = build_context(results)

    # Assert
    assert results[0].source_id == "1"
    assert results[0].similarity == 0.95
    assert "3" not in {r.source_id for r in results}
    assert [r.source_id for r in results] == ["1", "2"]
    assert context.startswith("[1] (Metabolismo de la Glucosa, relevance: 95%)\n")
    assert "[2] (transcript/2, relevance: 41%)" in context
