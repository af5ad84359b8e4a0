import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from knowledge_core.api.main import create_app
from knowledge_core.api.deps.dependencies import get_knowledge_service
from knowledge_core.application.services.knowledge_service import KnowledgeService
from knowledge_core.core.context_builder import build_context
from knowledge_core.core.exceptions import IndexingError, RetrievalError, SourceNotFoundError
from knowledge_core.models.knowledge import (
    ChunkOutcome,
    ChunkStatus,
    IndexResult,
    IndexStats,
    IndexStatus,
    MatchType,
    ReembedResult,
    SearchResult,
    SourceType,
)


@pytest.fixture
def mock_knowledge_service():
    service = MagicMock(spec=KnowledgeService)
    service.search = AsyncMock()
    service.index_content = AsyncMock()
    service.refresh_content = AsyncMock()
    service.delete_source = AsyncMock()
    service.get_index_stats = AsyncMock()
    service.reembed_missing = AsyncMock()
    service.build_context = MagicMock(side_effect=build_context)
    return service


@pytest.fixture
def client(mock_knowledge_service):
    app = create_app()
    app.dependency_overrides[get_knowledge_service] = lambda: mock_knowledge_service
    return TestClient(app)


def make_result(content, similarity=0.95, match_type=MatchType.LEXICAL, title="Metabolismo de la Glucosa"):
    return SearchResult(
        id=uuid4(),
        content=content,
        similarity=similarity,
        match_type=match_type,
        source_type=SourceType.SLIDE,
        source_id="s1",
        lesson_id="l1",
        title=title,
        tags=["bioquimica"],
    )


def test_search_returns_results_and_total(client, mock_knowledge_service):
    result = make_result("La glucosa es un monosacárido.")
    mock_knowledge_service.search.return_value = {"results": [result], "total_results": 1}

    response = client.post("/api/v1/knowledge/search", json={"query": "glucosa"})

    assert response.status_code == 200
    data = response.json()
    assert data["query"] == "glucosa"
    assert data["total_results"] == 1
    assert data["context"] is None
    assert data["results"][0]["id"] == str(result.id)
    assert data["results"][0]["similarity"] == 0.95
    assert data["results"][0]["source_type"] == "slide"
    assert data["results"][0]["match_type"] == "lexical"
    mock_knowledge_service.build_context.assert_not_called()


def test_search_passes_validated_filters_and_default_limit(client, mock_knowledge_service):
    mock_knowledge_service.search.return_value = {"results": [], "total_results": 0}

    response = client.post(
        "/api/v1/knowledge/search",
        json={
            "query": "glucosa",
            "filters": {"source_types": ["slide", "cornell-note"], "program_id": "medicina"},
        },
    )

    assert response.status_code == 200
    kwargs = mock_knowledge_service.search.await_args.kwargs
    assert kwargs["limit"] == 10
    assert kwargs["filters"].source_types == frozenset({SourceType.SLIDE, SourceType.CORNELL_NOTE})
    assert kwargs["filters"].program_id == "medicina"
    assert kwargs["filters"].min_similarity == 0.2


def test_search_truncates_preview_but_not_context(client, mock_knowledge_service):
    long_content = "a" * 600
    mock_knowledge_service.search.return_value = {"results": [make_result(long_content)], "total_results": 1}

    response = client.post("/api/v1/knowledge/search", json={"query": "a", "include_context": True})

    assert response.status_code == 200
    data = response.json()
    assert data["results"][0]["content"] == "a" * 500 + "..."
    assert data["context"] == "[1] (Metabolismo de la Glucosa, relevance: 95%)\n" + long_content


def test_search_rejects_unknown_source_type_before_store_access(client, mock_knowledge_service):
    response = client.post(
        "/api/v1/knowledge/search",
        json={"query": "glucosa", "filters": {"source_types": ["podcast"]}},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "source_types"
    mock_knowledge_service.search.assert_not_awaited()


@pytest.mark.parametrize(
    "payload, expected_status",
    [
        ({"query": ""}, 422),
        ({"query": "   "}, 400),
        ({"query": "glucosa", "limit": 0}, 422),
        ({"query": "glucosa", "limit": 51}, 400),
        ({"query": "glucosa", "filters": {"min_similarity": 1.5}}, 400),
    ],
)
def test_search_rejects_malformed_input(client, mock_knowledge_service, payload, expected_status):
    response = client.post("/api/v1/knowledge/search", json=payload)

    assert response.status_code == expected_status
    mock_knowledge_service.search.assert_not_awaited()


def test_search_store_failure_returns_500(client, mock_knowledge_service):
    mock_knowledge_service.search.side_effect = RetrievalError("Lexical search failed")

    response = client.post("/api/v1/knowledge/search", json={"query": "glucosa"})

    assert response.status_code == 500


def test_index_returns_status_and_outcomes(client, mock_knowledge_service):
    chunk_ids = [uuid4(), uuid4()]
    mock_knowledge_service.index_content.return_value = IndexResult(
        source_type=SourceType.TRANSCRIPT,
        source_id="t1",
        status=IndexStatus.PARTIAL,
        chunk_ids=chunk_ids,
        outcomes=[
            ChunkOutcome(index=0, status=ChunkStatus.EMBEDDED, chunk_id=chunk_ids[0], token_count=12),
            ChunkOutcome(index=1, status=ChunkStatus.UNEMBEDDED, chunk_id=chunk_ids[1], token_count=9,
                         error="provider unavailable"),
        ],
    )

    response = client.post(
        "/api/v1/knowledge/index",
        json={
            "content": "Texto de la clase.",
            "source_type": "transcript",
            "source_id": "t1",
            "program_id": "medicina",
            "tags": ["b", "a", "a"],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "partial"
    assert data["chunk_ids"] == [str(i) for i in chunk_ids]
    assert data["embedded"] == 1
    assert data["unembedded"] == 1
    metadata = mock_knowledge_service.index_content.await_args.args[1]
    assert metadata.source_type == SourceType.TRANSCRIPT
    assert metadata.tags == ["a", "b"]


def test_index_already_indexed_is_not_an_error(client, mock_knowledge_service):
    mock_knowledge_service.index_content.return_value = IndexResult(
        source_type=SourceType.SLIDE, source_id="s1", status=IndexStatus.ALREADY_INDEXED
    )

    response = client.post(
        "/api/v1/knowledge/index",
        json={"content": "Texto", "source_type": "slide", "source_id": "s1"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "already_indexed"
    assert response.json()["chunk_ids"] == []


def test_refresh_reports_reindex_result(client, mock_knowledge_service):
    chunk_id = uuid4()
    mock_knowledge_service.refresh_content.return_value = IndexResult(
        source_type=SourceType.SLIDE,
        source_id="s1",
        status=IndexStatus.COMPLETE,
        chunk_ids=[chunk_id],
        outcomes=[ChunkOutcome(index=0, status=ChunkStatus.EMBEDDED, chunk_id=chunk_id, token_count=8)],
    )

    response = client.post(
        "/api/v1/knowledge/refresh",
        json={"content": "Texto corregido de la diapositiva.", "source_type": "slide", "source_id": "s1"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "complete"
    assert response.json()["chunk_ids"] == [str(chunk_id)]
    content, metadata = mock_knowledge_service.refresh_content.await_args.args
    assert content == "Texto corregido de la diapositiva."
    assert metadata.source_type == SourceType.SLIDE
    mock_knowledge_service.index_content.assert_not_awaited()


def test_index_rejects_unknown_source_type(client, mock_knowledge_service):
    response = client.post(
        "/api/v1/knowledge/index",
        json={"content": "Texto", "source_type": "video", "source_id": "v1"},
    )

    assert response.status_code == 400
    mock_knowledge_service.index_content.assert_not_awaited()


def test_index_store_failure_returns_500(client, mock_knowledge_service):
    mock_knowledge_service.index_content.side_effect = IndexingError("Failed to store chunks")

    response = client.post(
        "/api/v1/knowledge/index",
        json={"content": "Texto", "source_type": "slide", "source_id": "s1"},
    )

    assert response.status_code == 500


def test_delete_source(client, mock_knowledge_service):
    mock_knowledge_service.delete_source.return_value = 4

    response = client.delete("/api/v1/knowledge/sources/cornell-note/n1")

    assert response.status_code == 200
    assert response.json() == {"source_type": "cornell-note", "source_id": "n1", "deleted": 4}
    mock_knowledge_service.delete_source.assert_awaited_once_with(SourceType.CORNELL_NOTE, "n1")


def test_delete_source_not_found(client, mock_knowledge_service):
    mock_knowledge_service.delete_source.side_effect = SourceNotFoundError("slide", "missing")

    response = client.delete("/api/v1/knowledge/sources/slide/missing")

    assert response.status_code == 404


def test_delete_source_unknown_type(client, mock_knowledge_service):
    response = client.delete("/api/v1/knowledge/sources/podcast/p1")

    assert response.status_code == 400
    mock_knowledge_service.delete_source.assert_not_awaited()


def test_get_stats(client, mock_knowledge_service):
    mock_knowledge_service.get_index_stats.return_value = IndexStats(
        total_chunks=5,
        by_source_type={"slide": 3, "transcript": 2},
        by_program={"medicina": 5},
        missing_embeddings=1,
        partial_sources=1,
    )

    response = client.get("/api/v1/knowledge/stats")

    assert response.status_code == 200
    assert response.json()["total_chunks"] == 5
    assert response.json()["by_source_type"] == {"slide": 3, "transcript": 2}


def test_reembed(client, mock_knowledge_service):
    mock_knowledge_service.reembed_missing.return_value = ReembedResult(
        attempted=3, embedded=2, failed=1, completed_sources=1
    )

    response = client.post("/api/v1/knowledge/reembed?limit=25")

    assert response.status_code == 200
    assert response.json()["embedded"] == 2
    mock_knowledge_service.reembed_missing.assert_awaited_once_with(limit=25)


def test_reembed_rejects_bad_limit(client, mock_knowledge_service):
    response = client.post("/api/v1/knowledge/reembed?limit=0")

    assert response.status_code == 400
    mock_knowledge_service.reembed_missing.assert_not_awaited()


def test_unexpected_error_returns_500(client, mock_knowledge_service):
    mock_knowledge_service.get_index_stats.side_effect = RuntimeError("boom")

    response = client.get("/api/v1/knowledge/stats")

    assert response.status_code == 500
