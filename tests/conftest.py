"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory async database, deterministic embedding test doubles,
sample source metadata
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import re

import pytest

from knowledge_core.boundary.embeddings.embedding_client import EmbeddingClient
from knowledge_core.core.exceptions import EmbeddingProviderError
from knowledge_core.models.knowledge import SourceMetadata, SourceType

# Each concept is one vector dimension; a text's vector counts concept words.
CONCEPTS: dict[str, set[str]] = {
    "sugar": {"glucosa", "glucose", "glucólisis", "glycolysis", "azúcar", "sugar"},
    "energy": {"energía", "energy", "atp", "piruvato", "pyruvate"},
    "history": {"revolución", "revolution", "francesa", "french", "bastilla", "rey"},
    "cell": {"célula", "cell", "mitocondria", "mitochondria", "citoplasma"},
}

WORD = re.compile(r"\w+")


class KeywordEmbeddingClient(EmbeddingClient):
    """Deterministic bag-of-concepts embedding client."""

    model_name = "keyword-test"
    dimension = len(CONCEPTS)

    def __init__(self, max_batch_size: int = 100) -> None:
        self.max_batch_size = max_batch_size
        self.embed_calls: list[str] = []
        self.batch_calls: list[list[str]] = []

    def vectorize(self, text: str) -> list[float]:
        words = WORD.findall(text.casefold())
        return [float(sum(1 for w in words if w in vocabulary)) for vocabulary in CONCEPTS.values()]

    async def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        return self.vectorize(text)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.batch_calls.append(list(texts))
        return [self.vectorize(t) for t in texts]


class FailingEmbeddingClient(EmbeddingClient):
    """Embedding client whose provider is always unavailable."""

    model_name = "failing-test"
    dimension = len(CONCEPTS)

    def __init__(self) -> None:
        self.calls = 0

    async def embed(self, text: str) -> list[float]:
        self.calls += 1
        raise EmbeddingProviderError("provider unavailable", provider="test")

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.calls += 1
        raise EmbeddingProviderError("provider unavailable", provider="test")


@pytest.fixture
async def db_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine shared by every session of one test
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool
    from knowledge_core.boundary.db.connection import register_sqlite_functions
    from knowledge_core.boundary.db.create_tables import create_all_tables, drop_all_tables

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    register_sqlite_functions(engine)
    await create_all_tables(engine)

    yield engine

    await drop_all_tables(engine)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the in-memory engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_async_db(session_factory):
    """
    Create in-memory SQLite async database session for testing.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def keyword_client() -> KeywordEmbeddingClient:
    """Provide deterministic keyword embedding client."""
    return KeywordEmbeddingClient()


@pytest.fixture
def failing_client() -> FailingEmbeddingClient:
    """Provide always-failing embedding client."""
    return FailingEmbeddingClient()


@pytest.fixture
def transcript_metadata() -> SourceMetadata:
    """Provide metadata for a lecture transcript."""
    return SourceMetadata(
        source_type=SourceType.TRANSCRIPT,
        source_id="t1",
        lesson_id="lesson-1",
        subject_id="bioquimica",
        program_id="medicina",
        title="Clase 3: Metabolismo",
        tags=["metabolismo", "clase"],
    )


@pytest.fixture
def lecture_text() -> str:
    """Provide a transcript long enough to pass the transcript minimum."""
    return (
        "La glucólisis es la primera etapa del metabolismo de la glucosa. "
        "Ocurre en el citoplasma de la célula. "
        "Produce piruvato y una pequeña cantidad de ATP."
    )
