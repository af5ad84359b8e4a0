"""
Batch indexing CLI.

Reads one JSON artifact per line and indexes each through the Indexer in
its own session, so one bad artifact never stops the run. Prints per-type
totals and final index statistics.

Each line: {"content": ..., "source_type": ..., "source_id": ...,
            "lesson_id"?, "subject_id"?, "program_id"?, "title"?, "tags"?}

Usage:
    python -m knowledge_core.scripts.index_knowledge ARTIFACTS.jsonl [--type slide] [--limit 20] [--refresh]

Dependencies: typer, knowledge_core.core, knowledge_core.boundary
System role: Backfill entry point for upstream artifacts
"""

import asyncio
import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Iterator

import typer
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker

from knowledge_core.application.services.knowledge_service import KnowledgeService
from knowledge_core.boundary.db.connection import get_async_engine, get_async_session_factory
from knowledge_core.boundary.db.create_tables import create_all_tables
from knowledge_core.boundary.embeddings.embedding_client_factory import create_embedding_client
from knowledge_core.configs import get_settings
from knowledge_core.core.exceptions import KnowledgeBaseException
from knowledge_core.core.indexer import Indexer
from knowledge_core.core.retriever import HybridRetriever
from knowledge_core.models.knowledge import IndexStats, SourceMetadata, SourceType
from knowledge_core.observability import configure_logging

app = typer.Typer(help="Index study artifacts into the knowledge store")
logger = logging.getLogger(__name__)

ERRORS = "errors"


def read_artifacts(path: Path) -> Iterator[tuple[int, dict | None, str | None]]:
    """Yield (line number, artifact or None, parse error or None) per non-blank line."""
    with path.open(encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            try:
                artifact = json.loads(line)
            except json.JSONDecodeError as e:
                yield line_no, None, str(e)
                continue
            if not isinstance(artifact, dict):
                yield line_no, None, "artifact must be a JSON object"
                continue
            yield line_no, artifact, None


async def index_artifacts(
    path: Path,
    session_factory: async_sessionmaker,
    indexer: Indexer,
    source_type: SourceType | None = None,
    limit: int | None = None,
    refresh: bool = False,
) -> dict[str, dict[str, int]]:
    """
    Index every artifact of a JSONL file.

    Args:
        path: JSONL file with one artifact per line
        session_factory: Factory for per-artifact sessions
        indexer: Indexer sharing one embedding client
        source_type: Only index artifacts of this type
        limit: Stop after this many artifacts were attempted
        refresh: Re-index artifacts whose content hash changed

    Returns:
        dict: Per source type, counts keyed by IndexStatus value plus "errors"
    """
    totals: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    attempted = 0

    for line_no, artifact, parse_error in read_artifacts(path):
        if limit is not None and attempted >= limit:
            break

        if parse_error is not None:
            logger.warning(f"{__name__}:index_artifacts - Unreadable line {line_no}", extra={"error": parse_error})
            totals["unknown"][ERRORS] += 1
            continue

        raw_type = str(artifact.get("source_type", "unknown"))
        if source_type is not None and raw_type != source_type.value:
            continue

        attempted += 1
        try:
            metadata = SourceMetadata(
                source_type=raw_type,
                source_id=str(artifact.get("source_id", "")),
                lesson_id=artifact.get("lesson_id"),
                subject_id=artifact.get("subject_id"),
                program_id=artifact.get("program_id"),
                title=artifact.get("title"),
                tags=artifact.get("tags") or [],
            )
            content = str(artifact.get("content") or "")
            async with session_factory() as db:
                if refresh and await indexer.is_stale(db, metadata.source_type, metadata.source_id, content):
                    result = await indexer.reindex(db, content, metadata)
                else:
                    result = await indexer.index(db, content, metadata)
        except (PydanticValidationError, KnowledgeBaseException) as e:
            logger.error(
                f"{__name__}:index_artifacts - Artifact on line {line_no} failed",
                extra={"source_type": raw_type, "error": str(e)},
            )
            totals[raw_type][ERRORS] += 1
            continue

        totals[raw_type][result.status.value] += 1

    return {kind: dict(counts) for kind, counts in totals.items()}


def format_summary(totals: dict[str, dict[str, int]], stats: IndexStats) -> str:
    lines = ["Indexing summary:"]
    for kind in sorted(totals):
        counts = ", ".join(f"{name}={count}" for name, count in sorted(totals[kind].items()))
        lines.append(f"  {kind}: {counts}")
    lines.append(f"Total chunks: {stats.total_chunks}")
    for kind, count in sorted(stats.by_source_type.items()):
        lines.append(f"  {kind}: {count}")
    lines.append(f"Missing embeddings: {stats.missing_embeddings}")
    lines.append(f"Partial sources: {stats.partial_sources}")
    return "\n".join(lines)


async def _run(path: Path, source_type: SourceType | None, limit: int | None, refresh: bool) -> str:
    settings = get_settings()
    await create_all_tables(get_async_engine())

    embedding_client = create_embedding_client(settings.embedding)
    indexer = Indexer(embedding_client, chunking=settings.chunking)
    session_factory = get_async_session_factory()

    totals = await index_artifacts(path, session_factory, indexer, source_type=source_type, limit=limit, refresh=refresh)

    async with session_factory() as db:
        service = KnowledgeService(db, indexer, HybridRetriever(embedding_client, settings.retrieval))
        stats = await service.get_index_stats()

    return format_summary(totals, stats)


@app.command()
def main(
    path: Path = typer.Argument(
        ...,
        exists=True,
        readable=True,
        dir_okay=False,
        help="JSONL file with one artifact per line.",
    ),
    source_type: str | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Only index artifacts of this source type.",
    ),
    limit: int | None = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Maximum number of artifacts to index.",
    ),
    refresh: bool = typer.Option(
        False,
        "--refresh",
        help="Re-index artifacts whose content changed since they were indexed.",
    ),
) -> None:
    """Index a JSONL file of finalized study artifacts."""
    configure_logging(get_settings().log_level)

    parsed_type = None
    if source_type is not None:
        try:
            parsed_type = SourceType(source_type)
        except ValueError:
            allowed = ", ".join(t.value for t in SourceType)
            raise typer.BadParameter(f"must be one of: {allowed}", param_hint="--type")

    summary = asyncio.run(_run(path, parsed_type, limit, refresh))
    typer.echo(summary)


if __name__ == "__main__":
    app()
