"""Unit tests for the RAG pipeline data models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from tenant_rag.models.rag import (
    AnswerResult,
    DocumentChunk,
    IndexDescription,
    IngestResult,
    RetrievedDocument,
    StoredRecord,
)

_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _chunk(**overrides) -> DocumentChunk:
    fields = {
        "record_id": "doc-1-0",
        "document_id": "doc-1",
        "tenant_id": "acme",
        "chunk_index": 0,
        "total_chunks": 2,
        "text": "First chunk.",
        "ingested_at": _NOW,
    }
    fields.update(overrides)
    return DocumentChunk(**fields)


class TestDocumentChunk:
    def test_metadata_contains_pipeline_fields(self) -> None:
        meta = _chunk().to_metadata()
        assert meta == {
            "text": "First chunk.",
            "chunk_index": 0,
            "total_chunks": 2,
            "timestamp": "2024-05-01T12:00:00+00:00",
            "tenant_id": "acme",
            "document_id": "doc-1",
        }

    def test_caller_metadata_is_merged(self) -> None:
        meta = _chunk().to_metadata({"title": "Report", "author": "Kim"})
        assert meta["title"] == "Report"
        assert meta["author"] == "Kim"

    def test_pipeline_fields_win_on_clash(self) -> None:
        meta = _chunk().to_metadata({"tenant_id": "intruder", "text": "spoofed"})
        assert meta["tenant_id"] == "acme"
        assert meta["text"] == "First chunk."

    def test_frozen(self) -> None:
        chunk = _chunk()
        with pytest.raises(PydanticValidationError):
            chunk.text = "changed"  # type: ignore[misc]

    def test_negative_index_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            _chunk(chunk_index=-1)


class TestIndexDescription:
    def test_dimension_must_be_positive(self) -> None:
        with pytest.raises(PydanticValidationError):
            IndexDescription(name="idx", dimension=0)

    def test_defaults(self) -> None:
        desc = IndexDescription(name="idx", dimension=8)
        assert desc.metric == "cosine"
        assert desc.ready is False


class TestIngestResult:
    def test_message(self) -> None:
        result = IngestResult(tenant_id="acme", document_id="d", chunk_count=3)
        assert result.message == "Successfully processed 3 chunks"


class TestAnswerResult:
    def test_format_summary(self) -> None:
        result = AnswerResult(
            question="What happened?",
            relevant_documents=[
                RetrievedDocument(text="x" * 150, similarity=0.91234),
                RetrievedDocument(text="short", similarity=0.5),
            ],
            answer="Something.",
        )
        summary = result.format_summary()
        lines = summary.splitlines()
        assert lines[0] == "Question: What happened?"
        assert lines[3] == f"1. {'x' * 100}... (similarity: 0.912)"
        assert lines[4] == "2. short... (similarity: 0.500)"
        assert lines[-1] == "Answer: Something."

    def test_stored_record_defaults(self) -> None:
        record = StoredRecord(id="r", values=[0.1, 0.2])
        assert record.metadata == {}
