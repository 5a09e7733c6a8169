"""Unit tests for the ingest and ask CLI tools.

Handlers are driven with mocked services; ``main`` is exercised with the
component-building runner patched out so no providers are constructed.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tenant_rag.cli import ask as ask_cli
from tenant_rag.cli import ingest as ingest_cli
from tenant_rag.models.rag import AnswerResult, IngestResult, NamespaceResult, RetrievedDocument
from tenant_rag.utils.errors import ValidationError


def _ingest_result(chunks: int = 2) -> IngestResult:
    return IngestResult(tenant_id="acme", document_id="doc-1", chunk_count=chunks, elapsed_seconds=0.5)


def _components() -> dict:
    ingestion = MagicMock()
    ingestion.ingest_many = AsyncMock(return_value=[_ingest_result()])
    ingestion.ingest_pdf = AsyncMock(return_value=_ingest_result())
    ingestion.ingest_text_file = AsyncMock(return_value=_ingest_result())

    namespaces = MagicMock()
    namespaces.create_tenant = AsyncMock(
        return_value=NamespaceResult(tenant_id="acme", message="Index ready for tenant acme")
    )
    namespaces.clear_namespace = AsyncMock(
        return_value=NamespaceResult(tenant_id="acme", message="Documents cleared successfully for tenant acme")
    )
    namespaces.delete_tenant = AsyncMock(
        return_value=NamespaceResult(tenant_id="acme", message="Deleted all documents for tenant acme")
    )
    namespaces.document_count = AsyncMock(return_value=4)

    answers = MagicMock()
    answers.answer = AsyncMock(
        return_value=AnswerResult(
            question="Why?",
            relevant_documents=[RetrievedDocument(text="Because.", similarity=0.8)],
            answer="Reasons.",
        )
    )
    answers.ask = AsyncMock(return_value=None)
    return {"ingestion_service": ingestion, "namespace_service": namespaces, "answer_service": answers}


def _parse(*argv: str):
    return ingest_cli._build_parser().parse_args(list(argv))


# ======================================================================
# ingest -- handlers
# ======================================================================


class TestIngestHandlers:
    @pytest.mark.asyncio
    async def test_create(self, capsys) -> None:
        components = _components()
        assert await ingest_cli._handle_create(_parse("create", "acme"), components) == 0
        components["namespace_service"].create_tenant.assert_awaited_once_with("acme")
        assert "Index ready for tenant acme" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_text_documents(self, capsys) -> None:
        components = _components()
        await ingest_cli._handle_text(_parse("text", "acme", "First doc.", "Second doc."), components)
        components["ingestion_service"].ingest_many.assert_awaited_once_with("acme", ["First doc.", "Second doc."])
        assert "Chunks created: 2" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_pdf_file_metadata(self, tmp_path: Path) -> None:
        pdf = tmp_path / "report.pdf"
        pdf.write_bytes(b"%PDF-1.7 fake")
        components = _components()

        await ingest_cli._handle_pdf(_parse("pdf", "acme", "--file", str(pdf), "--title", "Q3"), components)

        args = components["ingestion_service"].ingest_pdf.await_args.args
        assert args[0] == "acme"
        assert args[1] == b"%PDF-1.7 fake"
        assert args[2] == {"title": "Q3", "author": "Unknown Author", "filename": "report.pdf", "filesize": 13}

    @pytest.mark.asyncio
    async def test_txt_defaults(self, tmp_path: Path) -> None:
        txt = tmp_path / "notes.txt"
        txt.write_text("Some notes.", encoding="utf-8")
        components = _components()

        await ingest_cli._handle_txt(_parse("txt", "acme", "--file", str(txt)), components)

        metadata = components["ingestion_service"].ingest_text_file.await_args.args[2]
        assert metadata["title"] == "Untitled Document"
        assert metadata["filename"] == "notes.txt"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [{"documents": ["One.", "Two."]}, ["One.", "Two."]],
    )
    async def test_batch_file_shapes(self, tmp_path: Path, payload) -> None:
        batch = tmp_path / "batch.json"
        batch.write_text(json.dumps(payload), encoding="utf-8")
        components = _components()

        await ingest_cli._handle_batch(_parse("batch", "acme", "--file", str(batch)), components)

        components["ingestion_service"].ingest_many.assert_awaited_once_with("acme", ["One.", "Two."])

    @pytest.mark.asyncio
    async def test_batch_invalid_json(self, tmp_path: Path) -> None:
        batch = tmp_path / "batch.json"
        batch.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValidationError):
            await ingest_cli._handle_batch(_parse("batch", "acme", "--file", str(batch)), _components())

    @pytest.mark.asyncio
    async def test_clear_with_yes(self) -> None:
        components = _components()
        await ingest_cli._handle_clear(_parse("clear", "acme", "--yes"), components)
        components["namespace_service"].clear_namespace.assert_awaited_once_with("acme")

    @pytest.mark.asyncio
    async def test_clear_aborted_at_prompt(self) -> None:
        components = _components()
        with patch("builtins.input", return_value="n"):
            await ingest_cli._handle_clear(_parse("clear", "acme"), components)
        components["namespace_service"].clear_namespace.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_clear_empty_namespace(self, capsys) -> None:
        components = _components()
        components["namespace_service"].document_count = AsyncMock(return_value=0)
        await ingest_cli._handle_clear(_parse("clear", "acme", "--yes"), components)
        components["namespace_service"].clear_namespace.assert_not_awaited()
        assert "Nothing to clear" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_delete_confirmed(self) -> None:
        components = _components()
        with patch("builtins.input", return_value="y"):
            await ingest_cli._handle_delete(_parse("delete", "acme"), components)
        components["namespace_service"].delete_tenant.assert_awaited_once_with("acme")


# ======================================================================
# ingest -- main
# ======================================================================


class TestIngestMain:
    def test_no_command_prints_help(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            ingest_cli.main([])
        assert exc_info.value.code == 1

    def test_success_exit_code(self) -> None:
        with patch.object(ingest_cli, "_run", new=AsyncMock(return_value=0)) as run:
            with pytest.raises(SystemExit) as exc_info:
                ingest_cli.main(["create", "acme"])
        assert exc_info.value.code == 0
        assert run.await_args.args[0].tenant == "acme"

    def test_pipeline_error_exit_code(self, capsys) -> None:
        failure = AsyncMock(side_effect=ValidationError("Tenant ID is required"))
        with patch.object(ingest_cli, "_run", new=failure):
            with pytest.raises(SystemExit) as exc_info:
                ingest_cli.main(["create", " "])
        assert exc_info.value.code == 1
        assert "Tenant ID is required" in capsys.readouterr().err


# ======================================================================
# ask
# ======================================================================


class TestAskCli:
    @pytest.mark.asyncio
    async def test_default_prints_via_service(self) -> None:
        components = _components()
        args = ask_cli._build_parser().parse_args(["acme", "Why?"])
        assert await ask_cli._ask(args, components) == 0
        components["answer_service"].ask.assert_awaited_once_with("acme", "Why?")

    @pytest.mark.asyncio
    async def test_json_output(self, capsys) -> None:
        components = _components()
        args = ask_cli._build_parser().parse_args(["acme", "Why?", "--json", "--top-k", "5"])

        await ask_cli._ask(args, components)

        components["answer_service"].answer.assert_awaited_once_with("acme", "Why?", top_k=5)
        payload = json.loads(capsys.readouterr().out)
        assert payload["answer"] == "Reasons."
        assert payload["relevant_documents"][0]["text"] == "Because."

    @pytest.mark.asyncio
    async def test_top_k_summary(self, capsys) -> None:
        components = _components()
        args = ask_cli._build_parser().parse_args(["acme", "Why?", "--top-k", "2"])
        await ask_cli._ask(args, components)
        assert "(similarity: 0.800)" in capsys.readouterr().out
