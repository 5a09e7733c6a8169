"""Unit tests for AnswerService and the prompt template."""

from __future__ import annotations

import io
from unittest.mock import AsyncMock, MagicMock

import pytest

from tenant_rag.config.loader import DEFAULT_SYSTEM_PROMPT
from tenant_rag.interfaces.llm_provider import ILLMProvider
from tenant_rag.models.rag import RetrievedDocument
from tenant_rag.services.answer_service import AnswerService, build_prompt
from tenant_rag.services.retrieval_service import RetrievalService
from tenant_rag.utils.errors import TransportError, ValidationError
from tests.conftest import EchoLLM

_RULE = "-" * 60


def _retrieval(documents: list[RetrievedDocument]) -> MagicMock:
    retrieval = MagicMock(spec=RetrievalService)
    retrieval.retrieve = AsyncMock(return_value=documents)
    return retrieval


_DOCS = [
    RetrievedDocument(text="Chunk one.", similarity=0.9),
    RetrievedDocument(text="Chunk two.", similarity=0.7),
]


class TestBuildPrompt:
    def test_layout(self) -> None:
        prompt = build_prompt("Why?", "Because.", "Be brief.")
        assert prompt == (
            "System Prompt:\nBe brief.\n"
            f"{_RULE}\n"
            "Context:\nBecause.\n"
            f"{_RULE}\n"
            "Question:\nWhy?\n"
            f"{_RULE}\n"
        )

    def test_default_system_prompt(self) -> None:
        assert build_prompt("q", "c").startswith(f"System Prompt:\n{DEFAULT_SYSTEM_PROMPT}\n")


class TestAnswer:
    @pytest.mark.asyncio
    async def test_prompt_contains_joined_context(self) -> None:
        llm = EchoLLM()
        service = AnswerService(_retrieval(_DOCS), llm)

        result = await service.answer("acme", "What happened?")

        assert result.answer == "Generated answer"
        assert result.question == "What happened?"
        assert result.relevant_documents == _DOCS
        assert llm.prompts == [build_prompt("What happened?", "Chunk one.\n\nChunk two.")]

    @pytest.mark.asyncio
    async def test_default_top_k_is_three(self) -> None:
        retrieval = _retrieval(_DOCS)
        await AnswerService(retrieval, EchoLLM()).answer("acme", "q")
        retrieval.retrieve.assert_awaited_once_with("acme", "q", 3)

    @pytest.mark.asyncio
    async def test_top_k_override(self) -> None:
        retrieval = _retrieval(_DOCS)
        await AnswerService(retrieval, EchoLLM(), top_k=3).answer("acme", "q", top_k=5)
        retrieval.retrieve.assert_awaited_once_with("acme", "q", 5)

    @pytest.mark.asyncio
    async def test_empty_context_still_generates(self) -> None:
        llm = EchoLLM()
        result = await AnswerService(_retrieval([]), llm).answer("acme", "q")
        assert result.relevant_documents == []
        assert "Context:\n\n" in llm.prompts[0]

    @pytest.mark.asyncio
    async def test_custom_separator_and_prompt(self) -> None:
        llm = EchoLLM()
        service = AnswerService(_retrieval(_DOCS), llm, system_prompt="Custom.", context_separator=" | ")
        await service.answer("acme", "q")
        assert llm.prompts[0] == build_prompt("q", "Chunk one. | Chunk two.", "Custom.")

    @pytest.mark.asyncio
    async def test_missing_question(self) -> None:
        with pytest.raises(ValidationError, match="Question is required"):
            await AnswerService(_retrieval(_DOCS), EchoLLM()).answer("acme", "")

    @pytest.mark.asyncio
    async def test_generation_failure_tagged(self) -> None:
        llm = MagicMock(spec=ILLMProvider)
        llm.generate = AsyncMock(side_effect=TransportError("timeout", provider_name="ollama"))
        with pytest.raises(TransportError) as exc_info:
            await AnswerService(_retrieval(_DOCS), llm).answer("acme", "q")
        assert exc_info.value.stage == "generate"
        assert exc_info.value.tenant_id == "acme"


class TestAsk:
    @pytest.mark.asyncio
    async def test_return_data(self) -> None:
        result = await AnswerService(_retrieval(_DOCS), EchoLLM()).ask("acme", "q", return_data=True)
        assert result is not None
        assert result.answer == "Generated answer"

    @pytest.mark.asyncio
    async def test_prints_summary_by_default(self) -> None:
        stream = io.StringIO()
        returned = await AnswerService(_retrieval(_DOCS), EchoLLM()).ask("acme", "What?", stream=stream)

        assert returned is None
        output = stream.getvalue()
        assert "Question: What?" in output
        assert "1. Chunk one.... (similarity: 0.900)" in output
        assert "Answer: Generated answer" in output
