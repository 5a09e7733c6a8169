"""Answer pipeline: retrieve context, build the prompt, generate.

The prompt layout is fixed::

    System Prompt:
    <system prompt>
    ------------------------------------------------------------
    Context:
    <chunk 1>

    <chunk 2>
    ------------------------------------------------------------
    Question:
    <question>
    ------------------------------------------------------------

The top three chunks are used by default.  Callers either take the
structured :class:`~tenant_rag.models.rag.AnswerResult` (API) or have the
service print a readable summary (console).
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

import structlog

from tenant_rag.config.loader import DEFAULT_SYSTEM_PROMPT
from tenant_rag.models.rag import AnswerResult, RetrievedDocument
from tenant_rag.services.validation import require_tenant_id, require_text
from tenant_rag.utils.errors import RagPipelineError

if TYPE_CHECKING:
    from tenant_rag.interfaces.llm_provider import ILLMProvider
    from tenant_rag.services.retrieval_service import RetrievalService

logger = structlog.get_logger(logger_name=__name__)

_RULE = "-" * 60


def build_prompt(
    question: str,
    context: str,
    system_prompt: str = DEFAULT_SYSTEM_PROMPT,
) -> str:
    """Lay out *system_prompt*, *context* and *question* in the fixed template."""
    return (
        f"System Prompt:\n{system_prompt}\n"
        f"{_RULE}\n"
        f"Context:\n{context}\n"
        f"{_RULE}\n"
        f"Question:\n{question}\n"
        f"{_RULE}\n"
    )


class AnswerService:
    """Answers a tenant's question from that tenant's documents only.

    Parameters
    ----------
    retrieval_service:
        Supplies the context documents.
    llm_provider:
        Generates the answer from the assembled prompt.
    top_k:
        Number of chunks fed into the context block.
    system_prompt:
        First line of every prompt.
    context_separator:
        Joins chunk texts inside the context block.
    """

    def __init__(
        self,
        retrieval_service: RetrievalService,
        llm_provider: ILLMProvider,
        top_k: int = 3,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        context_separator: str = "\n\n",
        preview_chars: int = 100,
    ) -> None:
        self._retrieval = retrieval_service
        self._llm = llm_provider
        self._top_k = top_k
        self._system_prompt = system_prompt
        self._context_separator = context_separator
        self._preview_chars = preview_chars

    async def answer(self, tenant_id: str, question: str, top_k: int | None = None) -> AnswerResult:
        """Retrieve context for *question* and return the generated answer with its sources."""
        tenant_id = require_tenant_id(tenant_id)
        require_text(question, "Question", tenant_id=tenant_id)

        documents = await self._retrieval.retrieve(tenant_id, question, top_k or self._top_k)
        context = self.assemble_context(documents)
        logger.debug("answer_context_assembled", tenant_id=tenant_id, documents=len(documents), chars=len(context))

        prompt = build_prompt(question, context, self._system_prompt)
        try:
            answer = await self._llm.generate(prompt)
        except RagPipelineError as exc:
            raise exc.with_context(tenant_id=tenant_id, stage="generate")

        logger.info("question_answered", tenant_id=tenant_id, documents=len(documents), answer_chars=len(answer))
        return AnswerResult(question=question, relevant_documents=documents, answer=answer)

    async def ask(
        self,
        tenant_id: str,
        question: str,
        return_data: bool = False,
        stream: TextIO | None = None,
    ) -> AnswerResult | None:
        """Answer *question*; return the result, or print a summary when *return_data* is false."""
        result = await self.answer(tenant_id, question)
        if return_data:
            return result
        print(result.format_summary(self._preview_chars), file=stream or sys.stdout)
        return None

    def assemble_context(self, documents: list[RetrievedDocument]) -> str:
        return self._context_separator.join(doc.text for doc in documents)
