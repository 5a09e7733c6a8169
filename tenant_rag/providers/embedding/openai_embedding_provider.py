"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client.  Works against real OpenAI or any
compatible server (TogetherAI, vLLM, Ollama's ``/v1``) via ``openai_base_url``.
"""

from __future__ import annotations

import openai
import structlog

from tenant_rag.config.settings import Settings
from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.utils.errors import ConfigurationError, InvalidResponseFormat, TransportError
from tenant_rag.utils.retry import RetryPolicy, retry_async

logger = structlog.get_logger(logger_name=__name__)


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API."""

    def __init__(
        self,
        settings: Settings,
        client: openai.AsyncOpenAI | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        if client is None:
            if not settings.openai_api_key and not settings.openai_base_url:
                raise ConfigurationError(
                    message="OPENAI_API_KEY or OPENAI_BASE_URL is required for the openai backend",
                    provider_name="openai",
                )
            client_kwargs: dict = {"api_key": settings.openai_api_key, "timeout": settings.http_timeout}
            if settings.openai_base_url:
                client_kwargs["base_url"] = settings.openai_base_url
            client = openai.AsyncOpenAI(**client_kwargs)
        self._client = client
        self._api_key = settings.openai_api_key
        self._model = settings.openai_embedding_model
        self._dimension = settings.embedding_dimension
        self._retry_policy = retry_policy or RetryPolicy.no_retry()
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )

    async def embed(self, text: str) -> list[float]:
        return await retry_async(
            lambda: self._request_embedding(text),
            self._retry_policy,
            operation_name="openai_embed",
        )

    async def _request_embedding(self, text: str) -> list[float]:
        try:
            response = await self._client.embeddings.create(input=text, model=self._model)
        except openai.APIError as exc:
            raise TransportError(
                message=f"Embedding API error: {exc}",
                provider_name=self.get_provider_name(),
                stage="embed",
            ) from exc

        if not response.data or not response.data[0].embedding:
            raise InvalidResponseFormat(
                message="Embedding response contained no vector",
                provider_name=self.get_provider_name(),
                stage="embed",
            )
        embedding = list(response.data[0].embedding)
        logger.debug("openai_embedding", model=self._model, dimension=len(embedding))
        return embedding

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        return bool(self._api_key)
