"""Ollama embedding provider adapter (local/free).

Calls Ollama's native ``POST /api/embeddings`` endpoint with
``{"model": ..., "prompt": ...}`` and reads the ``embedding`` array from the
reply.  Runs locally with no API key.  The vector length is whatever the
model produces; the index dimension in settings must agree with it.
"""

from __future__ import annotations

import httpx
import structlog

from tenant_rag.config.settings import Settings
from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.utils.errors import InvalidResponseFormat, TransportError
from tenant_rag.utils.retry import RetryPolicy, retry_async

logger = structlog.get_logger(logger_name=__name__)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class OllamaEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by a model served through Ollama.

    The shared ``httpx.AsyncClient`` is injected so one connection pool
    serves the embedding and generation providers alike.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._model = settings.embedding_model
        self._dimension = settings.embedding_dimension
        self._timeout = settings.http_timeout
        self._http = http_client
        self._retry_policy = retry_policy or RetryPolicy.no_retry()

    async def embed(self, text: str) -> list[float]:
        return await retry_async(
            lambda: self._request_embedding(text),
            self._retry_policy,
            operation_name="ollama_embed",
        )

    async def _request_embedding(self, text: str) -> list[float]:
        url = f"{self._base_url}/api/embeddings"
        try:
            response = await self._http.post(
                url,
                json={"model": self._model, "prompt": text},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise TransportError(
                message=f"Embedding request to {url} failed: {exc}",
                provider_name=self.get_provider_name(),
                stage="embed",
            ) from exc

        if not response.is_success:
            raise TransportError(
                message=f"Embedding request failed with status {response.status_code}",
                provider_name=self.get_provider_name(),
                stage="embed",
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise InvalidResponseFormat(
                message="Embedding response is not valid JSON",
                provider_name=self.get_provider_name(),
                stage="embed",
            ) from exc

        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(embedding, list) or not embedding or not all(_is_number(v) for v in embedding):
            raise InvalidResponseFormat(
                message="Invalid embedding format received from Ollama",
                provider_name=self.get_provider_name(),
                stage="embed",
            )

        logger.debug("ollama_embedding", model=self._model, dimension=len(embedding))
        return [float(v) for v in embedding]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "ollama_embedding"

    def is_available(self) -> bool:
        return bool(self._base_url and self._model)
