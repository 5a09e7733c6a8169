"""Ollama generation provider adapter.

Calls Ollama's native ``POST /api/generate`` with
``{"model": ..., "prompt": ..., "stream": false}`` and returns the
``response`` field.  Non-streaming: the whole answer arrives in one JSON body.

Setup: install Ollama, ``ollama pull llama3.2``, and point
OLLAMA_BASE_URL at it (default http://localhost:11434).
"""

from __future__ import annotations

import httpx
import structlog

from tenant_rag.config.settings import Settings
from tenant_rag.interfaces.llm_provider import ILLMProvider
from tenant_rag.utils.errors import InvalidResponseFormat, TransportError
from tenant_rag.utils.retry import RetryPolicy, retry_async

logger = structlog.get_logger(logger_name=__name__)


class OllamaLLMProvider(ILLMProvider):
    """Generation provider backed by a local Ollama server."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._model = settings.generation_model
        self._timeout = settings.http_timeout
        self._http = http_client
        self._retry_policy = retry_policy or RetryPolicy.no_retry()

    async def generate(self, prompt: str) -> str:
        return await retry_async(
            lambda: self._request_generation(prompt),
            self._retry_policy,
            operation_name="ollama_generate",
        )

    async def _request_generation(self, prompt: str) -> str:
        url = f"{self._base_url}/api/generate"
        try:
            response = await self._http.post(
                url,
                json={"model": self._model, "prompt": prompt, "stream": False},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise TransportError(
                message=f"Generation request to {url} failed: {exc}",
                provider_name=self.get_provider_name(),
                stage="generate",
            ) from exc

        if not response.is_success:
            raise TransportError(
                message=f"Generation request failed with status {response.status_code}",
                provider_name=self.get_provider_name(),
                stage="generate",
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise InvalidResponseFormat(
                message="Generation response is not valid JSON",
                provider_name=self.get_provider_name(),
                stage="generate",
            ) from exc

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise InvalidResponseFormat(
                message="Generation response has no text 'response' field",
                provider_name=self.get_provider_name(),
                stage="generate",
            )
        logger.info("ollama_generation", model=self._model, chars=len(text))
        return text

    def get_provider_name(self) -> str:
        return "ollama"

    def is_available(self) -> bool:
        return bool(self._base_url and self._model)
