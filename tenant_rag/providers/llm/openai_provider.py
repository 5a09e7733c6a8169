"""OpenAI-compatible generation provider adapter.

Sends the fully built prompt as a single user message to a chat-completions
endpoint.  ``openai_base_url`` redirects it to any compatible server.
"""

from __future__ import annotations

import openai
import structlog

from tenant_rag.config.settings import Settings
from tenant_rag.interfaces.llm_provider import ILLMProvider
from tenant_rag.utils.errors import ConfigurationError, InvalidResponseFormat, TransportError
from tenant_rag.utils.retry import RetryPolicy, retry_async

logger = structlog.get_logger(logger_name=__name__)


class OpenAILLMProvider(ILLMProvider):
    """Generation provider backed by an OpenAI-compatible chat API."""

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
        self._model = settings.openai_text_model
        self._retry_policy = retry_policy or RetryPolicy.no_retry()
        self._provider_label = "openai-compatible" if settings.openai_base_url else "openai"

    async def generate(self, prompt: str) -> str:
        return await retry_async(
            lambda: self._request_generation(prompt),
            self._retry_policy,
            operation_name="openai_generate",
        )

    async def _request_generation(self, prompt: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.APIError as exc:
            raise TransportError(
                message=f"Generation API error: {exc}",
                provider_name=self.get_provider_name(),
                stage="generate",
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if content is None:
            raise InvalidResponseFormat(
                message="Chat completion returned no content",
                provider_name=self.get_provider_name(),
                stage="generate",
            )
        logger.info("openai_generation", model=self._model, chars=len(content))
        return content

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        return bool(self._api_key)
