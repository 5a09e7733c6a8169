"""Abstract base class for text-generation service providers.

The answer service builds the full prompt; a provider only ships it to the
model and hands back the generated text.  No prompt engineering happens here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations (tenant_rag/providers/llm/):
#   OllamaLLMProvider  -- local Ollama, {model, prompt, stream: false} -> response
#   OpenAILLMProvider  -- OpenAI-compatible chat completion
class ILLMProvider(ABC):
    """Contract for text-generation services."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the model's completion for *prompt*.

        Raises
        ------
        tenant_rag.utils.errors.TransportError
            Non-2xx status or connection failure.
        tenant_rag.utils.errors.InvalidResponseFormat
            The response carries no text field.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"ollama"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the provider is configured well enough to be called."""
