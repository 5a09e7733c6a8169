"""Abstract base class for text-embedding service providers.

Defines the contract for turning one text into one vector.  Implementations
wrap Ollama's native ``/api/embeddings`` endpoint or any OpenAI-compatible
embeddings API; the ingestion and retrieval services only ever see this ABC.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations (tenant_rag/providers/embedding/):
#   OllamaEmbeddingProvider  -- local Ollama, {model, prompt} -> embedding
#   OpenAIEmbeddingProvider  -- OpenAI-compatible embeddings.create
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by the RAG pipeline.

    No retry happens at this layer beyond what the provider's configured
    retry policy allows; failures surface to the calling service.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text.

        Parameters
        ----------
        text:
            The text to embed (a chunk at ingestion, the question at query time).

        Returns
        -------
        list[float]
            The embedding vector.

        Raises
        ------
        tenant_rag.utils.errors.TransportError
            Non-2xx status or connection failure.
        tenant_rag.utils.errors.InvalidResponseFormat
            The response carries no numeric array.
        """

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the configured length of vectors this provider produces."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"ollama-embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the provider is configured well enough to be called."""
