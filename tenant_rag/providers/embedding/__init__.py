"""Embedding provider implementations.

    1. OllamaEmbeddingProvider -- local Ollama native endpoint (default).
    2. OpenAIEmbeddingProvider -- OpenAI or any OpenAI-compatible server.

The selected provider's output length must equal ``EMBEDDING_DIMENSION``,
the dimension the vector index is created with.
"""

from tenant_rag.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from tenant_rag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OllamaEmbeddingProvider", "OpenAIEmbeddingProvider"]
