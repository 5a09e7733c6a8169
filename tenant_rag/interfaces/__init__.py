"""Public interface definitions for all external service providers.

Every external service the pipeline talks to is reached through one of the
abstract base classes below.  Concrete adapters live in
``tenant_rag/providers/`` and are chosen once, in ``tenant_rag/main.py``;
services receive them through their constructors, so tests pass fakes.

    Interface              ->  Concrete implementations
    ---------------------------------------------------------------
    IEmbeddingProvider     ->  OllamaEmbeddingProvider, OpenAIEmbeddingProvider
    ILLMProvider           ->  OllamaLLMProvider, OpenAILLMProvider
    IVectorStoreProvider   ->  ChromaDBProvider, PineconeProvider
    ITenantRegistry        ->  SQLiteTenantRegistry
"""

from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.interfaces.llm_provider import ILLMProvider
from tenant_rag.interfaces.tenant_registry_provider import ITenantRegistry
from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IEmbeddingProvider",
    "ILLMProvider",
    "ITenantRegistry",
    "IVectorStoreProvider",
]
