"""Vector store provider implementations.

    ChromaDBProvider -- local persistent index (default, no external service).
    PineconeProvider -- hosted serverless index with native namespaces.

Pick one with VECTOR_STORE_BACKEND.  Both store one shared index and keep
each tenant's records in its own namespace.
"""

from tenant_rag.providers.vector_store.chromadb_provider import ChromaDBProvider
from tenant_rag.providers.vector_store.pinecone_provider import PineconeProvider

__all__ = ["ChromaDBProvider", "PineconeProvider"]
