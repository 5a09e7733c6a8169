"""tenant-rag: multi-tenant retrieval-augmented generation over one shared vector index."""

__version__ = "0.1.0"
