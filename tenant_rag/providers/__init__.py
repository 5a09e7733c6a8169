"""Concrete adapters for the interfaces in ``tenant_rag.interfaces``."""
