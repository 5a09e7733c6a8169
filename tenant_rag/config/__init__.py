"""Configuration: pydantic-settings ``Settings`` plus the YAML loader."""

from tenant_rag.config.loader import load_config
from tenant_rag.config.settings import Settings

__all__ = ["Settings", "load_config"]
