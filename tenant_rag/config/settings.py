"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from (highest priority first):
#
#   1. Environment variables  -- e.g. PINECONE_API_KEY=pc-...
#   2. .env file              -- key=value lines in the project root
#   3. The defaults below
#
# Field ``pinecone_api_key`` maps to env var ``PINECONE_API_KEY``.
# Defaults reproduce a local single-box setup: Ollama on localhost, a
# ChromaDB index on disk, llama3.2 for both embedding and generation.
# ──────────────────────────────────────────────────────────────────────
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from tenant_rag.utils.retry import RetryPolicy


class Settings(BaseSettings):
    """tenant-rag application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Model backends ===
    embedding_backend: Literal["ollama", "openai"] = "ollama"
    generation_backend: Literal["ollama", "openai"] = "ollama"
    ollama_base_url: str = "http://localhost:11434"
    embedding_model: str = "llama3.2"
    generation_model: str = "llama3.2"
    # OpenAI-compatible endpoints (OpenAI, TogetherAI, vLLM...)
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_embedding_model: str = "text-embedding-3-small"
    openai_text_model: str = "gpt-4o-mini"

    # === Vector index ===
    vector_store_backend: Literal["chromadb", "pinecone"] = "chromadb"
    index_name: str = "rag-docs-llama"
    embedding_dimension: int = 4096  # must equal the embedding model's output size
    index_metric: Literal["cosine", "euclidean", "dotproduct"] = "cosine"
    chromadb_persist_dir: str = "./data/chromadb"
    pinecone_api_key: str = ""
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"

    # === Pipeline ===
    chunk_size: int = 1000
    answer_top_k: int = 3
    embedding_concurrency: int = 1  # 1 = strictly sequential chunk embedding

    # === Index readiness polling ===
    readiness_interval: float = 2.0
    readiness_backoff_multiplier: float = 1.0
    readiness_max_attempts: int = 10
    readiness_max_wait: float = 60.0

    # === External HTTP calls ===
    http_timeout: float = 120.0
    http_retry_attempts: int = 1  # 1 = no retry
    http_retry_base_delay: float = 1.0
    http_retry_multiplier: float = 2.0

    # === Tenant registry ===
    tenant_db_path: str = "data/tenants.db"

    # === App Config ===
    max_upload_bytes: int = 10 * 1024 * 1024
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"

    def readiness_policy(self) -> RetryPolicy:
        """Policy used while waiting for a freshly created index."""
        return RetryPolicy(
            base_delay=self.readiness_interval,
            multiplier=self.readiness_backoff_multiplier,
            max_attempts=self.readiness_max_attempts,
            max_total_wait=self.readiness_max_wait,
        )

    def http_retry_policy(self) -> RetryPolicy:
        """Policy applied to embedding/generation requests on TransportError."""
        return RetryPolicy(
            base_delay=self.http_retry_base_delay,
            multiplier=self.http_retry_multiplier,
            max_attempts=self.http_retry_attempts,
        )
