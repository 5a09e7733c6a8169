"""Shared pytest fixtures for the tenant-rag test suite.

The fakes here implement the real provider interfaces so services can be
exercised end to end without Ollama, OpenAI, Pinecone or ChromaDB:

- :class:`FakeEmbeddingProvider` -- deterministic bag-of-words vectors
  (texts sharing words get high cosine similarity),
- :class:`InMemoryVectorStore` -- one index, dict-per-namespace, cosine scores,
- :class:`EchoLLM` -- records every prompt and returns a fixed answer.
"""

from __future__ import annotations

import hashlib
import math
import re
from typing import Any

import pytest

from tenant_rag.config.settings import Settings
from tenant_rag.interfaces.embedding_provider import IEmbeddingProvider
from tenant_rag.interfaces.llm_provider import ILLMProvider
from tenant_rag.interfaces.vector_store_provider import IVectorStoreProvider
from tenant_rag.models.rag import IndexDescription, IndexSpec, QueryMatch, StoredRecord
from tenant_rag.utils.errors import IndexNotFoundError

FAKE_DIMENSION = 256
TEST_INDEX = "test-index"

_WORD = re.compile(r"[a-z0-9]+")


def _bucket(word: str, dimension: int) -> int:
    return int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % dimension


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeEmbeddingProvider(IEmbeddingProvider):
    """Hashes each lowercase word into one of ``dimension`` buckets."""

    def __init__(self, dimension: int = FAKE_DIMENSION) -> None:
        self._dimension = dimension
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        vector = [0.0] * self._dimension
        for word in _WORD.findall(text.lower()):
            vector[_bucket(word, self._dimension)] += 1.0
        return vector

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "fake_embedding"

    def is_available(self) -> bool:
        return True


class InMemoryVectorStore(IVectorStoreProvider):
    """Single-process stand-in for a namespace-partitioned vector index."""

    def __init__(
        self,
        dimension: int = FAKE_DIMENSION,
        index_name: str = TEST_INDEX,
        index_exists: bool = True,
    ) -> None:
        self._indexes: dict[str, IndexDescription] = {}
        if index_exists:
            self._indexes[index_name] = IndexDescription(
                name=index_name, dimension=dimension, metric="cosine", ready=True
            )
        self._index_name = index_name
        self.namespaces: dict[str, dict[str, StoredRecord]] = {}
        self.create_calls: list[tuple[str, int, str]] = []

    async def describe_index(self, name: str) -> IndexDescription:
        if name not in self._indexes:
            raise IndexNotFoundError(index_name=name, provider_name=self.get_provider_name())
        return self._indexes[name]

    async def create_index(self, name: str, dimension: int, metric: str, spec: IndexSpec) -> None:
        self.create_calls.append((name, dimension, metric))
        self._indexes[name] = IndexDescription(name=name, dimension=dimension, metric=metric, ready=True)

    async def upsert(self, namespace: str, records: list[StoredRecord]) -> int:
        index = await self.describe_index(self._index_name)
        self._check_dimensions(records, index.dimension)
        bucket = self.namespaces.setdefault(namespace, {})
        for record in records:
            bucket[record.id] = record
        return len(records)

    async def query(self, namespace: str, vector: list[float], top_k: int) -> list[QueryMatch]:
        records = self.namespaces.get(namespace, {}).values()
        matches = [QueryMatch(id=r.id, score=_cosine(vector, r.values), metadata=dict(r.metadata)) for r in records]
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]

    async def delete_all(self, namespace: str) -> None:
        self.namespaces.pop(namespace, None)

    async def count(self, namespace: str) -> int:
        return len(self.namespaces.get(namespace, {}))

    def get_provider_name(self) -> str:
        return "in_memory"

    def is_available(self) -> bool:
        return True


class EchoLLM(ILLMProvider):
    """Records prompts; answers with a fixed string."""

    def __init__(self, answer: str = "Generated answer") -> None:
        self._answer = answer
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._answer

    def get_provider_name(self) -> str:
        return "echo"

    def is_available(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def make_settings(**overrides: Any) -> Settings:
    """Build a Settings instance with local-only defaults and optional overrides."""
    defaults: dict[str, Any] = {
        "embedding_backend": "ollama",
        "generation_backend": "ollama",
        "ollama_base_url": "http://ollama.test:11434",
        "openai_api_key": "",
        "openai_base_url": "",
        "vector_store_backend": "chromadb",
        "pinecone_api_key": "",
        "index_name": TEST_INDEX,
        "embedding_dimension": FAKE_DIMENSION,
        "app_env": "test",
    }
    defaults.update(overrides)
    return Settings(**defaults)


@pytest.fixture
def embedding_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def echo_llm() -> EchoLLM:
    return EchoLLM()
