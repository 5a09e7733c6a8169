"""Generation (LLM) provider implementations.

    1. OllamaLLMProvider -- local Ollama native ``/api/generate`` (default).
    2. OpenAILLMProvider -- OpenAI or any OpenAI-compatible chat endpoint.
"""

from tenant_rag.providers.llm.ollama_provider import OllamaLLMProvider
from tenant_rag.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OllamaLLMProvider", "OpenAILLMProvider"]
