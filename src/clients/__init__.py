"""
LLM clients used to generate guidance from retrieved verses.
"""

from src.clients.llm_client import (
    ChatMessage,
    FakeLLMClient,
    GeminiClient,
    LLMClientError,
    LLMClientProtocol,
    LLMConnectionError,
    LLMTimeoutError,
    OllamaClient,
    create_llm_client,
)

__all__ = [
    "ChatMessage",
    "FakeLLMClient",
    "GeminiClient",
    "LLMClientError",
    "LLMClientProtocol",
    "LLMConnectionError",
    "LLMTimeoutError",
    "OllamaClient",
    "create_llm_client",
]
