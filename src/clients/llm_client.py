"""LLM Clients - Guidance Generation.

HTTP clients for the language models that turn retrieved verses into
guidance text: Google Gemini (REST API) and a local Ollama server.

Patterns Applied:
- Connection pooling (one httpx.AsyncClient per client instance)
- Retry with exponential backoff on timeouts and 5xx responses
- Custom namespaced exceptions
- Protocol for duck typing so tests and local runs use FakeLLMClient
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, Protocol, runtime_checkable

import httpx

from src.core.exceptions import ConfigurationError
from src.core.logging import get_logger

if TYPE_CHECKING:
    from src.core.config import Settings

logger = get_logger(__name__)

# =============================================================================
# Module Constants
# =============================================================================

DEFAULT_TIMEOUT: Final[float] = 30.0
DEFAULT_MAX_RETRIES: Final[int] = 2
DEFAULT_RETRY_DELAY: Final[float] = 1.0
HEALTH_CHECK_TIMEOUT: Final[float] = 5.0

GEMINI_BASE_URL: Final[str] = "https://generativelanguage.googleapis.com"
GEMINI_MODEL: Final[str] = "gemini-1.5-flash"
GEMINI_EMBEDDING_MODEL: Final[str] = "text-embedding-004"

OLLAMA_BASE_URL: Final[str] = "http://localhost:11434"
OLLAMA_MODEL: Final[str] = "llama3.1:8b"
OLLAMA_OPTIONS: Final[dict[str, float | int]] = {
    "temperature": 0.7,
    "top_p": 0.9,
    "top_k": 40,
}

ROLE_USER: Final[str] = "user"
ROLE_ASSISTANT: Final[str] = "assistant"
ROLE_SYSTEM: Final[str] = "system"


# =============================================================================
# Custom Exceptions
# =============================================================================


class LLMClientError(Exception):
    """Base exception for LLM client errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LLMTimeoutError(LLMClientError):
    """Raised when the model does not answer within the timeout."""

    pass


class LLMConnectionError(LLMClientError):
    """Raised when the model endpoint cannot be reached."""

    pass


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class ChatMessage:
    """One turn of a conversation.

    Attributes:
        role: "user", "assistant" or "system"
        content: Message text
    """

    role: str
    content: str


# =============================================================================
# Protocol
# =============================================================================


@runtime_checkable
class LLMClientProtocol(Protocol):
    """Protocol shared by GeminiClient, OllamaClient and FakeLLMClient."""

    model: str

    async def generate(self, prompt: str, system_prompt: str = "") -> str:
        """Generate a single response."""
        ...

    async def chat(self, messages: list[ChatMessage], system_prompt: str = "") -> str:
        """Continue a multi-turn conversation."""
        ...

    async def check_health(self) -> bool:
        """Whether the model endpoint is usable."""
        ...

    async def list_models(self) -> list[str]:
        """Models this client can use."""
        ...

    async def close(self) -> None:
        """Release pooled connections."""
        ...


# =============================================================================
# Shared HTTP behaviour
# =============================================================================


class _BaseHTTPLLMClient:
    """Pooled httpx client with retry and error classification."""

    provider: str = "llm"

    def __init__(
        self,
        base_url: str,
        model: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay

        # Connection pooling: single client instance
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send a request, retrying timeouts and 5xx with exponential backoff.

        Raises:
            LLMClientError: On 4xx (no retry) or 5xx after retries
            LLMTimeoutError: When every attempt timed out
            LLMConnectionError: When the endpoint was unreachable
        """
        last_error: LLMClientError | None = None

        for attempt in range(self.max_retries):
            try:
                response = await self._client.request(method, path, json=json, params=params)
            except httpx.TimeoutException:
                last_error = LLMTimeoutError(
                    f"{self.provider} request to {path} timed out after {self.timeout}s"
                )
            except httpx.TransportError as e:
                last_error = LLMConnectionError(f"{self.provider} unreachable: {e}")
            else:
                if 400 <= response.status_code < 500:
                    raise LLMClientError(
                        f"{self.provider} client error: {response.text}",
                        status_code=response.status_code,
                    )
                if response.status_code >= 500:
                    last_error = LLMClientError(
                        f"{self.provider} server error: {response.text}",
                        status_code=response.status_code,
                    )
                else:
                    try:
                        result: dict[str, Any] = response.json()
                    except ValueError as e:
                        raise LLMClientError(
                            f"{self.provider} returned invalid JSON"
                        ) from e
                    return result

            logger.warning(
                "llm_request_retry",
                provider=self.provider,
                path=path,
                attempt=attempt + 1,
                error=str(last_error),
            )
            if attempt < self.max_retries - 1:
                await asyncio.sleep(self.retry_delay * (2**attempt))

        raise last_error or LLMClientError(f"{self.provider} request to {path} failed")

    async def _health_request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> bool:
        """Single request bounded by HEALTH_CHECK_TIMEOUT, no retries.

        Returns:
            True on a 2xx response, False on any failure
        """
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                timeout=min(self.timeout, HEALTH_CHECK_TIMEOUT),
            )
        except httpx.HTTPError as e:
            logger.warning(
                "llm_health_check_failed",
                provider=self.provider,
                error=str(e) or type(e).__name__,
            )
            return False
        if not response.is_success:
            logger.warning(
                "llm_health_check_failed",
                provider=self.provider,
                status=response.status_code,
            )
            return False
        return True

    async def list_models(self) -> list[str]:
        return [self.model]

    async def close(self) -> None:
        """Close the HTTP client connection pool."""
        await self._client.aclose()


# =============================================================================
# Gemini
# =============================================================================


class GeminiClient(_BaseHTTPLLMClient):
    """Client for the Gemini generateContent REST API.

    Attributes:
        api_key: Gemini API key; requests fail fast without one
    """

    provider = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = GEMINI_MODEL,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            model=model,
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            transport=transport,
        )
        self.api_key = api_key
        if not api_key:
            logger.warning("gemini_api_key_missing", model=model)

    def _require_key(self) -> None:
        if not self.api_key:
            raise LLMClientError("Gemini API key missing")

    @staticmethod
    def _to_contents(messages: list[ChatMessage]) -> list[dict[str, Any]]:
        # Gemini only knows "user" and "model"; system text goes to systemInstruction
        return [
            {
                "role": "model" if m.role == ROLE_ASSISTANT else ROLE_USER,
                "parts": [{"text": m.content}],
            }
            for m in messages
            if m.role != ROLE_SYSTEM
        ]

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            raise LLMClientError("Gemini returned no candidates")
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(p.get("text", "") for p in parts).strip()

    async def _generate_content(
        self,
        contents: list[dict[str, Any]],
        system_prompt: str = "",
    ) -> dict[str, Any]:
        self._require_key()
        body: dict[str, Any] = {"contents": contents}
        if system_prompt:
            body["systemInstruction"] = {"parts": [{"text": system_prompt}]}
        return await self._request(
            "POST",
            f"/v1beta/models/{self.model}:generateContent",
            json=body,
            params={"key": self.api_key},
        )

    async def generate(self, prompt: str, system_prompt: str = "") -> str:
        """Generate a response for a single prompt.

        Raises:
            LLMClientError: If the key is missing or the API call fails
        """
        data = await self._generate_content(
            [{"role": ROLE_USER, "parts": [{"text": prompt}]}],
            system_prompt,
        )
        text = self._extract_text(data)
        logger.info("gemini_generated", model=self.model, prompt_chars=len(prompt), chars=len(text))
        return text

    async def chat(self, messages: list[ChatMessage], system_prompt: str = "") -> str:
        contents = self._to_contents(messages)
        if not contents:
            return ""
        data = await self._generate_content(contents, system_prompt)
        return self._extract_text(data)

    async def check_health(self) -> bool:
        if not self.api_key:
            return False
        return await self._health_request(
            "POST",
            f"/v1beta/models/{self.model}:generateContent",
            json={
                "contents": [{"role": ROLE_USER, "parts": [{"text": "ping"}]}],
                "generationConfig": {"maxOutputTokens": 1},
            },
            params={"key": self.api_key},
        )

    async def list_models(self) -> list[str]:
        return [self.model, GEMINI_EMBEDDING_MODEL]


# =============================================================================
# Ollama
# =============================================================================


class OllamaClient(_BaseHTTPLLMClient):
    """Client for a local Ollama server (/api/generate, /api/chat)."""

    provider = "ollama"

    def __init__(
        self,
        base_url: str = OLLAMA_BASE_URL,
        model: str = OLLAMA_MODEL,
        timeout: float = 120.0,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            model=model,
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            transport=transport,
        )

    async def generate(self, prompt: str, system_prompt: str = "") -> str:
        data = await self._request(
            "POST",
            "/api/generate",
            json={
                "model": self.model,
                "prompt": prompt,
                "system": system_prompt,
                "stream": False,
                "options": dict(OLLAMA_OPTIONS),
            },
        )
        return str(data.get("response", "")).strip()

    async def chat(self, messages: list[ChatMessage], system_prompt: str = "") -> str:
        payload_messages = [{"role": ROLE_SYSTEM, "content": system_prompt}] if system_prompt else []
        payload_messages.extend({"role": m.role, "content": m.content} for m in messages)
        data = await self._request(
            "POST",
            "/api/chat",
            json={
                "model": self.model,
                "messages": payload_messages,
                "stream": False,
                "options": dict(OLLAMA_OPTIONS),
            },
        )
        return str(data.get("message", {}).get("content", "")).strip()

    async def list_models(self) -> list[str]:
        data = await self._request("GET", "/api/tags")
        return [m["name"] for m in data.get("models", []) if "name" in m]

    async def check_health(self) -> bool:
        return await self._health_request("GET", "/api/tags")


# =============================================================================
# FakeLLMClient for Testing
# =============================================================================


class FakeLLMClient:
    """Fake client for unit testing and offline runs without real HTTP.

    Records every call so tests can assert on the prompts sent.
    """

    def __init__(
        self,
        response: str = "Act without attachment to the fruits of action (2.47).",
        healthy: bool = True,
        error: Exception | None = None,
        delay: float = 0.0,
        model: str = "fake-model",
    ) -> None:
        self.response = response
        self.healthy = healthy
        self.error = error
        self.delay = delay
        self.model = model
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def _respond(self) -> str:
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response

    async def generate(self, prompt: str, system_prompt: str = "") -> str:
        self.calls.append({"method": "generate", "prompt": prompt, "system_prompt": system_prompt})
        return await self._respond()

    async def chat(self, messages: list[ChatMessage], system_prompt: str = "") -> str:
        self.calls.append({"method": "chat", "messages": list(messages), "system_prompt": system_prompt})
        return await self._respond()

    async def check_health(self) -> bool:
        await asyncio.sleep(0)
        return self.healthy

    async def list_models(self) -> list[str]:
        await asyncio.sleep(0)
        return [self.model]

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# Factory
# =============================================================================


def create_llm_client(settings: Settings) -> LLMClientProtocol:
    """Build the configured LLM client.

    Raises:
        ConfigurationError: If settings.llm_provider is unknown
    """
    provider = settings.llm_provider.lower()
    if provider == "gemini":
        return GeminiClient(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.llm_timeout,
            max_retries=settings.llm_max_retries,
        )
    if provider == "ollama":
        return OllamaClient(
            base_url=settings.ollama_base_url,
            model=settings.ollama_model,
            timeout=settings.llm_timeout,
            max_retries=settings.llm_max_retries,
        )
    if provider == "fake":
        return FakeLLMClient()
    raise ConfigurationError(f"Unknown LLM provider: {settings.llm_provider!r}")
