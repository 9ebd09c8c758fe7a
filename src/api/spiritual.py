"""
Spiritual Guidance API Endpoints (free-form, no verse retrieval)

POST /v1/spiritual/ask    - Single question with optional context
POST /v1/spiritual/chat   - Multi-turn conversation
GET  /v1/spiritual/health - LLM availability
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from src.api.dependencies import get_composer, get_llm_client
from src.clients.llm_client import (
    HEALTH_CHECK_TIMEOUT,
    ChatMessage,
    LLMClientError,
    LLMClientProtocol,
)
from src.core.exceptions import InvalidQueryError
from src.core.logging import get_logger
from src.guidance.composer import GuidanceComposer

logger = get_logger(__name__)

API_TAG: str = "spiritual"
SERVICE_UNAVAILABLE_MESSAGE: str = "Spiritual guidance system is currently under maintenance."


# =============================================================================
# Request/Response Models
# =============================================================================


class AskRequest(BaseModel):
    question: str
    context: str | None = None


class AskResponse(BaseModel):
    question: str
    guidance: str
    timestamp: str


class ChatMessageModel(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    messages: list[ChatMessageModel] = Field(default_factory=list)


class ChatResponse(BaseModel):
    response: str
    timestamp: str


class LLMHealthResponse(BaseModel):
    status: str
    llm_available: bool
    available_models: list[str]
    current_model: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Router
# =============================================================================

spiritual_router = APIRouter(prefix="/v1/spiritual", tags=[API_TAG])


async def _is_healthy(llm: LLMClientProtocol) -> bool:
    """Health check capped at HEALTH_CHECK_TIMEOUT; a slow model counts as down."""
    try:
        return await asyncio.wait_for(llm.check_health(), timeout=HEALTH_CHECK_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning("llm_health_check_timed_out", timeout=HEALTH_CHECK_TIMEOUT)
        return False


async def _require_healthy(llm: LLMClientProtocol) -> None:
    if not await _is_healthy(llm):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=SERVICE_UNAVAILABLE_MESSAGE,
        )


@spiritual_router.post("/ask", response_model=AskResponse)
async def ask_question(
    request: AskRequest,
    composer: GuidanceComposer = Depends(get_composer),
) -> AskResponse:
    """Free-form guidance for a question, optionally with personal context."""
    if not request.question.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Question is required")

    await _require_healthy(composer.llm_client)
    try:
        guidance = await composer.ask(request.question, request.context)
    except InvalidQueryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except LLMClientError as e:
        logger.error("spiritual_ask_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to generate guidance: {e!s}",
        ) from e

    return AskResponse(question=request.question, guidance=guidance, timestamp=_now())


@spiritual_router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    composer: GuidanceComposer = Depends(get_composer),
) -> ChatResponse:
    """Continue a conversation with the spiritual guide."""
    if not request.messages:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Messages array is required")

    await _require_healthy(composer.llm_client)
    messages = [ChatMessage(role=m.role, content=m.content) for m in request.messages]
    try:
        response = await composer.chat(messages)
    except LLMClientError as e:
        logger.error("spiritual_chat_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to generate response: {e!s}",
        ) from e

    return ChatResponse(response=response, timestamp=_now())


@spiritual_router.get("/health", response_model=LLMHealthResponse)
async def llm_health(
    llm: LLMClientProtocol = Depends(get_llm_client),
) -> LLMHealthResponse:
    healthy = await _is_healthy(llm)
    try:
        models = await llm.list_models()
    except LLMClientError:
        models = []
    return LLMHealthResponse(
        status="healthy" if healthy else "unavailable",
        llm_available=healthy,
        available_models=models,
        current_model=llm.model,
    )
