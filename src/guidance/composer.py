"""
Guidance Composer

Grounded guidance pipeline:
1. Retrieve: keyword retrieval of verses for the question
2. Prompt: format verses + question
3. Generate: ask the LLM, bounded by generation_timeout
4. Fallback: fixed text when generation fails, verses are still returned

Also serves free-form questions and chats that are not grounded in
retrieved verses.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

from src.clients.llm_client import ChatMessage, LLMClientError, LLMClientProtocol
from src.core.exceptions import InvalidQueryError, NoMatchingVersesError
from src.core.logging import get_logger
from src.core.tracing import get_tracer
from src.guidance.prompts import (
    COMMENTARY_MAX_CHARS,
    FALLBACK_GUIDANCE,
    GUIDANCE_SYSTEM_PROMPT,
    SPIRITUAL_GUIDE_SYSTEM_PROMPT,
    build_guidance_prompt,
    build_question_prompt,
)
from src.retrieval.models import RetrievalResult, RetrievalStatus
from src.retrieval.retriever import VerseRetriever

logger = get_logger(__name__)
tracer = get_tracer(__name__)

DEFAULT_GENERATION_TIMEOUT: float = 60.0


@dataclass(frozen=True)
class GuidanceResult:
    """Generated guidance and the verses it cites.

    Attributes:
        query: The user's question
        guidance: Generated text (or fallback text)
        retrieval: Verses used as grounding context
        fallback_used: True when the LLM failed and fallback text was returned
        latency_ms: End-to-end time in milliseconds
    """

    query: str
    guidance: str
    retrieval: RetrievalResult
    fallback_used: bool = False
    latency_ms: float = 0.0


class GuidanceComposer:
    """Builds LLM prompts from retrieved verses and returns guidance."""

    def __init__(
        self,
        retriever: VerseRetriever,
        llm_client: LLMClientProtocol,
        generation_timeout: float = DEFAULT_GENERATION_TIMEOUT,
        commentary_max_chars: int = COMMENTARY_MAX_CHARS,
    ) -> None:
        self._retriever = retriever
        self._llm = llm_client
        self.generation_timeout = generation_timeout
        self.commentary_max_chars = commentary_max_chars

    @property
    def llm_client(self) -> LLMClientProtocol:
        return self._llm

    @property
    def retriever(self) -> VerseRetriever:
        return self._retriever

    async def compose(self, query: str, max_verses: int | None = None) -> GuidanceResult:
        """Answer a question with guidance grounded in retrieved verses.

        max_verses of None uses the retriever's configured default.

        Raises:
            InvalidQueryError: If the query is blank
            StoreUnavailableError: If the verse store cannot be read
            NoMatchingVersesError: If no verse could ground the answer
        """
        started = time.perf_counter()

        with tracer.start_as_current_span("guidance_compose") as span:
            retrieval = self._retriever.retrieve_verses(query, max_verses)
            span.set_attribute("guidance.verses", len(retrieval))

            if retrieval.status is not RetrievalStatus.MATCHED:
                logger.info(
                    "guidance_no_verses",
                    status=retrieval.status.value,
                    keywords=list(retrieval.keywords),
                )
                raise NoMatchingVersesError(
                    "No verses found for this question; try different keywords",
                    keywords=list(retrieval.keywords),
                )

            prompt = build_guidance_prompt(
                query, retrieval.verses, self.commentary_max_chars
            )
            logger.info(
                "guidance_generation_started",
                references=retrieval.references,
                prompt_chars=len(prompt),
            )

            fallback_used = False
            try:
                guidance = await asyncio.wait_for(
                    self._llm.generate(prompt, GUIDANCE_SYSTEM_PROMPT),
                    timeout=self.generation_timeout,
                )
            except (LLMClientError, asyncio.TimeoutError) as e:
                logger.error(
                    "guidance_generation_failed",
                    error=str(e) or type(e).__name__,
                    elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
                )
                guidance = FALLBACK_GUIDANCE
                fallback_used = True
            span.set_attribute("guidance.fallback", fallback_used)

        latency_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "guidance_composed",
            verses=len(retrieval),
            fallback_used=fallback_used,
            latency_ms=round(latency_ms, 1),
        )
        return GuidanceResult(
            query=query,
            guidance=guidance,
            retrieval=retrieval,
            fallback_used=fallback_used,
            latency_ms=latency_ms,
        )

    async def ask(self, question: str, context: str | None = None) -> str:
        """Free-form guidance without verse retrieval.

        Raises:
            InvalidQueryError: If the question is blank
            LLMClientError: If generation fails
        """
        if not question or not question.strip():
            raise InvalidQueryError("Question is required")
        prompt = build_question_prompt(question, context)
        try:
            return await asyncio.wait_for(
                self._llm.generate(prompt, SPIRITUAL_GUIDE_SYSTEM_PROMPT),
                timeout=self.generation_timeout,
            )
        except asyncio.TimeoutError as e:
            raise LLMClientError("Generation timed out") from e

    async def chat(self, messages: list[ChatMessage]) -> str:
        """Multi-turn conversation with the spiritual guide persona.

        Raises:
            InvalidQueryError: If messages is empty
            LLMClientError: If generation fails
        """
        if not messages:
            raise InvalidQueryError("Messages array is required")
        try:
            return await asyncio.wait_for(
                self._llm.chat(messages, SPIRITUAL_GUIDE_SYSTEM_PROMPT),
                timeout=self.generation_timeout,
            )
        except asyncio.TimeoutError as e:
            raise LLMClientError("Generation timed out") from e
