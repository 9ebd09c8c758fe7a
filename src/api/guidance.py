"""
Guidance API Endpoint

POST /v1/guidance/ask - Answer a question with guidance grounded in verses

Status codes:
- 400: blank query
- 404: no verse could ground the answer ("try different keywords")
- 422: request validation (max_verses below 1 or above the configured ceiling)
- 503: verse store unavailable
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from src.api.dependencies import get_composer, resolve_max_results
from src.core.exceptions import InvalidQueryError, NoMatchingVersesError, StoreUnavailableError
from src.core.logging import get_logger
from src.guidance.composer import GuidanceComposer

logger = get_logger(__name__)

# =============================================================================
# Module Constants
# =============================================================================

API_TAG: str = "guidance"


# =============================================================================
# Request/Response Models
# =============================================================================


class GuidanceRequest(BaseModel):
    """Request body for the guidance endpoint."""

    query: str = Field(..., description="The user's question")
    max_verses: int | None = Field(
        default=None,
        ge=1,
        description="Maximum verses used as grounding context; defaults to the configured limit",
    )


class VerseReference(BaseModel):
    """A verse cited by the guidance."""

    reference: str
    translation: str
    purport: str = ""
    matched_keywords: list[str] = Field(default_factory=list)


class GuidanceResponse(BaseModel):
    """Response from the guidance endpoint."""

    success: bool = True
    guidance: str
    fallback_used: bool = False
    keywords: list[str]
    verses_referenced: list[VerseReference]
    latency_ms: float = Field(..., ge=0)


# =============================================================================
# Router
# =============================================================================

guidance_router = APIRouter(prefix="/v1/guidance", tags=[API_TAG])


@guidance_router.post("/ask", response_model=GuidanceResponse)
async def ask_for_guidance(
    request: GuidanceRequest,
    composer: GuidanceComposer = Depends(get_composer),
) -> GuidanceResponse:
    """Retrieve verses for the question and generate guidance from them.

    Example:
        POST /api/v1/guidance/ask
        {"query": "How do I act without worrying about results?", "max_verses": 3}
    """
    max_verses = resolve_max_results(composer.retriever, request.max_verses)
    try:
        result = await composer.compose(request.query, max_verses)
    except InvalidQueryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except NoMatchingVersesError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "No verses found", "message": str(e), "keywords": e.keywords},
        ) from e
    except StoreUnavailableError as e:
        logger.error("guidance_store_unavailable", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Verse store unavailable",
        ) from e

    return GuidanceResponse(
        guidance=result.guidance,
        fallback_used=result.fallback_used,
        keywords=list(result.retrieval.keywords),
        verses_referenced=[
            VerseReference(
                reference=m.reference,
                translation=m.verse.translation,
                purport=m.verse.commentary,
                matched_keywords=list(m.matched_keywords),
            )
            for m in result.retrieval.matches
        ],
        latency_ms=result.latency_ms,
    )
