"""
Verses API Endpoints

POST /v1/keywords                      - Keywords extracted from a query
GET  /v1/verses/search                 - Keyword retrieval without generation
GET  /v1/verses/stats                  - Verse store statistics
GET  /v1/verses/{chapter}/{verse}      - Single verse
GET  /v1/verses/random                 - Random verse ("verse of the day")
GET  /v1/chapters                      - Chapters with verse counts
GET  /v1/chapters/{chapter}/verses     - All verses of a chapter

Empty retrievals are not errors here: /verses/search returns 200 with a
status of "no_keywords" or "no_matches" so diagnostics can tell them apart.
"""

from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from src.api.dependencies import get_retriever, get_verse_store, resolve_max_results
from src.core.exceptions import InvalidQueryError, StoreUnavailableError
from src.retrieval.retriever import VerseRetriever
from src.retrieval.store import MAX_CHAPTER, MIN_CHAPTER, InMemoryVerseStore

# =============================================================================
# Module Constants
# =============================================================================

API_TAG: str = "verses"
VERSE_NOT_FOUND: str = "Verse not found"
CHAPTER_NOT_FOUND: str = "Chapter not found"
NO_VERSES_LOADED: str = "No verses loaded"


# =============================================================================
# Request/Response Models
# =============================================================================


class KeywordsRequest(BaseModel):
    """Request body for keyword extraction."""

    query: str = Field(..., description="Free-text question")


class KeywordsResponse(BaseModel):
    """Keywords the retriever would search for."""

    keywords: list[str]
    processing_time_ms: float = Field(..., ge=0)


class VerseModel(BaseModel):
    """Full verse record."""

    reference: str
    chapter_number: int
    verse_number: str
    sanskrit_text: str = ""
    transliteration: str = ""
    word_meanings: str = ""
    translation: str
    commentary: str = ""


class VerseMatchModel(BaseModel):
    """A retrieved verse and the keywords that matched it."""

    verse: VerseModel
    matched_keywords: list[str]


class RetrievalResponse(BaseModel):
    """Response from the verse search endpoint."""

    query: str
    keywords: list[str]
    status: str
    results: list[VerseMatchModel]
    total_results: int
    max_results: int
    processing_time_ms: float = Field(..., ge=0)


class ChapterVersesResponse(BaseModel):
    chapter_number: int
    count: int
    verses: list[VerseModel]


class ChapterSummary(BaseModel):
    chapter_number: int
    verse_count: int


class ChapterListResponse(BaseModel):
    count: int
    chapters: list[ChapterSummary]


# =============================================================================
# Router
# =============================================================================

verses_router = APIRouter(prefix="/v1", tags=[API_TAG])


@verses_router.post("/keywords", response_model=KeywordsResponse)
async def extract_query_keywords(
    request: KeywordsRequest,
    retriever: VerseRetriever = Depends(get_retriever),
) -> KeywordsResponse:
    """Extract the keywords used to search verses for a query."""
    start_time = time.perf_counter()
    keywords = retriever.extract_keywords(request.query)
    return KeywordsResponse(
        keywords=keywords,
        processing_time_ms=(time.perf_counter() - start_time) * 1000,
    )


@verses_router.get("/verses/search", response_model=RetrievalResponse)
async def search_verses(
    q: str = Query(..., description="Free-text query"),
    max_results: int | None = Query(None, ge=1, description="Defaults to the configured limit"),
    retriever: VerseRetriever = Depends(get_retriever),
) -> RetrievalResponse:
    """Retrieve verses for a query without calling the LLM."""
    start_time = time.perf_counter()
    limit = resolve_max_results(retriever, max_results)
    try:
        result = retriever.retrieve_verses(q, limit)
    except InvalidQueryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    return RetrievalResponse(
        query=result.query,
        keywords=list(result.keywords),
        status=result.status.value,
        results=[
            VerseMatchModel(
                verse=VerseModel(**m.verse.to_dict()),
                matched_keywords=list(m.matched_keywords),
            )
            for m in result.matches
        ],
        total_results=len(result),
        max_results=result.max_results,
        processing_time_ms=(time.perf_counter() - start_time) * 1000,
    )


@verses_router.get("/verses/stats")
async def verse_stats(
    store: InMemoryVerseStore = Depends(get_verse_store),
) -> dict[str, Any]:
    """Counts per chapter and chapters missing from the loaded data."""
    return store.stats()


@verses_router.get("/verses/random", response_model=VerseModel)
async def random_verse(
    store: InMemoryVerseStore = Depends(get_verse_store),
) -> VerseModel:
    """A verse picked at random, for a "verse of the day" card."""
    verse = store.random_verse()
    if verse is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NO_VERSES_LOADED)
    return VerseModel(**verse.to_dict())


@verses_router.get("/verses/{chapter_number}/{verse_number}", response_model=VerseModel)
async def get_verse(
    chapter_number: int,
    verse_number: str,
    store: InMemoryVerseStore = Depends(get_verse_store),
) -> VerseModel:
    verse = store.get_verse(chapter_number, verse_number)
    if verse is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=VERSE_NOT_FOUND)
    return VerseModel(**verse.to_dict())


@verses_router.get("/chapters", response_model=ChapterListResponse)
async def list_chapters(
    store: InMemoryVerseStore = Depends(get_verse_store),
) -> ChapterListResponse:
    """Chapters present in the loaded data, in order, with their verse counts."""
    chapters = [
        ChapterSummary(chapter_number=c, verse_count=len(store.verses_in_chapter(c)))
        for c in store.chapters()
    ]
    return ChapterListResponse(count=len(chapters), chapters=chapters)


@verses_router.get("/chapters/{chapter_number}/verses", response_model=ChapterVersesResponse)
async def get_chapter_verses(
    chapter_number: int,
    store: InMemoryVerseStore = Depends(get_verse_store),
) -> ChapterVersesResponse:
    if not MIN_CHAPTER <= chapter_number <= MAX_CHAPTER:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CHAPTER_NOT_FOUND)
    verses = store.verses_in_chapter(chapter_number)
    if not verses:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CHAPTER_NOT_FOUND)
    return ChapterVersesResponse(
        chapter_number=chapter_number,
        count=len(verses),
        verses=[VerseModel(**v.to_dict()) for v in verses],
    )
