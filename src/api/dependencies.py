"""
FastAPI dependencies.

Services are built once in the lifespan handler and stored on app.state;
these functions hand them to routes. Tests replace them through
app.dependency_overrides.
"""

from typing import Any

from fastapi import HTTPException, Request, status

from src.clients.llm_client import LLMClientProtocol
from src.guidance.composer import GuidanceComposer
from src.retrieval.retriever import VerseRetriever
from src.retrieval.store import InMemoryVerseStore

STORE_UNAVAILABLE_DETAIL = "Verse store is not loaded"
LLM_UNAVAILABLE_DETAIL = "Guidance model is not configured"


def _state(request: Request, name: str) -> Any:
    return getattr(request.app.state, name, None)


def get_verse_store(request: Request) -> InMemoryVerseStore:
    store = _state(request, "verse_store")
    if store is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE_DETAIL)
    return store


def get_retriever(request: Request) -> VerseRetriever:
    retriever = _state(request, "retriever")
    if retriever is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE_DETAIL)
    return retriever


def get_llm_client(request: Request) -> LLMClientProtocol:
    client = _state(request, "llm_client")
    if client is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=LLM_UNAVAILABLE_DETAIL)
    return client


def get_composer(request: Request) -> GuidanceComposer:
    composer = _state(request, "composer")
    if composer is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORE_UNAVAILABLE_DETAIL)
    return composer


def resolve_max_results(retriever: VerseRetriever, max_results: int | None) -> int:
    """Apply the configured default and reject limits above the configured ceiling."""
    try:
        return retriever.check_limit(max_results)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
