"""
Guidance API Endpoint Tests

- POST /api/v1/guidance/ask returns guidance plus the verses it cites
- 400 for blank queries, 404 when no verse matches, 503 when the store is down
- 422 for max_verses outside 1..ceiling (50 by default)
- Fallback text when the LLM fails

FakeLLMClient is injected through dependency overrides; no network calls.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.dependencies import get_composer
from src.api.guidance import guidance_router
from src.clients.llm_client import FakeLLMClient, LLMClientError
from src.guidance.composer import GuidanceComposer
from src.guidance.prompts import FALLBACK_GUIDANCE
from src.retrieval.retriever import VerseRetriever
from src.retrieval.store import InMemoryVerseStore
from tests.conftest import FailingVerseStore

# =============================================================================
# Constants
# =============================================================================

GUIDANCE_ENDPOINT = "/api/v1/guidance/ask"
FAKE_GUIDANCE = "Act without attachment to results (2.47)."

HTTP_200_OK = 200
HTTP_400_BAD_REQUEST = 400
HTTP_404_NOT_FOUND = 404
HTTP_422_UNPROCESSABLE_ENTITY = 422
HTTP_503_SERVICE_UNAVAILABLE = 503


# =============================================================================
# Fixtures
# =============================================================================


def build_app(composer: GuidanceComposer | None) -> FastAPI:
    app = FastAPI()
    app.include_router(guidance_router, prefix="/api")
    if composer is not None:
        app.dependency_overrides[get_composer] = lambda: composer
    return app


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient(response=FAKE_GUIDANCE)


@pytest.fixture
def client(store: InMemoryVerseStore, fake_llm: FakeLLMClient) -> TestClient:
    return TestClient(build_app(GuidanceComposer(VerseRetriever(store), fake_llm)))


# =============================================================================
# Tests
# =============================================================================


class TestGuidanceSuccess:
    def test_returns_guidance(self, client: TestClient) -> None:
        response = client.post(GUIDANCE_ENDPOINT, json={"query": "How can I overcome fear?"})

        assert response.status_code == HTTP_200_OK
        data = response.json()
        assert data["success"] is True
        assert data["guidance"] == FAKE_GUIDANCE
        assert data["fallback_used"] is False
        assert data["keywords"] == ["overcome", "fear"]
        assert data["latency_ms"] >= 0

    def test_verses_referenced_in_order(self, client: TestClient) -> None:
        response = client.post(GUIDANCE_ENDPOINT, json={"query": "fear", "max_verses": 3})

        refs = [v["reference"] for v in response.json()["verses_referenced"]]
        assert refs == ["2.56", "4.10", "16.1-3"]

    def test_verse_reference_fields(self, client: TestClient) -> None:
        response = client.post(GUIDANCE_ENDPOINT, json={"query": "karma", "max_verses": 1})

        verse = response.json()["verses_referenced"][0]
        assert verse["reference"] == "2.47"
        assert verse["purport"] == "This verse is the heart of karma yoga."
        assert verse["matched_keywords"] == ["karma"]

    def test_default_max_verses_is_five(self, client: TestClient) -> None:
        response = client.post(GUIDANCE_ENDPOINT, json={"query": "duty fear mind karma anger"})

        assert len(response.json()["verses_referenced"]) == 5

    def test_llm_failure_returns_fallback(self, store: InMemoryVerseStore) -> None:
        llm = FakeLLMClient(error=LLMClientError("unavailable", status_code=503))
        client = TestClient(build_app(GuidanceComposer(VerseRetriever(store), llm)))

        response = client.post(GUIDANCE_ENDPOINT, json={"query": "fear"})

        assert response.status_code == HTTP_200_OK
        data = response.json()
        assert data["guidance"] == FALLBACK_GUIDANCE
        assert data["fallback_used"] is True
        assert data["verses_referenced"]


class TestGuidanceErrors:
    def test_blank_query(self, client: TestClient, fake_llm: FakeLLMClient) -> None:
        response = client.post(GUIDANCE_ENDPOINT, json={"query": "   "})

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert fake_llm.calls == []

    def test_missing_query(self, client: TestClient) -> None:
        response = client.post(GUIDANCE_ENDPOINT, json={})

        assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.parametrize("max_verses", [0, 51])
    def test_max_verses_out_of_range(self, client: TestClient, max_verses: int) -> None:
        response = client.post(GUIDANCE_ENDPOINT, json={"query": "fear", "max_verses": max_verses})

        assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY

    def test_no_matching_verses(self, client: TestClient, fake_llm: FakeLLMClient) -> None:
        response = client.post(GUIDANCE_ENDPOINT, json={"query": "xyzzyqux"})

        assert response.status_code == HTTP_404_NOT_FOUND
        detail = response.json()["detail"]
        assert detail["error"] == "No verses found"
        assert detail["keywords"] == ["xyzzyqux"]
        assert fake_llm.calls == []

    def test_only_stop_words(self, client: TestClient) -> None:
        response = client.post(GUIDANCE_ENDPOINT, json={"query": "How can the what?"})

        assert response.status_code == HTTP_404_NOT_FOUND
        assert response.json()["detail"]["keywords"] == []

    def test_store_unavailable(self, fake_llm: FakeLLMClient) -> None:
        client = TestClient(build_app(GuidanceComposer(VerseRetriever(FailingVerseStore()), fake_llm)))

        response = client.post(GUIDANCE_ENDPOINT, json={"query": "fear"})

        assert response.status_code == HTTP_503_SERVICE_UNAVAILABLE
        assert fake_llm.calls == []

    def test_composer_not_initialized(self) -> None:
        client = TestClient(build_app(None))

        response = client.post(GUIDANCE_ENDPOINT, json={"query": "fear"})

        assert response.status_code == HTTP_503_SERVICE_UNAVAILABLE
