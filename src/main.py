"""
Sarthi Guidance Service - Main Application Entry Point

- FastAPI app with lifespan handler
- uvicorn src.main:app starts the service

Patterns Applied:
- Lifespan context manager builds the verse store, retriever, LLM client
  and composer once and keeps them on app.state
- One-time configure_logging() at startup
- Request logging middleware with a request_id bound into structlog context
"""

import time
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from src.api.guidance import guidance_router
from src.api.health import get_health_service
from src.api.health import router as health_router
from src.api.spiritual import spiritual_router
from src.api.verses import verses_router
from src.clients.llm_client import create_llm_client
from src.core.config import Settings, get_settings
from src.core.exceptions import StoreUnavailableError, VerseDataError
from src.core.logging import bind_request_context, clear_request_context, configure_logging, get_logger
from src.core.tracing import configure_tracing
from src.guidance.composer import GuidanceComposer
from src.retrieval.keywords import (
    KeywordExtractor,
    KeywordExtractorConfig,
    default_stop_words,
    load_stop_words,
)
from src.retrieval.matcher import VerseMatcher
from src.retrieval.retriever import VerseRetriever
from src.retrieval.store import load_verses

settings = get_settings()

# Configure logging ONCE at module load
configure_logging(
    log_level=settings.log_level,
    json_output=settings.log_json,
)

logger = get_logger(__name__)


def build_retriever_components(settings: Settings) -> tuple[KeywordExtractor, VerseMatcher]:
    """Keyword extractor and matcher configured from settings.

    Raises:
        ConfigurationError: If the stop word file is missing or invalid
    """
    stop_words = (
        load_stop_words(settings.stop_words_path)
        if settings.stop_words_path
        else default_stop_words()
    )
    extractor = KeywordExtractor(
        KeywordExtractorConfig(
            stop_words=stop_words,
            max_keywords=settings.max_keywords,
            min_keyword_length=settings.min_keyword_length,
        )
    )
    return extractor, VerseMatcher(hard_ceiling=settings.max_results_ceiling)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager for startup/shutdown events."""
    # =========================================================================
    # STARTUP
    # =========================================================================
    logger.info(
        "startup",
        service=settings.service_name,
        version=settings.version,
        environment=settings.environment,
    )

    if settings.tracing_enabled:
        configure_tracing(
            service_name=settings.service_name,
            service_version=settings.version,
            console_export=settings.tracing_console_export,
        )
        logger.info("tracing_configured")

    health = get_health_service()
    health.version = settings.version

    extractor, matcher = build_retriever_components(settings)
    llm_client = create_llm_client(settings)
    app.state.llm_client = llm_client
    health.set_llm_configured(True)

    try:
        store = load_verses(settings.verses_path)
    except (StoreUnavailableError, VerseDataError) as e:
        # Keep serving /health; retrieval routes answer 503 until restarted with data
        logger.error("verse_store_load_failed", path=settings.verses_path, error=str(e))
        app.state.verse_store = None
        app.state.retriever = None
        app.state.composer = None
        health.set_verses_loaded(0)
    else:
        retriever = VerseRetriever(
            store,
            extractor,
            matcher,
            default_max_results=settings.default_max_results,
        )
        app.state.verse_store = store
        app.state.retriever = retriever
        app.state.composer = GuidanceComposer(
            retriever,
            llm_client,
            generation_timeout=settings.generation_timeout,
            commentary_max_chars=settings.commentary_max_chars,
        )
        health.set_verses_loaded(len(store))

    app.state.initialized = True
    app.state.environment = settings.environment

    yield

    # =========================================================================
    # SHUTDOWN
    # =========================================================================
    logger.info("shutdown", service=settings.service_name)
    await llm_client.close()
    health.set_llm_configured(False)
    health.set_verses_loaded(0)
    app.state.initialized = False


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="Sarthi-Guidance-Service",
    description="Bhagavad Gita verse retrieval and grounded spiritual guidance",
    version=settings.version,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "development" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Log every request with its duration under a per-request id."""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
    bind_request_context(request_id=request_id)
    start = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request_finished",
            method=request.method,
            path=request.url.path,
            status=status_code,
            duration_ms=round(duration_ms, 1),
        )
        clear_request_context()
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(health_router)
app.include_router(guidance_router, prefix="/api")
app.include_router(verses_router, prefix="/api")
app.include_router(spiritual_router, prefix="/api")


# =============================================================================
# Root endpoint
# =============================================================================


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint pointing at the docs."""
    return {
        "service": settings.service_name,
        "version": settings.version,
        "docs": "/docs",
    }
