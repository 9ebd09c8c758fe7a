"""
Sarthi Guidance Service - Health API Routes

GET /health - liveness
GET /ready  - 503 until the verse store is loaded

Patterns Applied:
- HealthService class holding readiness state
- Pydantic response models
"""

from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.core.logging import SERVICE_NAME, get_logger

router = APIRouter(tags=["health"])

logger = get_logger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    version: str
    service: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""
    status: str
    checks: dict[str, bool]
    verses_loaded: int = 0


# =============================================================================
# Health Service
# =============================================================================


class HealthService:
    """Service class for health check operations."""

    def __init__(self, version: str = "0.1.0"):
        """Initialize health service.

        Args:
            version: Service version string
        """
        self._version = version
        self._verses_loaded = 0
        self._llm_configured = False

    @property
    def version(self) -> str:
        return self._version

    @version.setter
    def version(self, value: str) -> None:
        self._version = value

    def check_health(self) -> dict[str, Any]:
        """Check basic service health.

        Returns:
            Health status dictionary with status, version, service
        """
        return {
            "status": "healthy",
            "version": self._version,
            "service": SERVICE_NAME,
        }

    def check_readiness(self) -> tuple[dict[str, Any], bool]:
        """Check if service is ready to accept requests.

        Ready once a non-empty verse store is loaded and an LLM client exists.

        Returns:
            Tuple of (readiness dict, is_ready bool)
        """
        checks = {
            "verse_store_loaded": self._verses_loaded > 0,
            "llm_configured": self._llm_configured,
        }

        is_ready = all(checks.values())
        result: dict[str, Any] = {
            "status": "ready" if is_ready else "not_ready",
            "checks": checks,
            "verses_loaded": self._verses_loaded,
        }
        return result, is_ready

    def set_verses_loaded(self, count: int) -> None:
        """Record how many verses the lifespan handler loaded (0 on failure)."""
        self._verses_loaded = count

    def set_llm_configured(self, configured: bool) -> None:
        self._llm_configured = configured


# Global health service instance
_health_service = HealthService()


def get_health_service() -> HealthService:
    """Get health service instance."""
    return _health_service


# =============================================================================
# Endpoints
# =============================================================================


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Basic health check endpoint for liveness checks",
)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    service = get_health_service()
    data = service.check_health()
    logger.debug("health_check", status=data["status"])
    return HealthResponse(**data)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Service is ready"},
        503: {"description": "Service is not ready"},
    },
    summary="Readiness Check",
    description="Readiness check endpoint for readiness checks",
)
async def readiness_check() -> JSONResponse:
    """Readiness check endpoint.

    Returns:
        200 if ready, 503 if not ready
    """
    service = get_health_service()
    data, is_ready = service.check_readiness()

    status_code = status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE

    logger.debug("readiness_check", status=data["status"], is_ready=is_ready)
    return JSONResponse(content=data, status_code=status_code)
