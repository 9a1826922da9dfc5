"""
Health and metrics endpoints.
"""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from ocrcast import __version__
from ocrcast.api.schemas import HealthResponse

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Basic health check endpoint."
)
async def health_check():
    """Basic health check."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        components={}
    )


@router.get(
    "/health/ready",
    response_model=HealthResponse,
    summary="Readiness Check",
    description="Check if the service is ready to handle requests (engines loaded)."
)
async def readiness_check(request: Request):
    """Readiness check with engine and subscriber status."""
    components = {}
    overall_status = "healthy"

    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        components["engines"] = {"status": "unhealthy", "error": "not initialized"}
        overall_status = "unhealthy"
    else:
        for selector, engine in orchestrator.engines.items():
            components[selector.value] = {"status": "healthy", "engine": type(engine).__name__}

    components["subscribers"] = {
        "status": "healthy",
        "connected": request.app.state.broadcaster.subscriber_count
    }

    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components
    )


@router.get(
    "/health/live",
    summary="Liveness Check",
    description="Simple liveness probe."
)
async def liveness_check():
    """Simple liveness probe."""
    return {"status": "alive"}


@router.get(
    "/metrics",
    summary="Prometheus Metrics",
    description="Prometheus-format metrics for monitoring."
)
async def metrics():
    """Prometheus metrics endpoint."""
    return PlainTextResponse(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
