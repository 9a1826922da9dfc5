"""
FastAPI application setup with middleware and configuration.
"""

from contextlib import asynccontextmanager
from typing import Mapping, Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import time

from ocrcast import __version__
from ocrcast.config import get_settings
from ocrcast.delivery import WebSocketBroadcaster
from ocrcast.engines import OcrEngineSelector, TextRecognizer
from ocrcast.observability.logging import (
    setup_logging,
    bind_request_context,
    clear_request_context,
    get_logger,
)
from ocrcast.observability.metrics import get_metrics
from ocrcast.orchestrator import OCROrchestrator
from ocrcast.errors import (
    OCRError,
    InvalidInputError,
    ImageTooLargeError,
    RemoteTransportError,
)
from ocrcast.api.routes import ocr, broadcast, health


def error_status(exc: OCRError) -> int:
    """HTTP status for a service error."""
    if isinstance(exc, ImageTooLargeError):
        return 413
    if isinstance(exc, InvalidInputError):
        return 400
    if isinstance(exc, RemoteTransportError):
        return 502
    return 500


def create_app(
    engines: Optional[Mapping[OcrEngineSelector, TextRecognizer]] = None,
    broadcaster: Optional[WebSocketBroadcaster] = None
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        engines: Engines to use instead of building them from settings
        broadcaster: Subscriber fan-out to deliver recognized text to
    """
    settings = get_settings()
    broadcaster = broadcaster or WebSocketBroadcaster()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        setup_logging()
        logger = get_logger(__name__)
        logger.info("application_startup", version=__version__)

        # EngineInitError propagates and aborts startup
        orchestrator = OCROrchestrator.from_settings(
            settings, sink=broadcaster, engines=engines
        )
        app.state.orchestrator = orchestrator

        yield

        # Shutdown
        await orchestrator.aclose()
        logger.info("application_shutdown")

    app = FastAPI(
        title="ocrcast",
        description="Image OCR service delivering recognized text to WebSocket subscribers",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.broadcaster = broadcaster

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        request_id = bind_request_context()

        start_time = time.time()

        try:
            response = await call_next(request)

            duration = time.time() - start_time

            logger = get_logger(__name__)
            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2)
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Processing-Time"] = str(round(duration * 1000, 2))

            return response
        finally:
            clear_request_context()

    # Metrics middleware
    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        metrics = get_metrics()
        metrics.active_requests.inc()

        try:
            response = await call_next(request)
            return response
        finally:
            metrics.active_requests.dec()

    # Global exception handler
    @app.exception_handler(OCRError)
    async def ocr_error_handler(request: Request, exc: OCRError):
        status_code = error_status(exc)
        logger = get_logger(__name__)
        log = logger.warning if status_code < 500 else logger.error
        log(
            "ocr_error",
            error=exc.message,
            error_type=type(exc).__name__,
            status_code=status_code,
            details=exc.details
        )
        get_metrics().record_error(type(exc).__name__)

        return JSONResponse(
            status_code=status_code,
            content={
                "success": False,
                "error": exc.message,
                "error_type": type(exc).__name__,
                "details": exc.details
            }
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger = get_logger(__name__)
        logger.exception("unhandled_exception", error=str(exc))
        get_metrics().record_error("InternalServerError")

        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
                "error_type": "InternalServerError"
            }
        )

    # Include routers
    app.include_router(ocr.router, prefix="/api/v1", tags=["OCR"])
    app.include_router(broadcast.router, tags=["Delivery"])
    app.include_router(health.router, tags=["Health"])

    return app


# Create default app instance
app = create_app()
