"""
FastAPI application factory.
Creates the app with CORS, shared services, error mapping, and router registration.
Swagger UI available at /docs, ReDoc at /redoc.
"""
import sys
import threading
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Ensure src/ is on the path
_src_dir = str(Path(__file__).parent.parent)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from errors import (  # noqa: E402
    AuthFailure,
    BackendError,
    ExtractionFailure,
    ExtractorError,
    OperationInProgress,
    ParseError,
)

ERROR_STATUS_CODES = {
    ExtractionFailure: 502,
    AuthFailure: 401,
    BackendError: 502,
    ParseError: 422,
    OperationInProgress: 409,
}


def status_for(error: ExtractorError) -> int:
    """HTTP status for an extractor error."""
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic for the FastAPI app."""
    import config

    logger = app.state.logger
    logger.info(f"URL Data Extractor API on port {config.API_PORT}", component="API")
    logger.info(f"Extraction endpoint: {app.state.extraction_client.endpoint_url}", component="API")

    yield

    logger.info("Shutting down API server", component="API")


def create_app(extraction_client=None, auth_provider=None,
               sheets_backend_factory=None, logger=None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Services default to the configured implementations; tests pass fakes.
    """
    import config
    from auth.auth_provider import build_auth_provider
    from extraction.extraction_client import ExtractionClient
    from utils.logger import get_logger

    logger = logger or get_logger()

    app = FastAPI(
        title="URL Data Extractor API",
        description=(
            "Extract structured data from a URL and export it to Google Sheets "
            "or an Excel workbook.\n\n"
            "**Google Sheets**: pass a Google access token as "
            "`Authorization: Bearer <token>`, or rely on the server's credentials."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.logger = logger
    app.state.extraction_client = extraction_client or ExtractionClient(logger=logger)
    app.state.auth_provider = auth_provider or build_auth_provider()
    # None lets each session fall back to SheetsBackend
    app.state.sheets_backend_factory = sheets_backend_factory
    app.state.sheets_export_lock = threading.Lock()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.API_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    @app.exception_handler(ExtractorError)
    async def extractor_error_handler(request: Request, exc: ExtractorError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}", component="API")
        return JSONResponse(status_code=status_for(exc), content={"detail": exc.user_message})

    # Register routers
    from api.routes.extract_routes import router as extract_router
    from api.routes.export_routes import router as export_router
    from api.routes.health_routes import router as health_router

    app.include_router(extract_router, prefix="/extract", tags=["Extraction"])
    app.include_router(export_router, prefix="/exports", tags=["Exports"])
    app.include_router(health_router, prefix="/health", tags=["Health"])

    @app.get("/", tags=["Root"])
    async def root():
        """API root - redirect to docs."""
        return {
            "service": "URL Data Extractor API",
            "version": "1.0.0",
            "docs": "/docs",
            "redoc": "/redoc",
            "health": "/health",
        }

    return app