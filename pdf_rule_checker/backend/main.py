"""
FastAPI application for the PDF rule checker.

Provides endpoints for:
- Checking an uploaded PDF against natural-language rules
- Health checks
"""

import logging

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, get_settings
from .exceptions import CheckRequestError, MalformedRulesError, MissingFileError
from .models import HealthResponse
from .routers import check
from .services.checker import RuleCheckService

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if get_settings().debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting PDF Rule Checker...")
    yield
    logger.info("Shutting down PDF Rule Checker...")


def create_app(
    settings: Settings | None = None,
    rule_check_service: RuleCheckService | None = None,
) -> FastAPI:
    """
    Build the application with its dependencies.

    Args:
        settings: Configuration. Defaults to the cached environment settings.
        rule_check_service: Pre-built service, e.g. one wired to a stub model.

    Returns:
        The configured FastAPI application.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="PDF Rule Checker API",
        description="Check PDF documents against natural-language rules using AI",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rule_check_service = rule_check_service or RuleCheckService.from_settings(
        settings
    )

    # The companion UI is served from a separate origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Health Endpoints
    # =========================================================================

    @app.get("/", response_model=HealthResponse)
    async def root() -> HealthResponse:
        """Root endpoint - health check."""
        return HealthResponse(
            status="healthy", message="PDF Rule Checker API is running", version=__version__
        )

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy", message="Service is healthy", version=__version__
        )

    # =========================================================================
    # Include Routers
    # =========================================================================

    app.include_router(check.router)

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(CheckRequestError)
    async def check_request_error_handler(request: Request, exc: CheckRequestError):
        """Render request-level errors as {"error": message}."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Map form fields of the wrong kind onto the same {"error"} bodies."""
        return await check_request_error_handler(
            request, validation_error_to_check_error(exc)
        )

    return app


def validation_error_to_check_error(exc: RequestValidationError) -> CheckRequestError:
    """Pick the request-level error for a FastAPI validation failure.

    A bad ``rules`` field wins over a bad ``pdf`` field, the same order
    the service validates them in.
    """
    fields = {error["loc"][-1] for error in exc.errors() if error.get("loc")}
    logger.warning("Rejecting request with invalid fields: %s", sorted(map(str, fields)))

    if "rules" in fields:
        return MalformedRulesError()
    if "pdf" in fields:
        return MissingFileError()
    return CheckRequestError()


app = create_app()


def run() -> None:
    """Run the API with uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    logger.info("Server is running on port %d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
