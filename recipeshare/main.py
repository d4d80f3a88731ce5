"""
RecipeShare API: FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       the lifespan sets up logging and the image-store client.
Who:   uvicorn (`uvicorn recipeshare.main:app`) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:   Request ID → Logging → GZip → CORS   │
    │                                                     │
    │  Routes:       /recipes (CRUD)        /health       │
    │                                                     │
    │  Exception Handlers:                                │
    │   Validation→400  Auth→401  Permission→403          │
    │   NotFound→404    Image*→502  Persistence→500       │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → CloudinaryImageStore
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from recipeshare import __version__
from recipeshare.config import settings
from recipeshare.database import dispose_engine
from recipeshare.exceptions import (
    AuthenticationError,
    ImageDeletionError,
    ImageUploadError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    RecipeShareError,
    ValidationError,
)
from recipeshare.middleware.logging import RequestLoggingMiddleware
from recipeshare.middleware.request_id import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from recipeshare.routes import health, recipes
from recipeshare.services.cloudinary_service import CloudinaryImageStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: <timestamp> [<level>] <logger> [<request id>]: <message>
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("cloudinary").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Validate image store credentials (logged, not fatal)
        3. Build the CloudinaryImageStore from settings
    Shutdown:
        1. Dispose the database engine
    """
    setup_logging()
    logger.info("RecipeShare API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Listing and show still work without the image store
        logger.error("Configuration error: %s", str(e))

    app.state.image_store = CloudinaryImageStore(
        cloud_name=settings.cloudinary_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        folder=settings.cloudinary_folder,
        timeout=settings.image_store_timeout,
    )

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("RecipeShare API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: dict = None,
    request_id: str = None,
) -> JSONResponse:
    rid = request_id or request_id_var.get("")
    content = {"error": error, "message": message, "request_id": rid}
    if details:
        content["details"] = details
    response = JSONResponse(status_code=status_code, content=content)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto HTTP responses.

        ValidationError        → 400  (details returned)
        RequestValidationError → 400  (missing form part, malformed id)
        AuthenticationError    → 401
        PermissionDeniedError  → 403
        NotFoundError          → 404
        ImageUploadError       → 502  (image host message returned)
        ImageDeletionError     → 502  (image host message returned)
        PersistenceError       → 500  (generic message, context logged only)
        RecipeShareError       → 500
        Exception              → 500  (stack trace logged only, request ID echoed)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s", exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # Missing form parts or a malformed path id
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query"))
        message = f"Invalid value for '{field}': {first.get('msg')}" if field else "Invalid request."
        return _error_response(400, "validation_error", message, {"field": field} if field else None)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(401, "not_authenticated", exc.message)

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(request: Request, exc: PermissionDeniedError):
        return _error_response(403, "permission_denied", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ImageUploadError)
    async def handle_image_upload_error(request: Request, exc: ImageUploadError):
        logger.error("Image upload error: %s | Context: %s", exc.message, exc.context)
        return _error_response(502, "image_upload_failed", exc.message)

    @app.exception_handler(ImageDeletionError)
    async def handle_image_deletion_error(request: Request, exc: ImageDeletionError):
        logger.error("Image deletion error: %s | Context: %s", exc.message, exc.context)
        return _error_response(502, "image_deletion_failed", exc.message)

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error("Persistence error: %s | Context: %s", exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(RecipeShareError)
    async def handle_app_error(request: Request, exc: RecipeShareError):
        logger.error("Application error: %s | Context: %s", exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs in ServerErrorMiddleware, after RequestIDMiddleware has unwound
        rid = getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")
        logger.error("Unexpected error [%s]: %s", rid or "-", str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
            request_id=rid,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="RecipeShare API",
        description=(
            "Recipe sharing backend: searchable, paginated recipe index and "
            "recipe CRUD with Cloudinary-hosted images."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added executes first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Location"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(recipes.router)
    app.include_router(health.router)

    return app


app = create_app()
