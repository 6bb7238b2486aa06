"""
CRUD Gateway: FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance,
       optionally around injected settings and backing-store handles.
Who:   uvicorn (`crudgateway.main:app`), `python -m crudgateway`, tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────────┐ ┌────────────┐ ┌──────┐ ┌──────┐       │
    │  │  Req ID  │→│ Access log │→│ GZip │→│ CORS │       │
    │  └──────────┘ └────────────┘ └──────┘ └──────┘       │
    │                                                      │
    │  Routes:                                             │
    │  ┌───────────────┐ ┌──────────┐ ┌──────────────────┐ │
    │  │ /usuarios     │ │ /buckets │ │ /produtos        │ │
    │  │ /mongodb/...  │ │          │ │ /init-db         │ │
    │  └───────────────┘ └──────────┘ └──────────────────┘ │
    │                                                      │
    │  Exception Handlers:                                 │
    │  ┌────────────────────────────────────────────────┐  │
    │  │ NotFound→404 │ MissingFile→400 │ Store*→500    │  │
    │  └────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Build backends unless they were injected
    3. Ping MongoDB once; a failure is logged, never fatal
    Shutdown:
    1. Dispose the relational pool and close the Mongo client (owned only)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.errors import PyMongoError

from crudgateway import __version__
from crudgateway.backends import Backends, create_backends
from crudgateway.config import Settings, settings as default_settings
from crudgateway.exceptions import (
    BucketListingError,
    DocumentStoreError,
    GatewayError,
    MissingFileError,
    ObjectOperationError,
    ProductNotFoundError,
    RelationalStoreError,
    UserNotFoundError,
)
from crudgateway.logger import log_error, log_info
from crudgateway.middleware.logging import RequestLoggingMiddleware
from crudgateway.middleware.request_id import RequestIDMiddleware
from crudgateway.routes import buckets, health, produtos, usuarios

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Ocorreu um erro interno"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout
    (container runtimes collect stdout).
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-operation DEBUG/INFO chatter from client libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build (or adopt) backends on startup; release the ones we built on shutdown.

    Injected backends belong to whoever injected them and are left open.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("CRUD Gateway %s starting up...", __version__)

    owned = app.state.backends is None
    if owned:
        app.state.backends = create_backends(settings)

    try:
        await app.state.backends.ping_document_store()
        log_info("MongoDB conectado")
    except PyMongoError as e:
        log_error("Erro ao conectar ao MongoDB", error=e)

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)

    yield

    logger.info("CRUD Gateway shutting down...")
    if owned:
        await app.state.backends.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _raw_details(request: Request, exc: GatewayError) -> str:
    """Raw backing-store text, or the generic message when exposure is disabled."""
    if request.app.state.settings.expose_error_details:
        return exc.details
    return GENERIC_ERROR_MESSAGE


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to the response shape each route family uses.

    Handler hierarchy:
        UserNotFoundError     → 404 text
        ProductNotFoundError  → 404 {"error"}
        MissingFileError      → 400 {"message"}
        DocumentStoreError    → 500 text (fixed message)
        BucketListingError    → 500 {"error", "details"}
        ObjectOperationError  → 500 {"message", "error"}
        RelationalStoreError  → 500 {"error"}
        Exception (fallback)  → 500 {"error"} with a generic message

    Every 5xx is logged with the request context before the response goes out.
    """

    @app.exception_handler(UserNotFoundError)
    async def handle_user_not_found(request: Request, exc: UserNotFoundError):
        return PlainTextResponse(exc.message, status_code=404)

    @app.exception_handler(ProductNotFoundError)
    async def handle_product_not_found(request: Request, exc: ProductNotFoundError):
        return JSONResponse(status_code=404, content={"error": exc.message})

    @app.exception_handler(MissingFileError)
    async def handle_missing_file(request: Request, exc: MissingFileError):
        log_info("Upload sem arquivo", request)
        return JSONResponse(status_code=400, content={"message": exc.message})

    @app.exception_handler(DocumentStoreError)
    async def handle_document_store_error(request: Request, exc: DocumentStoreError):
        log_error(exc.message, request, exc)
        return PlainTextResponse(exc.message, status_code=500)

    @app.exception_handler(BucketListingError)
    async def handle_bucket_listing_error(request: Request, exc: BucketListingError):
        log_error(exc.message, request, exc)
        return JSONResponse(
            status_code=500,
            content={"error": exc.message, "details": _raw_details(request, exc)},
        )

    @app.exception_handler(ObjectOperationError)
    async def handle_object_operation_error(request: Request, exc: ObjectOperationError):
        log_error(exc.message, request, exc)
        return JSONResponse(
            status_code=500,
            content={"message": exc.message, "error": _raw_details(request, exc)},
        )

    @app.exception_handler(RelationalStoreError)
    async def handle_relational_store_error(request: Request, exc: RelationalStoreError):
        log_error("Erro no MySQL: " + exc.details, request, exc)
        return JSONResponse(status_code=500, content={"error": _raw_details(request, exc)})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all; the stack trace is logged, never returned."""
        log_error("Erro inesperado", request, exc)
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    backends: Optional[Backends] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; the environment-loaded singleton when None.
        backends: Pre-built client handles. When None, the lifespan builds
                  them from `settings` at startup and closes them at shutdown.

    Returns:
        Fully configured FastAPI instance.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="CRUD Gateway",
        description="CRUD endpoints over MongoDB (usuários), AWS S3 (buckets) and MySQL (produtos).",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.backends = backends

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(usuarios.router)
    app.include_router(buckets.router)
    app.include_router(produtos.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "crudgateway.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_config=None,
    )


app = create_app()
