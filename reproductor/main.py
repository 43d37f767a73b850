"""
Reproductor - Main Application

Single FastAPI application that serves:
- The playlist page (Jinja2)
- Uploaded audio files under /uploads (static)
- REST API endpoints for upload, list and delete
- Health check endpoint

The SQLite connection and the uploads directory are opened once in the
lifespan handler and shared by every request through ``app.state.library``.
"""

import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from loguru import logger

from reproductor.config import (
    APP_ENV,
    APP_HOST,
    APP_PORT,
    APP_VERSION,
    CORS_ORIGINS,
    DB_PATH,
    DEBUG,
    LOG_FILE,
    LOG_FILE_SIZE,
    LOG_LEVEL,
    LOG_RETENTION,
    STATIC_DIR,
    TEMPLATES_DIR,
    UPLOADS_DIR,
    UPLOADS_URL_PREFIX,
    ensure_directories,
)
from reproductor.database import MetadataStore
from reproductor.routes.api import router as api_router
from reproductor.routes.pages import router as pages_router
from reproductor.services.library import LibraryService
from reproductor.storage import BlobStore

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
# Remove default loguru handler to avoid duplicate output
logger.remove()

logger.add(
    sys.stdout,
    level="DEBUG" if DEBUG else LOG_LEVEL,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    colorize=True,
)

if LOG_FILE:
    logger.add(
        LOG_FILE,
        rotation=LOG_FILE_SIZE,
        retention=LOG_RETENTION,
        level=LOG_LEVEL,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    )


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------
def create_app(uploads_dir: Path = UPLOADS_DIR, db_path: Path = DB_PATH) -> FastAPI:
    """Create and configure the FastAPI application."""

    uploads_dir = Path(uploads_dir)
    db_path = Path(db_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        On startup:
            1. Create the uploads directory and the database folder
            2. Open the SQLite connection (creates the schema)
            3. Wire the library service onto app.state

        On shutdown:
            4. Close the SQLite connection
        """
        # --- Startup ---
        logger.info("🚀 Starting Reproductor v{}", APP_VERSION)
        logger.info("📋 Environment: {} | Debug: {}", APP_ENV, DEBUG)

        # Step 1: Ensure directories exist
        ensure_directories(uploads_dir, db_path)
        logger.info("📁 Uploads directory: {}", uploads_dir)

        # Step 2: Open the metadata store
        metadata = MetadataStore(db_path)
        try:
            await metadata.open()
        except Exception as e:
            logger.critical("❌ Database initialization failed: {}", e)
            raise

        # Step 3: Share one library service across requests
        app.state.library = LibraryService(BlobStore(uploads_dir), metadata)

        logger.success(
            "✅ Application ready — listening on {}:{}", APP_HOST, APP_PORT
        )

        try:
            yield
        finally:
            # --- Shutdown ---
            logger.info("🛑 Shutting down Reproductor …")
            await metadata.close()
            logger.info("👋 Shutdown complete")

    app = FastAPI(
        title="Reproductor",
        description="Self-hosted audio library: upload, list, play and delete tracks.",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
    )

    # ------------------------------------------------------------------
    # Jinja2 templates
    # ------------------------------------------------------------------
    app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    # ------------------------------------------------------------------
    # Static files (player script)
    # ------------------------------------------------------------------
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # ------------------------------------------------------------------
    # Uploaded audio (directory is created in the lifespan)
    # ------------------------------------------------------------------
    app.mount(
        UPLOADS_URL_PREFIX,
        StaticFiles(directory=str(uploads_dir), check_dir=False),
        name="uploads",
    )

    # ------------------------------------------------------------------
    # CORS (the player may be hosted on another origin)
    # ------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["GET", "POST", "DELETE", "PUT", "PATCH"],
        allow_headers=["*"],
    )

    # ------------------------------------------------------------------
    # Request logging middleware
    # ------------------------------------------------------------------
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every incoming HTTP request with timing information."""
        start = time.time()
        try:
            response = await call_next(request)
        except Exception as exc:
            duration = round(time.time() - start, 3)
            logger.error(
                "❌ {method} {path} — unhandled error after {duration}s: {exc}",
                method=request.method,
                path=request.url.path,
                duration=duration,
                exc=exc,
            )
            raise

        duration = round(time.time() - start, 3)
        status = response.status_code

        if status >= 500:
            logger.error(
                "📤 {method} {path} — {status} [{duration}s]",
                method=request.method,
                path=request.url.path,
                status=status,
                duration=duration,
            )
        elif status >= 400:
            logger.warning(
                "📤 {method} {path} — {status} [{duration}s]",
                method=request.method,
                path=request.url.path,
                status=status,
                duration=duration,
            )
        elif not request.url.path.startswith((UPLOADS_URL_PREFIX, "/static")):
            # Audio and script fetches are too chatty for INFO
            logger.info(
                "📤 {method} {path} — {status} [{duration}s]",
                method=request.method,
                path=request.url.path,
                status=status,
                duration=duration,
            )

        return response

    # ------------------------------------------------------------------
    # Register routers
    # ------------------------------------------------------------------
    app.include_router(api_router)
    app.include_router(pages_router)

    return app


# ---------------------------------------------------------------------------
# Create the app instance (used by Uvicorn)
# ---------------------------------------------------------------------------
app = create_app()


def run() -> None:
    """Console entry point (development server)."""
    import uvicorn

    uvicorn.run(
        "reproductor.main:app",
        host=APP_HOST,
        port=APP_PORT,
        reload=DEBUG,
        log_level="debug" if DEBUG else "info",
    )


# ---------------------------------------------------------------------------
# Direct execution (development)
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    run()
