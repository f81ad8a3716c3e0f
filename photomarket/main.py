"""Main FastAPI application."""
import sys
import logging
from pathlib import Path
from contextlib import asynccontextmanager

# Add parent directory to path if running directly
if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from photomarket.core.config import settings
from photomarket.core.database import close_db
from photomarket.core.exceptions import PhotoStoreException
from photomarket.core.redis import redis_client
from photomarket.api import dependencies
from photomarket.api.middleware import RequestTimingMiddleware
from photomarket.api.routes import api_router


def configure_logging():
    """Send application logs to stdout and, when configured, to LOG_FILE."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info("Starting photo marketplace API")
    logger.info("Storage root: %s", settings.storage_root)
    logger.info(
        "Database: %s",
        settings.database_url.split('@')[1] if '@' in settings.database_url else 'configured'
    )
    logger.info("Cover guard backend: %s", settings.cover_guard_backend)

    # Ensure directories exist
    settings.ensure_directories_exist()

    yield

    logger.info("Shutting down photo marketplace API")
    await dependencies.get_cover_queue().drain()
    dependencies.get_worker_pool().shutdown()
    await redis_client.disconnect()
    await close_db()


# Create FastAPI application
app = FastAPI(
    title="Photo Marketplace API",
    description="Photo ingestion, watermarked previews and purchase-gated downloads",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(PhotoStoreException)
async def photostore_exception_handler(request: Request, exc: PhotoStoreException):
    """Render domain errors with their status code."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


# Global exception handler to catch and log all unhandled exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(
        "Unhandled %s on %s %s",
        type(exc).__name__, request.method, request.url,
        exc_info=exc
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with logging."""
    logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request timing middleware
app.add_middleware(RequestTimingMiddleware)

# Include API routes
app.include_router(api_router)

# Derivatives are public; originals are only reachable through the download route
app.mount(
    settings.thumbnails_url_prefix,
    StaticFiles(directory=settings.thumbnails_dir, check_dir=False),
    name="thumbnails"
)
app.mount(
    settings.watermarked_url_prefix,
    StaticFiles(directory=settings.watermarked_dir, check_dir=False),
    name="watermarked"
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Photo Marketplace API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": f"/api/{settings.api_version}/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "photomarket.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
