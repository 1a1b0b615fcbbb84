from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import RedirectResponse, JSONResponse
from contextlib import asynccontextmanager
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
import uvicorn
import logging
import sys

from app.core.config import settings
from app.core.database_utils import get_db_session, check_database_connection
from app.core.exceptions import EntryValidationError, GenerationFailed, StorageUnavailable
from app.db.base import Base
from app import models  # noqa: F401  registers tables on Base.metadata


def configure_logging() -> None:
    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting up {settings.PROJECT_NAME} Backend...")

    # Check database tables
    try:
        with get_db_session() as db:
            inspector = inspect(db.bind)
            existing_tables = inspector.get_table_names()
            required_tables = [table.name for table in Base.metadata.tables.values()]
            missing_tables = [table for table in required_tables if table not in existing_tables]

            if missing_tables:
                logger.warning(f"⚠️ Missing database tables: {missing_tables}")
                logger.warning("Run 'alembic upgrade head' or scripts/setup_database.py to create them")
            else:
                logger.info("✅ All required database tables exist")
    except SQLAlchemyError as e:
        # Requests degrade to StorageUnavailable until the database comes back
        logger.error(f"Could not check database tables: {e}")

    yield

    # Shutdown
    logger.info(f"✅ {settings.PROJECT_NAME} Backend shutdown complete")


def create_application() -> FastAPI:
    """Create and configure the FastAPI application"""

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="MindEase - Mood tracking, therapy sessions and engagement analytics",
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        lifespan=lifespan
    )

    # CORS Middleware - Environment-specific origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    logger.info(f"CORS configured for {settings.ENVIRONMENT} environment with origins: {settings.allowed_cors_origins}")

    # GZip Middleware for response compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    from app.api.v1.api import api_router
    app.include_router(api_router, prefix=settings.API_V1_STR)

    if settings.METRICS_ENABLED:
        Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    return app


# Create the FastAPI app instance
app = create_application()


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint that redirects to API documentation"""
    return RedirectResponse(url=f"{settings.API_V1_STR}/docs")


@app.get("/health", tags=["Health Check"])
async def health_check():
    """Health check endpoint"""
    db_healthy = check_database_connection()
    return {
        "status": "healthy" if db_healthy else "degraded",
        "version": settings.VERSION,
        "project": settings.PROJECT_NAME,
        "database": "healthy" if db_healthy else "unhealthy",
    }


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Global HTTP exception handler"""
    logger.error(f"HTTP {exc.status_code}: {exc.detail} - {request.url}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "message": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
    logger.error(f"Storage unavailable ({exc.source}) - {request.url}")
    return JSONResponse(
        status_code=503,
        content={
            "error": True,
            "message": "Your records are temporarily unavailable. Please try again shortly.",
            "status_code": 503,
            "source": exc.source,
        }
    )


@app.exception_handler(EntryValidationError)
async def entry_validation_handler(request: Request, exc: EntryValidationError):
    logger.warning(f"Rejected mood entry ({exc.field}): {exc} - {request.url}")
    return JSONResponse(
        status_code=422,
        content={
            "error": True,
            "message": str(exc),
            "status_code": 422,
            "field": exc.field,
        }
    )


@app.exception_handler(GenerationFailed)
async def generation_failed_handler(request: Request, exc: GenerationFailed):
    # Chat turns fall back before reaching here; never expose provider details
    logger.error(f"Unhandled assistant failure ({exc.reason}): {exc} - {request.url}")
    return JSONResponse(
        status_code=200,
        content={
            "error": True,
            "message": settings.ASSISTANT_FALLBACK_MESSAGE,
            "status_code": 200,
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled exceptions"""
    logger.error(f"Unhandled exception: {exc} - {request.url}")
    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "message": "Internal server error",
            "status_code": 500
        }
    )


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
