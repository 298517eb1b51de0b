# artifact_search/main.py
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime
from contextlib import asynccontextmanager
from dotenv import load_dotenv
import asyncio
import logging

load_dotenv()

from .core.config import settings
from .core.exceptions import (
    CatalogueException,
    catalogue_exception_handler,
    request_validation_exception_handler
)
from .core.dependencies import get_artifact_store, get_review_status_store
from .api.middleware import LoggingMiddleware
from .api.v1.artifacts import router as artifacts_router, TOTAL_COUNT_HEADER
from .db.session import init_db, validate_db_setup, cleanup_db_connections
from .db.mongo import close_mongo_client

# Secure logging configuration
from .utils.logging_filter import setup_secure_logging

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Setup secure logging with credential filtering
setup_secure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management with timeout protection"""
    logger.info("Application starting...")

    try:
        async with asyncio.timeout(15):
            if await validate_db_setup():
                await init_db()
            else:
                logger.warning("Review-status database unreachable - searches will fail until it recovers")
    except asyncio.TimeoutError:
        logger.warning("Review-status database initialization timed out")
    except Exception as e:
        logger.warning(f"Review-status database initialization failed: {str(e)}")

    logger.info("Application startup completed - ready to accept requests")

    yield

    logger.info("Application shutting down...")
    try:
        async with asyncio.timeout(10):
            await cleanup_db_connections()
    except asyncio.TimeoutError:
        logger.warning("Cleanup timed out")
    close_mongo_client()
    logger.info("Application shutdown completed")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    description="Search and ranking over the museum artifact catalogue",
    lifespan=lifespan
)

# CORS middleware; the total count header must be readable by browsers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS", "HEAD"],
    allow_headers=["*"],
    expose_headers=[TOTAL_COUNT_HEADER, "X-Request-ID"]
)

app.add_middleware(LoggingMiddleware)

# Exception handlers
app.add_exception_handler(CatalogueException, catalogue_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

app.include_router(artifacts_router, prefix=f"{settings.API_PREFIX}/artifacts", tags=["artifacts"])


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "status": "running",
        "api_base": settings.API_PREFIX,
        "timestamp": datetime.now().isoformat()
    }


@app.get("/health")
async def health_check():
    """Connectivity of both backing stores"""
    async def check_store(dependency) -> str:
        factory = app.dependency_overrides.get(dependency, dependency)
        try:
            async with asyncio.timeout(5):
                await factory().ping()
            return "connected"
        except asyncio.TimeoutError:
            return "timeout"
        except CatalogueException:
            return "error"

    artifact_status, review_status = await asyncio.gather(
        check_store(get_artifact_store),
        check_store(get_review_status_store)
    )
    healthy = artifact_status == review_status == "connected"

    return {
        "status": "healthy" if healthy else "degraded",
        "artifact_store": artifact_status,
        "review_status_store": review_status,
        "timestamp": datetime.now().isoformat()
    }
