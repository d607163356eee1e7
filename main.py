import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from hrms.core.config import settings
from hrms.core.database import get_async_session
from hrms.core.exceptions import StorageError
from hrms.core.logging_config import setup_logging
from hrms.middleware.logging import LoggingMiddleware
from hrms.api.v1.api import api_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"Starting HRMS performance service ({settings.ENVIRONMENT})")
    yield
    logger.info("HRMS performance service stopped")

# Create FastAPI app
app_config = {
    "title": "HRMS Performance & Access Service",
    "description": "Role-based access control with KPI/KRI metrics and KRA performance scoring",
    "version": "1.0.0",
    "debug": settings.DEBUG,
    "lifespan": lifespan,
}

app = FastAPI(**app_config)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS
)
app.add_middleware(LoggingMiddleware)

# Include routers
app.include_router(api_router, prefix="/api/v1")

@app.get("/")
async def root():
    return {
        "message": "HRMS performance service",
        "status": "active",
        "version": app_config["version"],
        "docs": "/docs"
    }

@app.get("/health")
async def health_check(session: AsyncSession = Depends(get_async_session)):
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check database query failed: {str(e)}")
        raise StorageError("Database unavailable")
    return {
        "status": "healthy",
        "database": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT
    }

def run():
    """Serve the API with uvicorn; TLS when both certificate paths are configured"""
    import uvicorn

    ssl_options = {}
    if settings.SSL_CERTFILE and settings.SSL_KEYFILE:
        ssl_options = {"ssl_certfile": settings.SSL_CERTFILE, "ssl_keyfile": settings.SSL_KEYFILE}

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_config=None,
        **ssl_options
    )

if __name__ == "__main__":
    run()
