"""
FastAPI Production Application

Main entry point for the Daily Sales Goal Tracker API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError
import structlog

from goaltracker.config import get_settings
from goaltracker.config.logging import configure_logging
from goaltracker.database.connection import init_database, close_database
from goaltracker.serving.api.main import create_api_app
from goaltracker.serving.cache import init_redis, close_redis

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Daily Sales Goal Tracker API", environment=settings.app_env)

    try:
        await init_database()
    except SQLAlchemyError as e:
        logger.warning("Database init failed", error=str(e))

    await init_redis()

    yield

    logger.info("Shutting down...")
    await close_database()
    await close_redis()


app = create_api_app(lifespan=lifespan)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
