"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI

from app.api.routes import router
from app.config import Settings, settings
from app.database.connection import Database
from app.services.embedding_service import EmbeddingService
from app.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Build the application; resources are opened and closed by the lifespan."""
    config = config or settings
    setup_logging(config.log_level, config.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(config)
        http_client = httpx.AsyncClient(timeout=httpx.Timeout(config.embedding_timeout_seconds))
        app.state.database = database
        app.state.http_client = http_client
        app.state.embedding_service = EmbeddingService(http_client, config=config)

        if not app.state.embedding_service.is_configured:
            logger.warning("OPENAI_API_KEY not set, embeddings disabled and search uses keyword matching")

        await database.connect()
        logger.info("Talent Match service started")
        try:
            yield
        finally:
            await http_client.aclose()
            await database.close()
            logger.info("Talent Match service stopped")

    app = FastAPI(title="Talent Match", version="1.0.0", lifespan=lifespan)
    app.include_router(router)
    return app


app = create_app()
