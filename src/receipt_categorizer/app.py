from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from receipt_categorizer.api.routes import categorize, health
from receipt_categorizer.core import settings
from receipt_categorizer.logger import get_logger, setup_logging
from receipt_categorizer.manager import CategorizerService

logger = get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        service = CategorizerService(settings.ClassifierSettings.from_env())
        app.state.service = service

        logger.info("Services initialized.")
        try:
            yield
        finally:
            await service.aclose()
            logger.info("Service shutting down.")

    app = FastAPI(title="Receipt Categorizer", lifespan=lifespan)

    app.include_router(categorize.router)
    app.include_router(health.router)

    return app


app = create_app()
