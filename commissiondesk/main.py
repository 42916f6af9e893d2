"""
Commission Desk API.

Salespeople submit and edit sales, the commission ledger follows every
write, and managers read team reports. Entry point:

    uvicorn commissiondesk.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from commissiondesk import __version__
from commissiondesk.api import api_router
from commissiondesk.config import settings
from commissiondesk.db import engine

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Schema changes are applied with Alembic before deploy, never here."""
    logger.info(
        f"Commission Desk {__version__} starting "
        f"(database: {engine.dialect.name}, shared split: {settings.shared_sale_split})"
    )
    yield
    await engine.dispose()
    logger.info("Commission Desk stopped")


app = FastAPI(
    title="Commission Desk",
    description="Dealership sales and commission ledger",
    version=__version__,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
)

app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "commissiondesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
