import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from netwatch_manager.api.api_v1.api import api_router as api_v1_router
from netwatch_manager.core.config import settings
from netwatch_manager.core.log_config import setup_logging
from netwatch_manager.db.session import engine
from netwatch_manager.services.poller import status_poller

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.RUN_POLLER_IN_APP:
        await status_poller.start()
    else:
        logger.info("Status poller disabled in app process (RUN_POLLER_IN_APP=false)")
    yield
    if status_poller.is_running:
        await status_poller.stop()
    await engine.dispose()


app = FastAPI(
    title="Netwatch Manager",
    version="0.1.0",
    openapi_url="/api/v1/openapi.json",
    lifespan=lifespan,
)

app.include_router(api_v1_router, prefix="/api/v1")
