from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI

from deathshock import __version__
from deathshock.api.deps import init_controller, shutdown_controller
from deathshock.api.routes import router
from deathshock.settings import settings_from_env

settings = settings_from_env()

app = FastAPI(title="deathshock", version=__version__)
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    # Re-read so tests can point DEATHSHOCK_CONFIG_DIR at a temp dir before startup.
    current = settings_from_env()
    init_controller(settings=current, loop=asyncio.get_running_loop())
    logger.info("Reading settings from %s", current.config_dir)


@app.on_event("shutdown")
async def _shutdown() -> None:
    await shutdown_controller()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "deathshock", "version": __version__}
