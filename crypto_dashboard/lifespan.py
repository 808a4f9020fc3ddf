# crypto_dashboard/lifespan.py
from contextlib import asynccontextmanager
from fastapi import FastAPI

from .logging_setup import get_logger
from .store import init_db

logger = get_logger("crypto_dashboard.lifespan")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # ---- Startup ----
    logger.info("APP STARTUP")
    init_db()

    yield

    # ---- Shutdown ----
    logger.info("APP SHUTDOWN")
    app.state.cache.clear()
