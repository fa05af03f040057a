"""FastAPI entry-point exposing the agent orchestra."""
from __future__ import annotations

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from orchestra.api.chat import router as chat_router
from orchestra.api.providers import router as providers_router
from orchestra.api.routes import router as agents_router
from orchestra.api.sessions import router as sessions_router
from orchestra.config import config
from orchestra.core.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application."""
    configure_logging()
    logger.info("orchestra_started", environment=config.environment, model=config.model_name)
    yield
    logger.info("orchestra_stopped")


app = FastAPI(title="A2A Orchestra", lifespan=lifespan)
app.include_router(agents_router)
app.include_router(providers_router)
app.include_router(sessions_router)
app.include_router(chat_router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


def serve() -> None:
    uvicorn.run("orchestra.main:app", host=config.host, port=config.port)
