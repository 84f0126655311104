from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.assembler import build_default_assembler
from services.refresh import build_default_coordinator
from services.upstream import build_default_client


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    client = build_default_client()
    try:
        yield
    finally:
        client.close()
        build_default_client.cache_clear()
        build_default_coordinator.cache_clear()
        build_default_assembler.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Sensor Chart Service",
        description="Shapes temperature and humidity history into display-ready chart series.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
