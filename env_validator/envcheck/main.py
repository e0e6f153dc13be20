"""FastAPI application -- envcheck entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

import envcheck.deps as deps
from envcheck.api.runtime import router as runtime_router
from envcheck.api.validate import router as validate_router
from envcheck.config import load_settings
from envcheck.runtime.adapter import ContainerRuntime

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: load settings and the runtime adapter."""
    settings = load_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.dev_mode else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("envcheck starting with settings: %s", settings.model_dump())

    deps._settings = settings
    if deps._runtime is None:
        deps._runtime = ContainerRuntime(
            binary=settings.runtime_binary,
            timeout=settings.command_timeout,
            build_timeout=settings.build_timeout,
        )
    logger.info("Container runtime: %s", settings.runtime_binary)

    yield

    deps._settings = None
    deps._runtime = None


app = FastAPI(
    title="envcheck",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(runtime_router)
app.include_router(validate_router)
