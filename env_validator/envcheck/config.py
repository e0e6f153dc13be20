"""Runtime settings, loaded from an options file or the environment."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    runtime_binary: str = "docker"
    command_timeout: float = Field(600.0, gt=0)
    build_timeout: float = Field(1800.0, gt=0)
    container_workdir: str = "/workspace"
    dev_mode: bool = False


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


def load_settings() -> Settings:
    """Load settings from ENVCHECK_OPTIONS_PATH if present, else env vars."""
    opts_path = Path(os.environ.get("ENVCHECK_OPTIONS_PATH", "envcheck.json"))
    if opts_path.exists():
        logger.info("Loading options from %s", opts_path)
        return Settings(**json.loads(opts_path.read_text()))
    return Settings(
        runtime_binary=os.environ.get("ENVCHECK_RUNTIME_BINARY", "docker"),
        command_timeout=float(os.environ.get("ENVCHECK_COMMAND_TIMEOUT", "600")),
        build_timeout=float(os.environ.get("ENVCHECK_BUILD_TIMEOUT", "1800")),
        container_workdir=os.environ.get("ENVCHECK_CONTAINER_WORKDIR", "/workspace"),
        dev_mode=_env_flag("ENVCHECK_DEV_MODE"),
    )
