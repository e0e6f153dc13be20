"""Shared FastAPI dependencies."""

from __future__ import annotations

from envcheck.config import Settings
from envcheck.runtime.adapter import ContainerRuntime

_settings: Settings | None = None
_runtime: ContainerRuntime | None = None


def get_settings() -> Settings:
    """FastAPI dependency: return the loaded Settings."""
    assert _settings is not None, "Settings not initialised"
    return _settings


def get_runtime() -> ContainerRuntime:
    """FastAPI dependency: return the shared ContainerRuntime."""
    assert _runtime is not None, "ContainerRuntime not initialised"
    return _runtime
