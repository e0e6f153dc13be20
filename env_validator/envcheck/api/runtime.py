"""Container runtime status endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from envcheck.deps import get_runtime
from envcheck.runtime.adapter import ContainerRuntime

router = APIRouter(prefix="/api", tags=["runtime"])


class RuntimeStatus(BaseModel):
    available: bool
    version: str | None = None
    api_version: str | None = None
    platform: str | None = None


@router.get("/runtime", response_model=RuntimeStatus)
async def runtime_status(
    runtime: ContainerRuntime = Depends(get_runtime),
) -> RuntimeStatus:
    if not await runtime.is_available():
        return RuntimeStatus(available=False)
    info = await runtime.get_info()
    return RuntimeStatus(available=True, **info)
