"""Validation API endpoints."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from envcheck.config import Settings
from envcheck.container.pipeline import ContainerPipeline, derive_image_tag
from envcheck.deps import get_runtime, get_settings
from envcheck.editor.pipeline import EditorConfigPipeline
from envcheck.runtime.adapter import ContainerRuntime
from envcheck.validator.models import ValidationReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/validate", tags=["validate"])


class ContainerValidationRequest(BaseModel):
    project_path: str = Field(..., description="Project root containing .devcontainer/")
    cleanup: bool = Field(True, description="Remove the validation image afterwards")


class EditorValidationRequest(BaseModel):
    project_path: str = Field(..., description="Project root containing .vscode/")


def _project_dir(raw: str) -> Path:
    path = Path(raw).expanduser()
    if not path.is_dir():
        raise HTTPException(status_code=404, detail=f"Project directory not found: {raw}")
    return path.resolve()


@router.post("/container", response_model=ValidationReport)
async def validate_container(
    body: ContainerValidationRequest,
    runtime: ContainerRuntime = Depends(get_runtime),
    settings: Settings = Depends(get_settings),
) -> ValidationReport:
    """Run the container pipeline for a project."""
    project = _project_dir(body.project_path)
    pipeline = ContainerPipeline(project, runtime, settings)
    tag = derive_image_tag(project)
    try:
        return await pipeline.validate_setup(tag)
    finally:
        if body.cleanup:
            await pipeline.cleanup(tag)


@router.post("/editor", response_model=ValidationReport)
async def validate_editor(body: EditorValidationRequest) -> ValidationReport:
    """Run the editor configuration pipeline for a project."""
    project = _project_dir(body.project_path)
    return await EditorConfigPipeline(project).validate()
