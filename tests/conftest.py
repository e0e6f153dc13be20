"""Shared test fixtures and configuration."""

import json
import os
import sys
from pathlib import Path

# Add env_validator/ to Python path so `from envcheck.xxx` imports work
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "env_validator"))

import pytest

os.environ["ENVCHECK_DEV_MODE"] = "true"


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty project directory with a stable name."""
    root = tmp_path / "sample-app"
    root.mkdir()
    return root


@pytest.fixture
def devcontainer(project: Path):
    """Write .devcontainer/devcontainer.json (and optionally a Dockerfile)."""

    def _write(config, dockerfile: str | None = None, dockerfile_name: str = "Dockerfile") -> Path:
        dc = project / ".devcontainer"
        if isinstance(config, str):
            dc.mkdir(parents=True, exist_ok=True)
            (dc / "devcontainer.json").write_text(config)
        else:
            write_json(dc / "devcontainer.json", config)
        if dockerfile is not None:
            (dc / dockerfile_name).write_text(dockerfile)
        return dc

    return _write


@pytest.fixture
def vscode(project: Path):
    """Write a document into .vscode/."""

    def _write(name: str, data) -> Path:
        target = project / ".vscode" / name
        if isinstance(data, str):
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(data)
            return target
        return write_json(target, data)

    return _write
