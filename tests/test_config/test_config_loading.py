"""Tests for settings loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from envcheck.config import Settings, load_settings


class TestLoadSettings:
    def test_options_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        opts = tmp_path / "envcheck.json"
        opts.write_text(json.dumps({"runtime_binary": "podman", "build_timeout": 60}))
        monkeypatch.setenv("ENVCHECK_OPTIONS_PATH", str(opts))

        settings = load_settings()

        assert settings.runtime_binary == "podman"
        assert settings.build_timeout == 60
        assert settings.command_timeout == 600

    def test_environment_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVCHECK_OPTIONS_PATH", str(tmp_path / "absent.json"))
        monkeypatch.setenv("ENVCHECK_COMMAND_TIMEOUT", "30")
        monkeypatch.setenv("ENVCHECK_CONTAINER_WORKDIR", "/src")
        monkeypatch.setenv("ENVCHECK_DEV_MODE", "1")

        settings = load_settings()

        assert settings.command_timeout == 30
        assert settings.container_workdir == "/src"
        assert settings.dev_mode is True

    def test_timeouts_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            Settings(command_timeout=0)
