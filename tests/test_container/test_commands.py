"""Tests for compile/test command discovery."""

from __future__ import annotations

import json
from pathlib import Path

from envcheck.container.commands import (
    classify_output,
    determine_compile_command,
    determine_test_command,
)


def _manifest(project: Path, data: dict) -> None:
    (project / "package.json").write_text(json.dumps(data))


class TestCompileCommand:
    def test_build_script(self, project: Path) -> None:
        _manifest(project, {"scripts": {"build": "tsc", "compile": "tsc -b"}})
        assert determine_compile_command(project) == ["npm", "run", "build"]

    def test_compile_script(self, project: Path) -> None:
        _manifest(project, {"scripts": {"compile": "tsc -b"}})
        assert determine_compile_command(project) == ["npm", "run", "compile"]

    def test_typescript_dependency(self, project: Path) -> None:
        _manifest(project, {"devDependencies": {"typescript": "^5.4.0"}})
        assert determine_compile_command(project) == ["npx", "tsc"]

    def test_marker_files(self, project: Path) -> None:
        (project / "go.mod").write_text("module example.com/app\n")
        assert determine_compile_command(project) == ["go", "build", "./..."]

    def test_pyproject(self, project: Path) -> None:
        (project / "pyproject.toml").write_text("[project]\nname = 'app'\n")
        assert determine_compile_command(project) == ["python", "-m", "compileall", "-q", "."]
        assert determine_test_command(project) == ["pytest"]

    def test_nothing_found(self, project: Path) -> None:
        assert determine_compile_command(project) == ["echo", "No build command found"]


class TestTestCommand:
    def test_npm_test(self, project: Path) -> None:
        _manifest(project, {"scripts": {"test": "jest"}})
        assert determine_test_command(project) == ["npm", "test"]

    def test_manifest_without_test_falls_through(self, project: Path) -> None:
        _manifest(project, {"scripts": {"build": "tsc"}})
        (project / "pytest.ini").write_text("[pytest]\n")
        assert determine_test_command(project) == ["pytest"]

    def test_makefile(self, project: Path) -> None:
        (project / "Makefile").write_text("test:\n\ttrue\n")
        assert determine_test_command(project) == ["make", "test"]


def test_classify_output() -> None:
    errors, warnings = classify_output(
        "src/app.ts(3,5): error TS2322: Type 'string' is not assignable\n"
        "warning: unused variable\n"
        "Done in 2.1s\n"
    )
    assert len(errors) == 1
    assert errors[0].startswith("src/app.ts")
    assert warnings == ["warning: unused variable"]
