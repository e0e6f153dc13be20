"""Compile/test command discovery and compiler output classification."""

from __future__ import annotations

from pathlib import Path

from envcheck import files

# First marker file found wins.
COMPILE_MARKERS: list[tuple[str, list[str]]] = [
    ("setup.py", ["python", "setup.py", "build"]),
    ("pyproject.toml", ["python", "-m", "compileall", "-q", "."]),
    ("go.mod", ["go", "build", "./..."]),
    ("pom.xml", ["mvn", "compile"]),
    ("build.gradle", ["gradle", "build"]),
    ("Makefile", ["make"]),
]

TEST_MARKERS: list[tuple[str, list[str]]] = [
    ("setup.py", ["pytest"]),
    ("pytest.ini", ["pytest"]),
    ("pyproject.toml", ["pytest"]),
    ("go.mod", ["go", "test", "./..."]),
    ("pom.xml", ["mvn", "test"]),
    ("build.gradle", ["gradle", "test"]),
    ("Makefile", ["make", "test"]),
]

NO_COMPILE_COMMAND = ["echo", "No build command found"]
NO_TEST_COMMAND = ["echo", "No test command found"]


def _read_manifest(project: Path) -> dict | None:
    manifest = project / "package.json"
    if not files.file_exists(manifest):
        return None
    data = files.read_json(manifest)
    return data if isinstance(data, dict) else {}


def _scripts(manifest: dict) -> dict:
    scripts = manifest.get("scripts")
    return scripts if isinstance(scripts, dict) else {}


def _has_dependency(manifest: dict, name: str) -> bool:
    for key in ("dependencies", "devDependencies"):
        deps = manifest.get(key)
        if isinstance(deps, dict) and name in deps:
            return True
    return False


def _first_marker(project: Path, markers: list[tuple[str, list[str]]]) -> list[str] | None:
    for marker, command in markers:
        if files.file_exists(project / marker):
            return list(command)
    return None


def determine_compile_command(project: Path) -> list[str]:
    manifest = _read_manifest(project)
    if manifest is not None:
        scripts = _scripts(manifest)
        if scripts.get("build"):
            return ["npm", "run", "build"]
        if scripts.get("compile"):
            return ["npm", "run", "compile"]
        if _has_dependency(manifest, "typescript"):
            return ["npx", "tsc"]

    return _first_marker(project, COMPILE_MARKERS) or list(NO_COMPILE_COMMAND)


def determine_test_command(project: Path) -> list[str]:
    manifest = _read_manifest(project)
    if manifest is not None and _scripts(manifest).get("test"):
        return ["npm", "test"]

    return _first_marker(project, TEST_MARKERS) or list(NO_TEST_COMMAND)


def classify_output(output: str) -> tuple[list[str], list[str]]:
    """Split compiler output into (error lines, warning lines)."""
    errors: list[str] = []
    warnings: list[str] = []
    for line in output.splitlines():
        lowered = line.lower()
        if "error:" in lowered or "error " in lowered:
            errors.append(line.strip())
        elif "warning:" in lowered or "warn:" in lowered:
            warnings.append(line.strip())
    return errors, warnings
