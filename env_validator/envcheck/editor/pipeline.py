"""Editor configuration pipeline over the documents in ``.vscode/``.

No stage gates another. The stages are independent reads, so they are
awaited together and the results kept in declaration order.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any

from envcheck import files
from envcheck.editor.cross import check_cross_references
from envcheck.editor.extensions import (
    SOURCE_SEARCH_DEPTH,
    SOURCE_SUFFIXES,
    check_extensions_document,
)
from envcheck.editor.launch import check_launch_document
from envcheck.editor.settings import check_settings_document, parse_settings_text
from envcheck.editor.tasks import check_tasks_document
from envcheck.stages import Criticality, StageDescriptor, execute_stage
from envcheck.validator.aggregator import (
    build_report,
    count_errors,
    create_error,
    create_failure_result,
    create_success_result,
    create_warning,
)
from envcheck.validator.models import ValidationReport, ValidationResult, ValidationSeverity

logger = logging.getLogger(__name__)

PIPELINE_NAME = "EditorConfigPipeline"

LAUNCH_FILE = "launch.json"
TASKS_FILE = "tasks.json"
SETTINGS_FILE = "settings.json"
EXTENSIONS_FILE = "extensions.json"


class EditorConfigPipeline:
    """Validates the editor configuration documents of one project."""

    def __init__(self, project_path: Path | str) -> None:
        self.project_path = Path(project_path).resolve()
        self.vscode_dir = self.project_path / ".vscode"

    def _path(self, name: str) -> Path:
        return self.vscode_dir / name

    async def _load_json(self, name: str) -> Any | None:
        """Parsed document, or None if absent. Raises ConfigReadError."""
        path = self._path(name)
        if not files.file_exists(path):
            return None
        return await asyncio.to_thread(files.read_json, path)

    def _parse_failure(self, message: str, code: str, name: str, e: Exception) -> ValidationResult:
        return create_failure_result(
            message,
            [create_error(code, str(e), ValidationSeverity.critical, file=str(self._path(name)))],
        )

    async def check_directory(self) -> ValidationResult:
        if files.directory_exists(self.vscode_dir):
            return create_success_result(".vscode directory exists")
        return create_failure_result(
            ".vscode directory not found",
            [
                create_error(
                    "VSCODE_DIR_MISSING",
                    "No .vscode directory found in project",
                    ValidationSeverity.critical,
                    file=str(self.vscode_dir),
                )
            ],
        )

    async def validate_launch(self) -> ValidationResult:
        file = str(self._path(LAUNCH_FILE))
        try:
            doc = await self._load_json(LAUNCH_FILE)
        except files.ConfigReadError as e:
            return self._parse_failure(
                "Failed to validate launch configuration", "LAUNCH_PARSE_ERROR", LAUNCH_FILE, e,
            )

        if doc is None:
            return create_success_result(
                "Launch configuration not present (optional)",
                {"present": False},
                [
                    create_warning(
                        "LAUNCH_CONFIG_MISSING",
                        "No launch.json found",
                        "Create a launch.json file to enable debugging in VSCode",
                        file=file,
                    )
                ],
            )
        return check_launch_document(doc, file)

    async def validate_tasks(self) -> ValidationResult:
        file = str(self._path(TASKS_FILE))
        try:
            doc = await self._load_json(TASKS_FILE)
        except files.ConfigReadError as e:
            return self._parse_failure(
                "Failed to validate tasks configuration", "TASKS_PARSE_ERROR", TASKS_FILE, e,
            )

        if doc is None:
            return create_success_result(
                "Tasks configuration not present (optional)",
                {"present": False},
                [
                    create_warning(
                        "TASKS_CONFIG_MISSING",
                        "No tasks.json found",
                        "Create a tasks.json file to define build and other tasks",
                        file=file,
                    )
                ],
            )
        return check_tasks_document(doc, file)

    async def validate_settings(self) -> ValidationResult:
        path = self._path(SETTINGS_FILE)
        if not files.file_exists(path):
            return create_success_result(
                "Settings configuration not present (optional)", {"present": False},
            )

        try:
            raw = await asyncio.to_thread(files.read_text, path)
            settings = parse_settings_text(raw, path)
        except files.ConfigReadError as e:
            return self._parse_failure(
                "Failed to validate settings configuration", "SETTINGS_PARSE_ERROR", SETTINGS_FILE, e,
            )
        return check_settings_document(settings, raw, str(path))

    async def cross_validate(self) -> ValidationResult:
        """Check references between documents, whatever their own stage results."""
        try:
            launch = await self._load_json(LAUNCH_FILE)
            tasks = await self._load_json(TASKS_FILE)
            settings_path = self._path(SETTINGS_FILE)
            settings = None
            if files.file_exists(settings_path):
                raw = await asyncio.to_thread(files.read_text, settings_path)
                settings = parse_settings_text(raw, settings_path)
        except files.ConfigReadError as e:
            return create_failure_result(
                "Cross-validation failed",
                [
                    create_error(
                        "CROSS_VALIDATION_ERROR",
                        str(e),
                        ValidationSeverity.critical,
                        file=str(e.path),
                    )
                ],
            )
        return check_cross_references(launch, tasks, settings, str(self._path(LAUNCH_FILE)))

    async def validate_extensions(self) -> ValidationResult:
        file = str(self._path(EXTENSIONS_FILE))
        try:
            doc = await self._load_json(EXTENSIONS_FILE)
        except files.ConfigReadError as e:
            return create_failure_result(
                "Failed to validate extensions configuration",
                [create_error("EXTENSIONS_PARSE_ERROR", str(e), ValidationSeverity.critical, file=file)],
            )

        has_sources = False
        if doc is None:
            sources = await asyncio.to_thread(
                files.find_files,
                self.project_path,
                SOURCE_SUFFIXES,
                SOURCE_SEARCH_DEPTH,
                1,
            )
            has_sources = bool(sources)
        return check_extensions_document(doc, has_sources, file)

    def stages(self) -> list[StageDescriptor]:
        return [
            StageDescriptor("directory", ".vscode directory", self.check_directory, Criticality.critical),
            StageDescriptor("launch", "Launch configuration", self.validate_launch),
            StageDescriptor("tasks", "Tasks configuration", self.validate_tasks),
            StageDescriptor("settings", "Settings configuration", self.validate_settings),
            StageDescriptor("cross", "Cross-validation", self.cross_validate),
            StageDescriptor("extensions", "Extensions recommendations", self.validate_extensions),
        ]

    async def validate(self) -> ValidationReport:
        """Run every stage and fold the results into a report."""
        started = time.monotonic()
        logger.info("Validating editor configuration for %s", self.project_path)

        stages = self.stages()
        results = list(await asyncio.gather(*(execute_stage(s) for s in stages)))
        by_name = {s.name: r for s, r in zip(stages, results)}

        report = build_report(
            PIPELINE_NAME,
            results,
            started,
            _recommendations(by_name),
            warning_subject="the VSCode experience",
        )
        logger.info(
            "Editor validation finished: %d/%d checks passed, %d warning(s)",
            report.summary.passed,
            report.summary.total_checks,
            report.summary.warnings,
        )
        return report


def _recommendations(by_name: dict[str, ValidationResult]) -> list[str]:
    recs: list[str] = []

    if not by_name["directory"].success:
        recs.append("Create a .vscode directory to store VSCode configurations")

    errors = count_errors(list(by_name.values()))
    if errors:
        recs.append(f"Fix {errors} error(s) before using VSCode integration")

    launch = by_name["launch"]
    if not launch.success:
        recs.append("Fix launch.json so debugging configurations can be used")
    elif launch.metadata.get("present") is False:
        recs.append("Consider adding a launch.json for debugging support")

    tasks = by_name["tasks"]
    if not tasks.success:
        recs.append("Fix tasks.json so build automation can be used")
    elif tasks.metadata.get("present") is False:
        recs.append("Consider adding a tasks.json for build automation")

    if not by_name["cross"].success:
        recs.append("Make every preLaunchTask refer to a task label defined in tasks.json")

    return recs
