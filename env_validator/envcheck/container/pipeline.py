"""Container environment pipeline: config, runtime, build script, build, compile, test."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Any

from envcheck import files
from envcheck.config import Settings
from envcheck.container.commands import (
    classify_output,
    determine_compile_command,
    determine_test_command,
)
from envcheck.interpreter.test_output import parse_test_output
from envcheck.runtime.adapter import ContainerRuntime
from envcheck.runtime.models import CommandResult
from envcheck.stages import (
    Criticality,
    StageDescriptor,
    always,
    requires,
    run_stages,
)
from envcheck.validator.aggregator import (
    build_report,
    create_error,
    create_failure_result,
    create_result,
    create_success_result,
    create_warning,
    validate_port,
)
from envcheck.validator.models import (
    ValidationError,
    ValidationReport,
    ValidationResult,
    ValidationSeverity,
    ValidationWarning,
)

logger = logging.getLogger(__name__)

PIPELINE_NAME = "ContainerPipeline"
GENERATED_SCRIPT_NAME = "Dockerfile.envcheck"
TEST_ENV = {"CI": "true", "NODE_ENV": "test"}

# Any run of non-alphanumerics becomes a single "-".
_TAG_UNSAFE_RE = re.compile(r"[^a-z0-9]+")


def derive_image_tag(project_path: Path) -> str:
    """Deterministic image tag for a project directory."""
    name = _TAG_UNSAFE_RE.sub("-", Path(project_path).resolve().name.lower())
    name = name.strip("-") or "project"
    return f"devcontainer-{name}-validation"


def _elapsed(started: float) -> float:
    return round(time.monotonic() - started, 3)


class ContainerPipeline:
    """Validates and exercises the ``.devcontainer`` setup of one project.

    The image tag is passed explicitly to the stage methods; the pipeline
    itself keeps no record of what was built.
    """

    def __init__(
        self,
        project_path: Path | str,
        runtime: ContainerRuntime | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.project_path = Path(project_path).resolve()
        self.devcontainer_dir = self.project_path / ".devcontainer"
        self.config_path = self.devcontainer_dir / "devcontainer.json"
        self._settings = settings or Settings()
        self._runtime = runtime or ContainerRuntime(
            binary=self._settings.runtime_binary,
            timeout=self._settings.command_timeout,
            build_timeout=self._settings.build_timeout,
        )

    @property
    def workdir(self) -> str:
        return self._settings.container_workdir

    def read_config(self) -> dict[str, Any]:
        data = files.read_json(self.config_path)
        if not isinstance(data, dict):
            raise files.ConfigReadError(self.config_path, "expected a JSON object")
        return data

    def _script_path(self, config: dict[str, Any]) -> Path | None:
        build = config.get("build") if isinstance(config.get("build"), dict) else {}
        script = config.get("dockerFile") or build.get("dockerfile")
        if not script:
            return None
        return self.devcontainer_dir / script

    def _build_context(self, config: dict[str, Any], script: Path) -> Path:
        build = config.get("build") if isinstance(config.get("build"), dict) else {}
        context = build.get("context") or config.get("context")
        if context:
            return (self.devcontainer_dir / context).resolve()
        return script.parent

    # -- Stage 1: static config -------------------------------------------

    async def validate_config(self) -> ValidationResult:
        file = str(self.config_path)
        if not files.file_exists(self.config_path):
            return create_failure_result(
                "DevContainer configuration missing",
                [
                    create_error(
                        "DEVCONTAINER_NOT_FOUND",
                        "devcontainer.json file not found",
                        ValidationSeverity.critical,
                        file=file,
                    )
                ],
            )

        try:
            config = self.read_config()
        except files.ConfigReadError as e:
            return create_failure_result(
                "Failed to validate DevContainer configuration",
                [create_error("CONFIG_PARSE_ERROR", str(e), ValidationSeverity.critical, file=file)],
            )

        errors = check_container_config(config, file)
        return create_result(
            "DevContainer configuration is valid",
            "DevContainer configuration has errors",
            errors,
            metadata={"config_path": file},
        )

    # -- Stage 2: runtime --------------------------------------------------

    async def check_runtime(self) -> ValidationResult:
        if not await self._runtime.is_available():
            return create_failure_result(
                "Docker environment not available",
                [
                    create_error(
                        "DOCKER_NOT_AVAILABLE",
                        "Docker is not installed or not running",
                        ValidationSeverity.critical,
                    )
                ],
            )
        info = await self._runtime.get_info()
        return create_success_result("Docker environment is valid", info)

    # -- Stage 3: build script ---------------------------------------------

    async def inspect_build_script(self) -> ValidationResult:
        config = self.read_config()
        script = self._script_path(config)
        if script is None:
            return create_success_result("No Dockerfile to validate (using base image)")

        file = str(script)
        if not files.file_exists(script):
            return create_failure_result(
                "Dockerfile not found",
                [
                    create_error(
                        "DOCKERFILE_NOT_FOUND",
                        f"Dockerfile not found at {script}",
                        ValidationSeverity.critical,
                        file=file,
                    )
                ],
            )

        info = await self._runtime.inspect_script(script)
        errors: list[ValidationError] = []
        warnings: list[ValidationWarning] = []

        if not info.base_image:
            errors.append(
                create_error(
                    "NO_BASE_IMAGE",
                    "Dockerfile must specify a FROM directive",
                    ValidationSeverity.critical,
                    file=file,
                )
            )
        if not info.workdir:
            warnings.append(
                create_warning(
                    "NO_WORKDIR",
                    "Consider setting WORKDIR in Dockerfile",
                    f"Add WORKDIR {self.workdir} to set the working directory",
                    file=file,
                )
            )

        return create_result(
            "Dockerfile is valid",
            "Dockerfile validation failed",
            errors,
            warnings,
            metadata=info.model_dump(),
        )

    # -- Stage 4: build ----------------------------------------------------

    async def build(self, tag: str) -> ValidationResult:
        started = time.monotonic()
        config = self.read_config()
        script = self._script_path(config)

        if script is None:
            image = config.get("image")
            if not image:
                return create_failure_result(
                    "Container build failed",
                    [
                        create_error(
                            "NO_DOCKER_CONFIG",
                            "No Docker configuration found in devcontainer.json",
                            ValidationSeverity.critical,
                        )
                    ],
                )
            script = self.devcontainer_dir / GENERATED_SCRIPT_NAME
            files.write_text(script, f"FROM {image}\n")
            context = self.devcontainer_dir
        else:
            context = self._build_context(config, script)

        if not files.file_exists(script):
            return create_failure_result(
                "Container build failed",
                [
                    create_error(
                        "DOCKERFILE_NOT_FOUND",
                        f"Dockerfile not found at {script}",
                        file=str(script),
                    )
                ],
            )

        build = config.get("build") if isinstance(config.get("build"), dict) else {}
        raw_args = build.get("args") if isinstance(build.get("args"), dict) else {}
        build_args = {str(k): str(v) for k, v in raw_args.items()}

        result = await self._runtime.build_image(script, tag, context, build_args)
        metadata = {
            "image_name": tag,
            "dockerfile": str(script),
            "context": str(context),
            "build_log": result.stdout_lines(),
        }

        if result.timed_out:
            return create_failure_result(
                "Container build timed out",
                [create_error("BUILD_TIMEOUT", result.stderr, image=tag)],
                metadata=metadata,
            )
        if not result.success:
            return create_failure_result(
                "Container build failed",
                _stderr_errors("BUILD_ERROR", result, "Docker build failed"),
                metadata=metadata,
            )
        if not await self._runtime.image_exists(tag):
            return create_failure_result(
                "Container build failed",
                [create_error("IMAGE_NOT_CREATED", "Docker image was not created successfully", image=tag)],
                metadata=metadata,
            )

        metadata["duration"] = _elapsed(started)
        return create_success_result("Container built successfully", metadata)

    # -- Stage 5: compile --------------------------------------------------

    async def compile(self, tag: str) -> ValidationResult:
        started = time.monotonic()
        command = determine_compile_command(self.project_path)
        logger.info("Running compilation command: %s", " ".join(command))

        result = await self._runtime.run_in_container(
            tag,
            command,
            workdir=self.workdir,
            volumes=[f"{self.project_path}:{self.workdir}"],
        )
        metadata: dict[str, Any] = {"command": command, "exit_code": result.exit_code}

        if result.timed_out:
            return create_failure_result(
                "Compilation timed out",
                [create_error("COMPILATION_TIMEOUT", result.stderr)],
                metadata=metadata,
            )

        error_lines, warning_lines = classify_output(result.stdout)
        errors = [create_error("COMPILATION_ERROR", line) for line in error_lines]
        if not result.success:
            errors.extend(_stderr_errors("COMPILATION_ERROR", result, "Compilation failed"))
        warnings = [create_warning("COMPILATION_WARNING", line) for line in warning_lines]

        metadata["duration"] = _elapsed(started)
        return create_result(
            "Compilation successful", "Compilation failed", errors, warnings, metadata,
        )

    # -- Stage 6: test -----------------------------------------------------

    async def run_tests(self, tag: str) -> ValidationResult:
        started = time.monotonic()
        command = determine_test_command(self.project_path)
        logger.info("Running test command: %s", " ".join(command))

        result = await self._runtime.run_in_container(
            tag,
            command,
            workdir=self.workdir,
            env=dict(TEST_ENV),
            volumes=[f"{self.project_path}:{self.workdir}"],
        )
        counts = parse_test_output(result.stdout)
        metadata: dict[str, Any] = {
            "command": command,
            "exit_code": result.exit_code,
            "test_counts": counts.model_dump(),
            "duration": _elapsed(started),
        }

        if result.timed_out:
            return create_failure_result(
                "Test run timed out",
                [create_error("TEST_TIMEOUT", result.stderr)],
                metadata=metadata,
            )

        if counts.failed > 0:
            return create_failure_result(
                f"{counts.failed} of {counts.total} tests failed",
                [
                    create_error(
                        "TEST_FAILURE",
                        f"{counts.failed} test(s) failed",
                        failed=counts.failed,
                        total=counts.total,
                    )
                ],
                metadata=metadata,
            )

        if not counts.matched and not result.success:
            return create_failure_result(
                "Test execution failed",
                _stderr_errors("TEST_EXECUTION_ERROR", result, "Test execution failed"),
                metadata=metadata,
            )

        warnings: list[ValidationWarning] = []
        if not result.success:
            warnings.append(
                create_warning(
                    "TEST_EXIT_CODE_MISMATCH",
                    f"Test runner exited with code {result.exit_code} although no test failed",
                    "Check coverage thresholds or runner configuration",
                )
            )
        return create_success_result(
            f"All {counts.total} tests passed", metadata, warnings,
        )

    # -- Orchestration -----------------------------------------------------

    def stages(self, tag: str) -> list[StageDescriptor]:
        return [
            StageDescriptor(
                name="config",
                title="DevContainer configuration",
                run=self.validate_config,
                criticality=Criticality.critical,
                should_run=always,
                failure_recommendation="Fix devcontainer.json configuration before proceeding",
            ),
            StageDescriptor(
                name="runtime",
                title="Docker environment",
                run=self.check_runtime,
                criticality=Criticality.critical,
                should_run=requires("config"),
                failure_recommendation="Ensure Docker is installed and running",
            ),
            StageDescriptor(
                name="build_script",
                title="Dockerfile validation",
                run=self.inspect_build_script,
                should_run=requires("config"),
            ),
            StageDescriptor(
                name="build",
                title="Container build",
                run=lambda: self.build(tag),
                should_run=requires("config", "runtime"),
                failure_recommendation=(
                    "Fix container build issues before proceeding with compilation and tests"
                ),
            ),
            StageDescriptor(
                name="compile",
                title="Compilation",
                run=lambda: self.compile(tag),
                should_run=requires("build"),
                failure_recommendation="Fix compilation errors before running tests",
            ),
            StageDescriptor(
                name="test",
                title="Test run",
                run=lambda: self.run_tests(tag),
                should_run=requires("compile"),
                failure_recommendation="Fix failing tests inside the container",
            ),
        ]

    async def validate_setup(self, tag: str | None = None) -> ValidationReport:
        """Run every stage in order and fold the outcome into a report."""
        started = time.monotonic()
        tag = tag or derive_image_tag(self.project_path)
        logger.info("Validating container setup for %s (image %s)", self.project_path, tag)

        run = await run_stages(self.stages(tag))
        if run.aborted:
            logger.warning("Container validation stopped early after a critical failure")
        report = build_report(
            PIPELINE_NAME,
            run.results,
            started,
            run.recommendations,
            warning_subject="the container setup",
        )
        logger.info(
            "Container validation finished: %d/%d stages passed",
            report.summary.passed,
            report.summary.total_checks,
        )
        return report

    async def cleanup(self, tag: str | None = None) -> None:
        """Remove the validation image and generated build script. Never raises."""
        tag = tag or derive_image_tag(self.project_path)
        try:
            if await self._runtime.image_exists(tag):
                result = await self._runtime.remove_image(tag)
                if not result.success:
                    logger.warning("Failed to remove image %s: %s", tag, result.stderr)
                else:
                    logger.info("Removed image %s", tag)
            (self.devcontainer_dir / GENERATED_SCRIPT_NAME).unlink(missing_ok=True)
        except Exception:
            logger.exception("Failed to clean up resources for %s", tag)


def check_container_config(config: dict[str, Any], file: str | None = None) -> list[ValidationError]:
    """Static checks over a parsed devcontainer.json."""
    errors: list[ValidationError] = []
    build = config.get("build") if isinstance(config.get("build"), dict) else {}

    if not config.get("image") and not config.get("dockerFile") and not build.get("dockerfile"):
        errors.append(
            create_error(
                "NO_DOCKER_CONFIG",
                "No Docker configuration found (image, dockerFile, or build.dockerfile required)",
                ValidationSeverity.critical,
                file=file,
            )
        )

    customizations = config.get("customizations")
    vscode = customizations.get("vscode") if isinstance(customizations, dict) else None
    candidates = [config.get("extensions")]
    if isinstance(vscode, dict):
        candidates.append(vscode.get("extensions"))
    for extensions in candidates:
        if extensions is not None and not isinstance(extensions, list):
            errors.append(
                create_error(
                    "INVALID_EXTENSIONS_FORMAT",
                    "VSCode extensions must be an array",
                    file=file,
                )
            )

    ports = config.get("forwardPorts")
    if ports is not None:
        if not isinstance(ports, list):
            errors.append(
                create_error("INVALID_PORTS_FORMAT", "forwardPorts must be an array", file=file)
            )
        else:
            for port in ports:
                port_error = validate_port(port, file=file)
                if port_error:
                    errors.append(port_error)

    return errors


def _stderr_errors(code: str, result: CommandResult, fallback: str) -> list[ValidationError]:
    errors = [create_error(code, line) for line in result.stderr_lines()]
    errors.append(
        create_error(code, f"{fallback} (exit code {result.exit_code})", exit_code=result.exit_code)
    )
    return errors
