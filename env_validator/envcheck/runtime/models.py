"""Data models for external command results."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class CommandResult(BaseModel):
    """Normalized outcome of one external process invocation."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int
    timed_out: bool = False

    @field_validator("stdout", "stderr")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @classmethod
    def from_exit(
        cls, exit_code: int, stdout: str = "", stderr: str = "",
    ) -> CommandResult:
        return cls(
            success=exit_code == 0,
            stdout=stdout,
            stderr=stderr,
            exit_code=exit_code,
        )

    def stderr_lines(self) -> list[str]:
        return [line for line in self.stderr.splitlines() if line.strip()]

    def stdout_lines(self) -> list[str]:
        return [line for line in self.stdout.splitlines() if line.strip()]


class ScriptInfo(BaseModel):
    """Metadata recovered from a build script (Dockerfile)."""

    base_image: str | None = None
    workdir: str | None = None
    user: str | None = None
    exposed_ports: list[int] = Field(default_factory=list)
