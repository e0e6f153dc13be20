"""Container runtime adapter: turns build/run/inspect intents into CLI calls.

Every invocation is folded into a ``CommandResult``. A missing binary, a
spawn failure or a timeout produce ``exit_code=-1`` and ``success=False``
rather than an exception, so callers only branch on the result.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import weakref
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from envcheck import files
from envcheck.runtime.dockerfile import parse_build_script
from envcheck.runtime.models import CommandResult, ScriptInfo

logger = logging.getLogger(__name__)

VERSION_RE = re.compile(r"version ([0-9][0-9.]*)", re.IGNORECASE)

# Per event loop: tag -> lock, so concurrent builds of one tag queue up.
_build_locks: weakref.WeakKeyDictionary[
    asyncio.AbstractEventLoop, dict[str, asyncio.Lock]
] = weakref.WeakKeyDictionary()


def _build_lock(tag: str) -> asyncio.Lock:
    loop = asyncio.get_running_loop()
    locks = _build_locks.setdefault(loop, {})
    if tag not in locks:
        locks[tag] = asyncio.Lock()
    return locks[tag]


class CommandRunner(ABC):
    """Abstract interface for running an external process."""

    @abstractmethod
    async def run(
        self,
        args: list[str],
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        """Run ``args`` (no shell) and return the normalized outcome."""
        ...


class SubprocessRunner(CommandRunner):
    """Runs commands with asyncio subprocesses."""

    async def run(
        self,
        args: list[str],
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        logger.debug("Running: %s", " ".join(args))
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
            )
        except OSError as e:
            logger.warning("Failed to start %s: %s", args[0], e)
            return CommandResult(success=False, stderr=str(e), exit_code=-1)

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning("Command timed out after %ss: %s", timeout, " ".join(args))
            return CommandResult(
                success=False,
                stderr=f"Command timed out after {timeout} seconds",
                exit_code=-1,
                timed_out=True,
            )

        return CommandResult.from_exit(
            proc.returncode if proc.returncode is not None else -1,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )


class ContainerRuntime:
    """Thin wrapper over a docker-compatible CLI.

    Holds no state between calls beyond its configuration; the caller tracks
    image tags.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        binary: str = "docker",
        timeout: float | None = None,
        build_timeout: float | None = None,
    ) -> None:
        self._runner = runner or SubprocessRunner()
        self._binary = binary
        self._timeout = timeout
        self._build_timeout = build_timeout or timeout

    async def run_command(
        self, args: list[str], timeout: float | None = None,
    ) -> CommandResult:
        return await self._runner.run(
            [self._binary, *args], timeout=timeout or self._timeout,
        )

    async def is_available(self) -> bool:
        result = await self.run_command(["--version"])
        return result.success

    async def get_info(self) -> dict[str, Any]:
        """Return client version/api/platform, best effort."""
        result = await self.run_command(["version", "--format", "json"])
        if result.success:
            try:
                client = json.loads(result.stdout).get("Client") or {}
                return {
                    "version": client.get("Version"),
                    "api_version": client.get("ApiVersion"),
                    "platform": (client.get("Platform") or {}).get("Name"),
                }
            except (ValueError, AttributeError):
                logger.debug("Runtime version output was not JSON, falling back")

        fallback = await self.run_command(["--version"])
        match = VERSION_RE.search(fallback.stdout) if fallback.success else None
        return {"version": match.group(1) if match else None}

    async def build_image(
        self,
        script_path: Path,
        tag: str,
        context: Path | None = None,
        build_args: dict[str, str] | None = None,
    ) -> CommandResult:
        args = ["build"]
        for key, value in (build_args or {}).items():
            args.extend(["--build-arg", f"{key}={value}"])
        args.extend(["-t", tag, "-f", str(script_path)])
        args.append(str(context or script_path.parent))

        async with _build_lock(tag):
            logger.info("Building image %s from %s", tag, script_path)
            return await self.run_command(args, timeout=self._build_timeout)

    async def run_in_container(
        self,
        image: str,
        command: list[str],
        workdir: str | None = None,
        env: dict[str, str] | None = None,
        volumes: list[str] | None = None,
        user: str | None = None,
    ) -> CommandResult:
        args = ["run", "--rm"]
        if workdir:
            args.extend(["-w", workdir])
        for key, value in (env or {}).items():
            args.extend(["-e", f"{key}={value}"])
        for volume in volumes or []:
            args.extend(["-v", volume])
        if user:
            args.extend(["-u", user])
        args.append(image)
        args.extend(command)
        return await self.run_command(args)

    async def image_exists(self, tag: str) -> bool:
        result = await self.run_command(["images", "-q", tag])
        return result.success and bool(result.stdout)

    async def remove_image(self, tag: str) -> CommandResult:
        return await self.run_command(["rmi", "-f", tag])

    async def inspect_script(self, path: Path) -> ScriptInfo:
        """Parse a build script from disk. Raises ConfigReadError if unreadable."""
        return parse_build_script(files.read_text(path))
