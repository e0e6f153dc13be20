"""External container runtime access."""

from envcheck.runtime.adapter import CommandRunner, ContainerRuntime, SubprocessRunner
from envcheck.runtime.dockerfile import parse_build_script
from envcheck.runtime.models import CommandResult, ScriptInfo

__all__ = [
    "CommandResult",
    "CommandRunner",
    "ContainerRuntime",
    "ScriptInfo",
    "SubprocessRunner",
    "parse_build_script",
]
