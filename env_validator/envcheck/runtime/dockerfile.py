"""Line-prefix scanner for build scripts (Dockerfiles).

This is not a Dockerfile grammar: each line is matched on its leading
instruction keyword only. Continuation lines and heredocs are ignored.
"""

from __future__ import annotations

from envcheck.runtime.models import ScriptInfo


def _split_instruction(line: str) -> tuple[str, str] | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    parts = stripped.split(None, 1)
    if len(parts) < 2:
        return None
    return parts[0].upper(), parts[1].strip()


def _parse_ports(value: str) -> list[int]:
    ports: list[int] = []
    for token in value.split():
        # EXPOSE 8080/tcp
        number = token.split("/", 1)[0]
        if number.isdigit():
            ports.append(int(number))
    return ports


def parse_build_script(text: str) -> ScriptInfo:
    """Extract base image, workdir, user and exposed ports."""
    info = ScriptInfo()

    for line in text.splitlines():
        parsed = _split_instruction(line)
        if parsed is None:
            continue
        keyword, value = parsed

        if keyword == "FROM":
            if info.base_image is None:
                info.base_image = value
        elif keyword == "WORKDIR":
            info.workdir = value
        elif keyword == "USER":
            info.user = value
        elif keyword == "EXPOSE":
            info.exposed_ports.extend(_parse_ports(value))

    return info
