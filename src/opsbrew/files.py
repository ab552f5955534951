"""Command construction for the file shortcuts."""

from __future__ import annotations

import sys
from pathlib import Path

from .errors import NotFoundError, ValidationError

# Exit status used by grep for "no match" and by diff for "files differ".
NO_MATCH = 1
FILES_DIFFER = 1


def require_file(path: str | Path) -> Path:
    candidate = Path(path)
    if not candidate.exists():
        raise NotFoundError(f"File {candidate} does not exist")
    return candidate


def open_argv(path: str, platform: str | None = None) -> tuple[str, ...]:
    platform = platform or sys.platform
    if platform == "darwin":
        return ("open", path)
    if platform.startswith("linux") or platform.startswith("freebsd"):
        return ("xdg-open", path)
    if platform in ("win32", "cygwin"):
        return ("cmd", "/c", "start", "", path)
    raise ValidationError(f"Unsupported operating system: {platform}")


def find_argv(pattern: str, directory: str = ".") -> tuple[str, ...]:
    return ("find", directory, "-name", pattern, "-type", "f")


def grep_argv(pattern: str, path: str) -> tuple[str, ...]:
    return ("grep", "-n", pattern, path)


def backup_path(path: str, backup: str | None = None) -> str:
    return backup or f"{path}.backup"


def backup_argv(path: str, backup: str | None = None) -> tuple[str, ...]:
    return ("cp", path, backup_path(path, backup))


def diff_argv(first: str, second: str) -> tuple[str, ...]:
    return ("diff", first, second)


def parse_found(output: str) -> list[str]:
    return [line for line in output.splitlines() if line.strip()]
