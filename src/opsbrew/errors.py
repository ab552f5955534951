"""Error taxonomy shared across opsbrew."""

from __future__ import annotations

import shlex
from typing import Sequence


class OpsbrewError(RuntimeError):
    """Base class for errors surfaced to the command line."""

    @property
    def exit_code(self) -> int:
        return 1


class ResolutionError(OpsbrewError):
    """Raised when candidates cannot be listed or no selection was made."""


class NotFoundError(OpsbrewError):
    """Raised when a named recipe, template or file does not exist."""


class ValidationError(OpsbrewError):
    """Raised when required input is missing or malformed."""


class PersistenceError(OpsbrewError):
    """Raised when the configuration file cannot be read or written."""


class ConfigLoadError(OpsbrewError):
    """Raised when a configuration document cannot be parsed or validated."""


class ExternalProcessError(OpsbrewError):
    """Raised when a spawned process fails to start or exits non-zero."""

    def __init__(
        self,
        argv: Sequence[str],
        *,
        returncode: int | None = None,
        detail: str | None = None,
    ) -> None:
        self.argv = tuple(argv)
        self.returncode = returncode
        self.detail = detail
        super().__init__(self._describe())

    @property
    def command(self) -> str:
        return shlex.join(self.argv)

    @property
    def exit_code(self) -> int:
        if self.returncode is not None and self.returncode > 0:
            return self.returncode
        return 1

    def _describe(self) -> str:
        if self.returncode is None:
            message = f"Failed to start '{self.command}'"
        else:
            message = f"'{self.command}' exited with status {self.returncode}"
        if self.detail:
            message = f"{message}: {self.detail}"
        return message
