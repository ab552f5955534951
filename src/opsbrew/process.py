"""Spawning of the wrapped external binaries."""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
from typing import Any, Sequence

from .errors import ExternalProcessError

logger = logging.getLogger(__name__)

INTERRUPT_GRACE_SECONDS = 5


class ProcessRunner:
    """Runs external commands, connecting them to this process's streams.

    ``run`` streams output straight to the terminal and raises on failure,
    ``call`` returns the exit status for tools where non-zero is meaningful
    (``grep``, ``diff``), and ``output`` captures stdout for candidate listers.
    """

    def run(self, argv: Sequence[str]) -> None:
        returncode, _, _ = self._spawn(argv)
        if returncode != 0:
            raise ExternalProcessError(argv, returncode=returncode)

    def call(self, argv: Sequence[str], *, quiet: bool = False) -> int:
        if quiet:
            returncode, _, _ = self._spawn(argv, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        else:
            returncode, _, _ = self._spawn(argv)
        return returncode

    def output(self, argv: Sequence[str]) -> str:
        returncode, stdout, stderr = self._spawn(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
        )
        if returncode != 0:
            detail = (stderr or "").strip() or None
            raise ExternalProcessError(argv, returncode=returncode, detail=detail)
        return stdout or ""

    def _spawn(self, argv: Sequence[str], **kwargs: Any) -> tuple[int, str | None, str | None]:
        args = list(argv)
        if not args:
            raise ExternalProcessError(args, detail="empty command")

        logger.debug("Running: %s", shlex.join(args))
        try:
            process = subprocess.Popen(args, **kwargs)
        except OSError as exc:
            raise ExternalProcessError(args, detail=exc.strerror or str(exc)) from exc

        try:
            stdout, stderr = process.communicate()
        except KeyboardInterrupt:
            _interrupt(process)
            raise

        logger.debug("Exit status %s: %s", process.returncode, shlex.join(args))
        return process.returncode, stdout, stderr


def _interrupt(process: subprocess.Popen) -> None:
    """Forward an interrupt to ``process`` and reap it."""

    if process.poll() is not None:
        return
    if os.name == "posix":
        process.send_signal(signal.SIGINT)
    else:
        process.terminate()
    try:
        process.wait(timeout=INTERRUPT_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()
