from __future__ import annotations

import os
import shutil
import signal
import subprocess

import pytest

from opsbrew import process
from opsbrew.errors import ExternalProcessError
from opsbrew.process import ProcessRunner

requires_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="requires a POSIX shell")


@requires_sh
def test_output_tolerates_non_utf8_bytes() -> None:
    output = ProcessRunner().output(("sh", "-c", r"printf 'caf\351\n'"))

    assert output == "caf�\n"


@requires_sh
def test_output_failure_keeps_undecodable_stderr() -> None:
    with pytest.raises(ExternalProcessError) as excinfo:
        ProcessRunner().output(("sh", "-c", r"printf 'erreur \351' >&2; exit 3"))

    assert excinfo.value.exit_code == 3
    assert excinfo.value.detail == "erreur �"


def test_missing_binary_fails_to_start() -> None:
    with pytest.raises(ExternalProcessError, match="Failed to start 'opsbrew-no-such-binary'"):
        ProcessRunner().run(("opsbrew-no-such-binary",))


class InterruptedProcess:
    """Popen double whose ``communicate`` is interrupted by Ctrl-C."""

    instances: list["InterruptedProcess"] = []

    def __init__(self, args, **_kwargs) -> None:  # noqa: ANN001, ANN003
        self.args = args
        self.returncode = None
        self.signals: list[int] = []
        self.waits: list[float | None] = []
        self.terminated = False
        self.killed = False
        self.wait_raises = False
        InterruptedProcess.instances.append(self)

    def communicate(self):  # noqa: ANN201
        raise KeyboardInterrupt

    def poll(self):  # noqa: ANN201
        return self.returncode

    def send_signal(self, signum: int) -> None:
        self.signals.append(signum)

    def terminate(self) -> None:
        self.terminated = True

    def kill(self) -> None:
        self.killed = True

    def wait(self, timeout: float | None = None) -> int:
        self.waits.append(timeout)
        if self.wait_raises and timeout is not None:
            raise subprocess.TimeoutExpired(self.args, timeout)
        self.returncode = -signal.SIGINT
        return self.returncode


@pytest.fixture
def interrupted(monkeypatch: pytest.MonkeyPatch) -> type[InterruptedProcess]:
    InterruptedProcess.instances = []
    monkeypatch.setattr(process.subprocess, "Popen", InterruptedProcess)
    return InterruptedProcess


@pytest.mark.skipif(os.name != "posix", reason="SIGINT forwarding is POSIX only")
def test_interrupt_is_forwarded_to_child(interrupted: type[InterruptedProcess]) -> None:
    with pytest.raises(KeyboardInterrupt):
        ProcessRunner().run(("kubectl", "logs", "-f", "api-1"))

    (child,) = interrupted.instances
    assert child.signals == [signal.SIGINT]
    assert child.waits == [process.INTERRUPT_GRACE_SECONDS]
    assert not child.killed


@pytest.mark.skipif(os.name != "posix", reason="SIGINT forwarding is POSIX only")
def test_unresponsive_child_is_killed(interrupted: type[InterruptedProcess], monkeypatch: pytest.MonkeyPatch) -> None:
    original_init = InterruptedProcess.__init__

    def stubborn_init(self, args, **kwargs) -> None:  # noqa: ANN001, ANN003
        original_init(self, args, **kwargs)
        self.wait_raises = True

    monkeypatch.setattr(InterruptedProcess, "__init__", stubborn_init)

    with pytest.raises(KeyboardInterrupt):
        ProcessRunner().run(("kubectl", "exec", "-it", "api-1", "--", "sh"))

    (child,) = interrupted.instances
    assert child.signals == [signal.SIGINT]
    assert child.killed
    assert child.waits == [process.INTERRUPT_GRACE_SECONDS, None]
