from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

import pytest

from opsbrew.errors import ExternalProcessError, ResolutionError


class FakeRunner:
    """Stand-in for ``ProcessRunner`` that records argv instead of spawning."""

    def __init__(
        self,
        outputs: dict[tuple[str, ...], str] | None = None,
        returncodes: dict[tuple[str, ...], int] | None = None,
    ) -> None:
        self.outputs = outputs or {}
        self.returncodes = returncodes or {}
        self.calls: list[tuple[str, ...]] = []

    def run(self, argv: Sequence[str]) -> None:
        returncode = self.call(argv)
        if returncode != 0:
            raise ExternalProcessError(argv, returncode=returncode)

    def call(self, argv: Sequence[str], *, quiet: bool = False) -> int:
        key = tuple(argv)
        self.calls.append(key)
        return self.returncodes.get(key, 0)

    def output(self, argv: Sequence[str]) -> str:
        key = tuple(argv)
        self.calls.append(key)
        returncode = self.returncodes.get(key, 0)
        if returncode != 0:
            raise ExternalProcessError(argv, returncode=returncode, detail="boom")
        return self.outputs.get(key, "")


class FakeSelector:
    """Picks the candidate named ``choice``; ``None`` simulates a cancelled prompt."""

    def __init__(self, choice: str | None = None) -> None:
        self.choice = choice
        self.offered: list[list[str]] = []

    def find(self, candidates, label, preview=None) -> int:  # noqa: ANN001
        names = [candidate.name for candidate in candidates]
        self.offered.append(names)
        if self.choice is None:
            raise ResolutionError("Selection cancelled")
        return names.index(self.choice)

    def picker(self, label, preview=None) -> Callable:  # noqa: ANN001
        def pick(candidates):  # noqa: ANN001
            return candidates[self.find(candidates, label, preview)]

        return pick


@pytest.fixture
def fake_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


@pytest.fixture
def workdir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    directory = tmp_path / "work"
    directory.mkdir()
    monkeypatch.chdir(directory)
    return directory


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    return FakeRunner


@pytest.fixture
def make_selector() -> type[FakeSelector]:
    return FakeSelector
