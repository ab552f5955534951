"""Git helpers: porcelain status parsing and branch listing."""

from __future__ import annotations

import logging
from typing import Iterable

from .errors import ExternalProcessError
from .models import Branch, FileStatus, StatusCategory, StatusReport
from .process import ProcessRunner

logger = logging.getLogger(__name__)

GIT = "git"

STATUS_ARGV = (GIT, "status", "--porcelain")
SYNC_ARGV = (GIT, "pull", "--rebase")
FETCH_ARGV = (GIT, "fetch", "--all")
PULL_ARGV = (GIT, "pull")
PUSH_ARGV = (GIT, "push")

_CONFLICT_CODES = frozenset({"UU", "AA", "DD"})


def categorize(code: str) -> StatusCategory | None:
    """Map a two-character porcelain code to its bucket, or ``None``."""

    if code in _CONFLICT_CODES:
        return StatusCategory.CONFLICTED
    if code.startswith("M"):
        return StatusCategory.MODIFIED if code[1:2] == "M" else StatusCategory.STAGED
    if code.startswith("A"):
        return StatusCategory.STAGED
    if code.startswith("D"):
        return StatusCategory.DELETED
    if code.startswith("R"):
        return StatusCategory.RENAMED
    if code == "??":
        return StatusCategory.UNTRACKED
    return None


def classify_status(output: str) -> StatusReport:
    """Parse ``git status --porcelain`` output into a :class:`StatusReport`."""

    buckets: dict[StatusCategory, list[FileStatus]] = {category: [] for category in StatusCategory}

    for line in output.splitlines():
        if not line.strip() or len(line) < 3:
            continue

        code = line[:2]
        category = categorize(code)
        if category is None:
            logger.debug("Ignoring status line with unrecognized code %r: %s", code, line)
            continue

        buckets[category].append(FileStatus(path=line[3:], code=code, category=category))

    return StatusReport(**{category.value: tuple(entries) for category, entries in buckets.items()})


def branch_label(branch: Branch) -> str:
    if branch.current:
        return f"  * {branch.name}"
    if branch.remote:
        return f"    {branch.name} (remote)"
    return f"    {branch.name}"


def branch_kind(branch: Branch) -> str:
    if branch.current:
        return "Current"
    if branch.remote:
        return "Remote"
    return "Local"


def branch_preview(branch: Branch) -> str:
    return f"Branch: {branch.name}\nType: {branch_kind(branch)}"


def checkout_argv(branch: str, *, local: bool) -> tuple[str, ...]:
    if local:
        return (GIT, "checkout", branch)
    return (GIT, "checkout", "-b", branch, f"origin/{branch}")


def parse_branches(local: str, remote: str, current: str) -> list[Branch]:
    branches = [Branch(name=name, current=name == current) for name in _names(local.splitlines())]
    branches.extend(
        Branch(name=name, remote=True) for name in _names(remote.splitlines()) if "HEAD" not in name
    )
    return branches


def _names(lines: Iterable[str]) -> list[str]:
    return [line.strip() for line in lines if line.strip()]


class GitClient:
    """Queries a git working tree through the ``git`` binary."""

    def __init__(self, runner: ProcessRunner) -> None:
        self.runner = runner

    def status(self) -> StatusReport:
        return classify_status(self.runner.output(STATUS_ARGV))

    def current_branch(self) -> str:
        return self.runner.output((GIT, "branch", "--show-current")).strip()

    def current_branch_or_none(self) -> str | None:
        try:
            return self.current_branch() or None
        except ExternalProcessError:
            return None

    def branches(self) -> list[Branch]:
        local = self.runner.output((GIT, "branch", "--format=%(refname:short)"))
        current = self.current_branch()
        remote = self.runner.output((GIT, "branch", "-r", "--format=%(refname:short)"))
        return parse_branches(local, remote, current)

    def has_local_branch(self, branch: str) -> bool:
        argv = (GIT, "show-ref", "--verify", "--quiet", f"refs/heads/{branch}")
        return self.runner.call(argv, quiet=True) == 0
