"""Shared models and enums for opsbrew."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .recipes import RecipeStepError


class StatusCategory(str, Enum):
    """Buckets reported by ``opsbrew git status``."""

    MODIFIED = "modified"
    STAGED = "staged"
    UNTRACKED = "untracked"
    DELETED = "deleted"
    RENAMED = "renamed"
    CONFLICTED = "conflicted"


@dataclass(frozen=True, slots=True)
class FileStatus:
    """One changed path from a porcelain status query."""

    path: str
    code: str
    category: StatusCategory


@dataclass(frozen=True, slots=True)
class StatusReport:
    """Changed paths partitioned by category, in input order."""

    modified: tuple[FileStatus, ...] = ()
    staged: tuple[FileStatus, ...] = ()
    untracked: tuple[FileStatus, ...] = ()
    deleted: tuple[FileStatus, ...] = ()
    renamed: tuple[FileStatus, ...] = ()
    conflicted: tuple[FileStatus, ...] = ()

    @property
    def total(self) -> int:
        return (
            len(self.modified)
            + len(self.staged)
            + len(self.untracked)
            + len(self.deleted)
            + len(self.renamed)
            + len(self.conflicted)
        )

    @property
    def is_clean(self) -> bool:
        return self.total == 0

    def bucket(self, category: StatusCategory) -> tuple[FileStatus, ...]:
        return getattr(self, category.value)


class Candidate(Protocol):
    """Anything that can be offered for interactive selection."""

    @property
    def name(self) -> str: ...


@dataclass(frozen=True, slots=True)
class Branch:
    name: str
    current: bool = False
    remote: bool = False


@dataclass(frozen=True, slots=True)
class Context:
    name: str
    current: bool = False


@dataclass(frozen=True, slots=True)
class Namespace:
    name: str
    current: bool = False
    status: str = ""


@dataclass(frozen=True, slots=True)
class Pod:
    name: str
    ready: str = ""
    status: str = ""
    restarts: str = ""
    age: str = ""


class RunState(str, Enum):
    """States a recipe run moves through."""

    PENDING = "pending"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    EXECUTING = "executing"
    REPORTED = "reported"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class RunResult:
    """Terminal outcome of a recipe run."""

    name: str
    state: RunState
    commands: tuple[str, ...] = ()
    error: RecipeStepError | None = None

    @property
    def ok(self) -> bool:
        return self.state is not RunState.FAILED
