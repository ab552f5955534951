"""Turning an argument, an alias or an interactive pick into a target name."""

from __future__ import annotations

from typing import Callable, Mapping, Protocol, Sequence, TypeVar

from prompt_toolkit import prompt
from prompt_toolkit.completion import FuzzyCompleter, WordCompleter

from .errors import OpsbrewError, ResolutionError
from .models import Candidate

C = TypeVar("C", bound=Candidate)

Lister = Callable[[], Sequence[C]]
Picker = Callable[[Sequence[C]], C]


class Selector(Protocol):
    def find(
        self,
        candidates: Sequence[C],
        label: Callable[[C], str],
        preview: Callable[[C], str] | None = None,
    ) -> int: ...

    def picker(self, label: Callable[[C], str], preview: Callable[[C], str] | None = None) -> Picker: ...


def resolve(
    explicit: str | None,
    aliases: Mapping[str, str],
    lister: Lister,
    picker: Picker,
    *,
    kind: str = "candidates",
) -> str:
    """Return the target named by ``explicit`` or picked from ``lister``.

    An explicit argument is translated through ``aliases`` and otherwise used
    verbatim; the lister and picker are only consulted when it is absent.
    """

    if explicit:
        return aliases.get(explicit, explicit)

    try:
        candidates = list(lister())
    except ResolutionError:
        raise
    except OpsbrewError as exc:
        raise ResolutionError(f"Failed to list {kind}: {exc}") from exc

    if not candidates:
        raise ResolutionError(f"No {kind} available to select from")

    try:
        selected = picker(candidates)
    except ResolutionError:
        raise
    except OpsbrewError as exc:
        raise ResolutionError(f"Failed to select from {kind}: {exc}") from exc

    return selected.name


class FuzzySelector:
    """Interactive fuzzy selection backed by prompt_toolkit completion."""

    def __init__(self, message: str = "Select (fuzzy, Tab to complete): ") -> None:
        self.message = message

    def find(
        self,
        candidates: Sequence[C],
        label: Callable[[C], str],
        preview: Callable[[C], str] | None = None,
    ) -> int:
        if not candidates:
            raise ResolutionError("Nothing to select from")

        index: dict[str, int] = {}
        for position, candidate in enumerate(candidates):
            index.setdefault(candidate.name, position)
        names = list(index)
        display = {candidate.name: label(candidate).strip() for candidate in candidates}
        meta = {}
        if preview is not None:
            meta = {candidate.name: " | ".join(preview(candidate).splitlines()) for candidate in candidates}

        completer = FuzzyCompleter(
            WordCompleter(names, display_dict=display, meta_dict=meta, WORD=True),
            WORD=True,
        )

        try:
            choice = prompt(self.message, completer=completer, complete_while_typing=True).strip()
        except (EOFError, KeyboardInterrupt):
            raise ResolutionError("Selection cancelled") from None

        if not choice:
            raise ResolutionError("Selection cancelled")
        if choice in index:
            return index[choice]

        matches = [name for name in names if choice in name]
        if len(matches) == 1:
            return index[matches[0]]
        raise ResolutionError(f"No single candidate matches '{choice}'")

    def picker(self, label: Callable[[C], str], preview: Callable[[C], str] | None = None) -> Picker:
        def pick(candidates: Sequence[C]) -> C:
            return candidates[self.find(candidates, label, preview)]

        return pick
