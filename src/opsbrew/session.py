"""Per-invocation runtime options shared by every command handler."""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.markup import escape

from .config import Config, load_config
from .process import ProcessRunner
from .recipes import RecipeRunner, RecipeStore
from .resolve import FuzzySelector, Selector

AFFIRMATIVE = frozenset({"y", "yes"})


def is_affirmative(answer: str | None) -> bool:
    return (answer or "").strip().lower() in AFFIRMATIVE


@dataclass
class Session:
    """Options parsed from the global flags plus lazily loaded collaborators.

    Built once by the root callback and reached through ``ctx.obj``. Flags from
    the command line are combined with the ``ui`` section of the configuration.
    """

    config_path: Path | None = None
    verbose: bool = False
    dry_run: bool = False
    skip_confirm: bool = False
    runner: ProcessRunner = field(default_factory=ProcessRunner)
    selector: Selector = field(default_factory=FuzzySelector)

    @cached_property
    def config(self) -> Config:
        config = load_config(self.config_path)
        if config.ui.verbose and not self.verbose:
            logging.getLogger("opsbrew").setLevel(logging.DEBUG)
        return config

    @cached_property
    def console(self) -> Console:
        return Console(no_color=not self.config.ui.colors, highlight=False)

    @property
    def is_dry_run(self) -> bool:
        return self.dry_run or self.config.ui.dry_run

    @property
    def skips_confirmation(self) -> bool:
        return self.skip_confirm or self.config.ui.confirm

    def confirm(self, question: str) -> bool:
        """Ask a yes/no question; anything but ``y``/``yes`` means no."""

        try:
            answer = self.console.input(f"{escape(question)} (y/N): ")
        except EOFError:
            answer = ""
        return is_affirmative(answer)

    def approved(self, question: str) -> bool:
        """Return ``True`` if confirmations are skipped or the user agrees."""

        if self.skips_confirmation or self.confirm(question):
            return True
        self.console.print("[yellow]Operation cancelled[/yellow]")
        return False

    def would_run(self, argv: Sequence[str]) -> None:
        self.console.print(f"[yellow]Would run: {escape(shlex.join(argv))}[/yellow]", soft_wrap=True)

    def execute(self, argv: Sequence[str]) -> bool:
        """Run ``argv`` with inherited streams, or describe it in dry-run mode.

        Returns ``True`` when the command actually ran.
        """

        if self.is_dry_run:
            self.would_run(argv)
            return False
        self.runner.run(argv)
        return True

    def recipes(self) -> RecipeStore:
        return RecipeStore(self.config)

    def recipe_runner(self) -> RecipeRunner:
        return RecipeRunner(self.runner, self.console, confirm=self.confirm)
