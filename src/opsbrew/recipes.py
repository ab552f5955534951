"""Recipe storage and sequential execution."""

from __future__ import annotations

import logging
import shlex
from typing import Callable, Dict, Iterable, Iterator

from rich.console import Console
from rich.markup import escape

from .config import Config, Recipe, save_config
from .errors import ExternalProcessError, NotFoundError, OpsbrewError, ValidationError
from .models import RunResult, RunState
from .process import ProcessRunner

logger = logging.getLogger(__name__)


class RecipeStepError(OpsbrewError):
    """Raised when one command of a recipe fails; later commands were not run."""

    def __init__(self, recipe: str, index: int, command: str, cause: OpsbrewError) -> None:
        self.recipe = recipe
        self.index = index
        self.command = command
        self.cause = cause
        super().__init__(f"Recipe '{recipe}' failed at command {index}: {command} ({cause})")

    @property
    def exit_code(self) -> int:
        return self.cause.exit_code


def tokenize(command: str) -> list[str]:
    """Split a recipe command into argv using POSIX shell quoting rules.

    No shell is involved: pipes, redirection, globbing and ``$(...)`` are passed
    through literally.
    """

    try:
        return shlex.split(command)
    except ValueError as exc:
        raise ValidationError(f"Cannot parse command '{command}': {exc}") from exc


def clean_commands(commands: Iterable[str]) -> list[str]:
    return [command.strip() for command in commands if command and command.strip()]


def clean_tags(tags: Iterable[str]) -> list[str]:
    cleaned: list[str] = []
    for raw in tags:
        for tag in raw.split(","):
            if tag.strip():
                cleaned.append(tag.strip())
    return cleaned


class RecipeRunner:
    """Executes a recipe's commands in order, stopping at the first failure."""

    def __init__(
        self,
        runner: ProcessRunner,
        console: Console,
        confirm: Callable[[str], bool],
    ) -> None:
        self.runner = runner
        self.console = console
        self.confirm = confirm

    def run(self, name: str, recipe: Recipe, *, dry_run: bool, skip_confirm: bool) -> RunResult:
        commands = tuple(recipe.commands)
        if not clean_commands(commands):
            raise ValidationError(f"Recipe '{name}' has no commands")

        if dry_run:
            self.console.print(f"[yellow]Would run recipe '{escape(name)}':[/yellow]")
            for index, command in enumerate(commands, start=1):
                self.console.print(f"[yellow]  {index}. {escape(command)}[/yellow]")
            return RunResult(name=name, state=RunState.REPORTED, commands=commands)

        if not skip_confirm:
            logger.debug("Recipe '%s' is %s", name, RunState.AWAITING_CONFIRMATION.value)
            if not self.confirm(f"Run recipe '{name}'?"):
                self.console.print("[yellow]Operation cancelled[/yellow]")
                return RunResult(name=name, state=RunState.CANCELLED)

        self.console.print(f"[green]Running recipe: {escape(name)}[/green]")
        if recipe.description:
            self.console.print(f"Description: {escape(recipe.description)}")

        executed: list[str] = []
        for index, command in enumerate(commands, start=1):
            self.console.print(f"[cyan]Executing command {index}/{len(commands)}: {escape(command)}[/cyan]")
            try:
                argv = tokenize(command)
                if not argv:
                    continue
                self.runner.run(argv)
            except (ExternalProcessError, ValidationError) as exc:
                self.console.print(f"[red]Command failed: {escape(command)}[/red]")
                error = RecipeStepError(name, index, command, exc)
                return RunResult(name=name, state=RunState.FAILED, commands=tuple(executed), error=error)
            executed.append(command)

        self.console.print(f"[green]Recipe '{escape(name)}' completed successfully[/green]")
        return RunResult(name=name, state=RunState.COMPLETED, commands=tuple(executed))


class RecipeStore:
    """Named recipes kept in, and persisted with, the configuration."""

    def __init__(self, config: Config, *, persist: Callable[[Config], object] = save_config) -> None:
        self.config = config
        self._persist_config = persist
        self._recipes: Dict[str, Recipe] = dict(config.brew.recipes)

    def __contains__(self, name: object) -> bool:
        return name in self._recipes

    def __len__(self) -> int:
        return len(self._recipes)

    def get(self, name: str) -> Recipe:
        try:
            return self._recipes[name]
        except KeyError:
            raise NotFoundError(f"Recipe '{name}' not found") from None

    def list(self) -> Iterator[tuple[str, Recipe]]:
        return iter(list(self._recipes.items()))

    def save(
        self,
        name: str,
        description: str,
        commands: Iterable[str],
        tags: Iterable[str] = (),
    ) -> Recipe:
        if not name or not name.strip():
            raise ValidationError("Recipe name is required")
        cleaned = clean_commands(commands)
        if not cleaned:
            raise ValidationError("No commands provided")

        recipe = Recipe(description=description or "", commands=tuple(cleaned), tags=tuple(clean_tags(tags)))
        self._recipes[name] = recipe
        self._persist()
        return recipe

    def edit(
        self,
        name: str,
        *,
        description: str | None = None,
        tags: Iterable[str] | None = None,
        commands: Iterable[str] | None = None,
    ) -> Recipe:
        current = self.get(name)
        updates: dict[str, object] = {}

        if description:
            updates["description"] = description
        new_tags = clean_tags(tags or ())
        if new_tags:
            updates["tags"] = tuple(new_tags)
        new_commands = clean_commands(commands or ())
        if new_commands:
            updates["commands"] = tuple(new_commands)

        recipe = current.model_copy(update=updates)
        self._recipes[name] = recipe
        self._persist()
        return recipe

    def delete(self, name: str) -> None:
        self.get(name)
        del self._recipes[name]
        self._persist()

    def run(self, name: str, runner: RecipeRunner, *, dry_run: bool, skip_confirm: bool) -> RunResult:
        return runner.run(name, self.get(name), dry_run=dry_run, skip_confirm=skip_confirm)

    def _persist(self) -> None:
        self.config = self.config.with_recipes(self._recipes)
        self._persist_config(self.config)
