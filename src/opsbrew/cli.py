"""Command-line interface for opsbrew."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Iterable

import typer
from click.shell_completion import get_completion_class
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from . import files as file_ops
from . import kubernetes as kube
from .config import DEFAULT_CONFIG_FILENAME, Recipe
from .errors import ConfigLoadError, ExternalProcessError, OpsbrewError, ValidationError
from .git import (
    FETCH_ARGV,
    PULL_ARGV,
    PUSH_ARGV,
    STATUS_ARGV,
    SYNC_ARGV,
    GitClient,
    branch_kind,
    branch_label,
    branch_preview,
    checkout_argv,
)
from .models import Branch, Pod, StatusCategory, StatusReport
from .process import ProcessRunner
from .resolve import FuzzySelector, resolve
from .session import Session
from .templates import ProjectTemplate, available_templates, find_template, render_template

PROG_NAME = "opsbrew"

app = typer.Typer(help="Shortcuts for repetitive git and kubectl workflows", no_args_is_help=True)
git_app = typer.Typer(help="Git operations and shortcuts", no_args_is_help=True)
k8s_app = typer.Typer(help="Kubernetes operations and shortcuts", no_args_is_help=True)
file_app = typer.Typer(help="File operations and shortcuts", no_args_is_help=True)
brew_app = typer.Typer(help="Manage and run command recipes", no_args_is_help=True)

app.add_typer(git_app, name="git")
app.add_typer(k8s_app, name="k8s")
app.add_typer(file_app, name="file")
app.add_typer(brew_app, name="brew")

err_console = Console(stderr=True, highlight=False)


class Shell(str, Enum):
    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    POWERSHELL = "powershell"


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger(PROG_NAME)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        handler = RichHandler(console=err_console, show_time=False, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)


def _create_session(*, config: Path | None, verbose: bool, dry_run: bool, skip_confirm: bool) -> Session:
    return Session(
        config_path=config,
        verbose=verbose,
        dry_run=dry_run,
        skip_confirm=skip_confirm,
        runner=ProcessRunner(),
        selector=FuzzySelector(),
    )


def _dry_run_option():
    return typer.Option(False, "--dry-run", help="Show what would be done without executing")


def _confirm_option():
    return typer.Option(False, "--confirm", help="Skip confirmation prompts")


def _session(ctx: typer.Context, *, dry_run: bool = False, confirm: bool = False) -> Session:
    """Return the invocation's session with flags given after the subcommand folded in."""

    session = ctx.ensure_object(Session)
    if dry_run:
        session.dry_run = True
    if confirm:
        session.skip_confirm = True
    return session


def _handle_error(exc: Exception) -> None:
    if isinstance(exc, ConfigLoadError):
        message = str(exc)
        err_console.print(f"[red]{escape(message)}[/red]", soft_wrap=True)
        if "does not exist" in message:
            err_console.print(
                f"[yellow]Omit --config to use ~/{DEFAULT_CONFIG_FILENAME}, which is created with defaults on first use.[/yellow]"
            )
        raise typer.Exit(code=exc.exit_code)
    if isinstance(exc, PermissionError):
        err_console.print(f"[red]Permission denied:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)
    if isinstance(exc, OpsbrewError):
        err_console.print(f"[red]{escape(str(exc))}[/red]", soft_wrap=True)
        raise typer.Exit(code=exc.exit_code)
    raise exc


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PROG_NAME} {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        help=f"Config file (default is ./{DEFAULT_CONFIG_FILENAME} if present, else ~/{DEFAULT_CONFIG_FILENAME})",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    dry_run: bool = _dry_run_option(),
    confirm: bool = _confirm_option(),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Simplify and shorten repetitive DevOps terminal commands."""

    _configure_logging(verbose)
    ctx.obj = _create_session(config=config, verbose=verbose, dry_run=dry_run, skip_confirm=confirm)


# ----------------------------------------------------------------------
# Formatting helpers

_STATUS_SECTIONS = (
    (StatusCategory.STAGED, "Changes to be committed", "green"),
    (StatusCategory.MODIFIED, "Changes not staged for commit", "yellow"),
    (StatusCategory.DELETED, "Deleted", "red"),
    (StatusCategory.RENAMED, "Renamed", "cyan"),
    (StatusCategory.UNTRACKED, "Untracked files", "red"),
    (StatusCategory.CONFLICTED, "Unmerged paths", "bold red"),
)


def _format_git_status(console: Console, report: StatusReport, branch: str | None) -> None:
    console.print("[green]=== Git Status ===[/green]")
    if branch:
        console.print(f"[cyan]On branch: {escape(branch)}[/cyan]")

    if report.is_clean:
        console.print("[green]Working tree clean[/green]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Section")
    table.add_column("Code")
    table.add_column("Path", overflow="fold")

    for category, title, style in _STATUS_SECTIONS:
        for entry in report.bucket(category):
            table.add_row(
                f"[{style}]{title}[/{style}]",
                escape(entry.code),
                f"[{style}]{escape(entry.path)}[/{style}]",
            )

    console.print(table)


def _format_branches(console: Console, branches: Iterable[Branch]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Branch")
    table.add_column("Type")

    for branch in branches:
        name = f"[cyan]* {escape(branch.name)}[/cyan]" if branch.current else escape(branch.name)
        table.add_row(name, branch_kind(branch))

    console.print(table)


def _format_pods(console: Console, pods: Iterable[Pod]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Pod")
    table.add_column("Ready")
    table.add_column("Status")
    table.add_column("Restarts")
    table.add_column("Age")

    for pod in pods:
        style = kube.pod_status_style(pod.status)
        table.add_row(
            escape(pod.name),
            escape(pod.ready),
            f"[{style}]{escape(pod.status)}[/{style}]",
            escape(pod.restarts),
            escape(pod.age),
        )

    console.print(table)


def _format_recipes(console: Console, recipes: Iterable[tuple[str, Recipe]]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Recipe")
    table.add_column("Description", overflow="fold")
    table.add_column("Commands")
    table.add_column("Tags")

    for name, recipe in recipes:
        table.add_row(
            f"[cyan]{escape(name)}[/cyan]",
            escape(recipe.description),
            str(len(recipe.commands)),
            escape(", ".join(recipe.tags)),
        )

    console.print(table)


def _format_recipe_detail(console: Console, name: str, recipe: Recipe) -> None:
    console.print(f"Current recipe '{escape(name)}':")
    console.print(f"Description: {escape(recipe.description)}")
    console.print(f"Tags: {escape(', '.join(recipe.tags))}")
    console.print("Commands:")
    for index, command in enumerate(recipe.commands, start=1):
        console.print(f"  {index}. {escape(command)}")
    console.print()


def _format_templates(console: Console, templates: Iterable[ProjectTemplate]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Template")
    table.add_column("Description", overflow="fold")
    table.add_column("Files")

    for template in templates:
        table.add_row(f"[cyan]{escape(template.name)}[/cyan]", escape(template.description), str(len(template.files)))

    console.print(table)


def _read_lines(console: Console, prompt: str = "> ") -> list[str]:
    """Read lines until an empty line or end of input."""

    lines: list[str] = []
    while True:
        try:
            line = console.input(prompt)
        except EOFError:
            break
        if not line.strip():
            break
        lines.append(line)
    return lines


def _read_value(console: Console, prompt: str) -> str:
    try:
        return console.input(prompt).strip()
    except EOFError:
        return ""


# ----------------------------------------------------------------------
# git


@git_app.command("status")
def git_status(ctx: typer.Context, dry_run: bool = _dry_run_option()) -> None:
    """Show git status with enhanced formatting."""

    session = _session(ctx, dry_run=dry_run)
    try:
        if session.is_dry_run:
            session.would_run(STATUS_ARGV)
            return
        client = GitClient(session.runner)
        report = client.status()
        _format_git_status(session.console, report, client.current_branch_or_none())
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@git_app.command("sync")
def git_sync(
    ctx: typer.Context,
    dry_run: bool = _dry_run_option(),
    confirm: bool = _confirm_option(),
) -> None:
    """Pull with rebase (git pull --rebase)."""

    session = _session(ctx, dry_run=dry_run, confirm=confirm)
    try:
        if session.is_dry_run:
            session.would_run(SYNC_ARGV)
            return
        if not session.approved("Pull with rebase?"):
            return

        branch = GitClient(session.runner).current_branch()
        session.console.print(f"[green]Syncing branch: {escape(branch)}[/green]")
        session.runner.run(SYNC_ARGV)
        session.console.print("[green]Sync completed successfully[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@git_app.command("checkout")
def git_checkout(
    ctx: typer.Context,
    branch: str | None = typer.Argument(None, help="Branch to check out (fuzzy finder when omitted)"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Checkout a branch, picking it with the fuzzy finder when not given."""

    session = _session(ctx, dry_run=dry_run)
    try:
        client = GitClient(session.runner)
        target = resolve(
            branch,
            {},
            client.branches,
            session.selector.picker(branch_label, branch_preview),
            kind="branches",
        )

        if session.is_dry_run:
            session.would_run(checkout_argv(target, local=True))
            return

        local = client.has_local_branch(target)
        if not local:
            session.console.print(
                f"[yellow]Branch {escape(target)} not found locally, checking out from remote...[/yellow]"
            )
        session.runner.run(checkout_argv(target, local=local))
        session.console.print(f"[green]Switched to branch: {escape(target)}[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@git_app.command("branch")
def git_branch(ctx: typer.Context) -> None:
    """List local and remote branches."""

    session = _session(ctx)
    try:
        _format_branches(session.console, GitClient(session.runner).branches())
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


def _simple_git(ctx: typer.Context, argv: tuple[str, ...], start: str, done: str, *, dry_run: bool) -> None:
    session = _session(ctx, dry_run=dry_run)
    try:
        if session.is_dry_run:
            session.would_run(argv)
            return
        session.console.print(f"[green]{start}[/green]")
        session.runner.run(argv)
        session.console.print(f"[green]{done}[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@git_app.command("fetch")
def git_fetch(ctx: typer.Context, dry_run: bool = _dry_run_option()) -> None:
    """Fetch all remotes."""

    _simple_git(ctx, FETCH_ARGV, "Fetching all remotes...", "Fetch completed successfully", dry_run=dry_run)


@git_app.command("pull")
def git_pull(ctx: typer.Context, dry_run: bool = _dry_run_option()) -> None:
    """Pull the current branch."""

    _simple_git(ctx, PULL_ARGV, "Pulling from current branch...", "Pull completed successfully", dry_run=dry_run)


@git_app.command("push")
def git_push(ctx: typer.Context, dry_run: bool = _dry_run_option()) -> None:
    """Push the current branch."""

    _simple_git(ctx, PUSH_ARGV, "Pushing to current branch...", "Push completed successfully", dry_run=dry_run)


# ----------------------------------------------------------------------
# kubernetes


@k8s_app.command("kctx")
def kctx(
    ctx: typer.Context,
    context: str | None = typer.Argument(None, help="Context name or alias (fuzzy finder when omitted)"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Switch kubectl context."""

    session = _session(ctx, dry_run=dry_run)
    try:
        target = resolve(
            context,
            session.config.kubernetes.context_aliases,
            kube.KubeClient(session.runner).contexts,
            session.selector.picker(kube.context_label, kube.context_preview),
            kind="contexts",
        )
        if session.execute(kube.use_context_argv(target)):
            session.console.print(f"[green]Switched to context: {escape(target)}[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@k8s_app.command("kns")
def kns(
    ctx: typer.Context,
    namespace: str | None = typer.Argument(None, help="Namespace name or alias (fuzzy finder when omitted)"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Switch kubectl namespace."""

    session = _session(ctx, dry_run=dry_run)
    try:
        target = resolve(
            namespace,
            session.config.kubernetes.namespace_aliases,
            kube.KubeClient(session.runner).namespaces,
            session.selector.picker(kube.namespace_label, kube.namespace_preview),
            kind="namespaces",
        )
        if session.execute(kube.set_namespace_argv(target)):
            session.console.print(f"[green]Switched to namespace: {escape(target)}[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


def _resolve_pod(session: Session, pod: str | None) -> str:
    return resolve(
        pod,
        {},
        kube.KubeClient(session.runner).pods,
        session.selector.picker(kube.pod_label, kube.pod_preview),
        kind="pods",
    )


@k8s_app.command("klogs")
def klogs(
    ctx: typer.Context,
    pod: str | None = typer.Argument(None, help="Pod name (fuzzy finder when omitted)"),
    follow: bool = typer.Option(False, "--follow", "-f", help="Follow log output"),
    tail: int = typer.Option(0, "--tail", "-t", help="Number of lines to show from the end of the logs"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Show pod logs."""

    session = _session(ctx, dry_run=dry_run)
    try:
        target = _resolve_pod(session, pod)
        session.execute(kube.logs_argv(target, follow=follow, tail=tail))
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@k8s_app.command("kpods")
def kpods(ctx: typer.Context) -> None:
    """List pods in the current namespace."""

    session = _session(ctx)
    try:
        pods = kube.KubeClient(session.runner).pods()
        if not pods:
            session.console.print("[yellow]No pods found[/yellow]")
            return
        _format_pods(session.console, pods)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@k8s_app.command("ksvc")
def ksvc(ctx: typer.Context, dry_run: bool = _dry_run_option()) -> None:
    """List services."""

    session = _session(ctx, dry_run=dry_run)
    try:
        session.execute(kube.get_argv("services"))
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@k8s_app.command("kingress")
def kingress(ctx: typer.Context, dry_run: bool = _dry_run_option()) -> None:
    """List ingress resources."""

    session = _session(ctx, dry_run=dry_run)
    try:
        session.execute(kube.get_argv("ingress"))
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@k8s_app.command("kexec")
def kexec(
    ctx: typer.Context,
    pod: str | None = typer.Argument(None, help="Pod name (fuzzy finder when omitted)"),
    command: str = typer.Argument("/bin/bash", help="Command to execute in the pod"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Execute a command in a pod."""

    session = _session(ctx, dry_run=dry_run)
    try:
        target = _resolve_pod(session, pod)
        session.execute(kube.exec_argv(target, command))
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


_HPA_DONE = {
    "set-min": "Set min replicas to {value} for HPA {name}",
    "set-max": "Set max replicas to {value} for HPA {name}",
    "set-target": "Set target CPU to {value}% for HPA {name}",
}


@k8s_app.command("khpa")
def khpa(
    ctx: typer.Context,
    action: str = typer.Argument(..., help="One of: list, get, set-min, set-max, set-target"),
    name: str | None = typer.Argument(None, help="HPA name"),
    value: str | None = typer.Argument(None, help="New value for set-* actions"),
    namespace: str | None = typer.Option(
        None, "--namespace", "-n", help="Namespace (defaults to current namespace)"
    ),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Manage Horizontal Pod Autoscalers."""

    session = _session(ctx, dry_run=dry_run)
    try:
        argv = kube.hpa_argv(action, name, value, namespace=namespace)
        if session.execute(argv) and action in _HPA_DONE:
            message = _HPA_DONE[action].format(value=value, name=name)
            session.console.print(f"[green]{escape(message)}[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@k8s_app.command("kscale")
def kscale(
    ctx: typer.Context,
    resource_type: str = typer.Argument(..., metavar="TYPE", help="deployment, replicaset or statefulset"),
    name: str = typer.Argument(..., help="Resource name"),
    replicas: str = typer.Argument(..., help="Desired replica count"),
    namespace: str | None = typer.Option(
        None, "--namespace", "-n", help="Namespace (defaults to current namespace)"
    ),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Scale a deployment, replicaset or statefulset."""

    session = _session(ctx, dry_run=dry_run)
    try:
        argv = kube.scale_argv(resource_type, name, replicas, namespace=namespace)
        if session.execute(argv):
            session.console.print(
                f"[green]Scaled {escape(resource_type)} {escape(name)} to {escape(replicas)} replicas[/green]"
            )
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


# ----------------------------------------------------------------------
# files


@file_app.command("open")
def file_open(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to open"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Open a file with the default application."""

    session = _session(ctx, dry_run=dry_run)
    try:
        argv = file_ops.open_argv(path)
        if session.is_dry_run:
            session.would_run(argv)
            return
        file_ops.require_file(path)
        session.runner.run(argv)
        session.console.print(f"[green]Opened file: {escape(path)}[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@file_app.command("find")
def file_find(
    ctx: typer.Context,
    pattern: str = typer.Argument(..., help="File name pattern"),
    directory: str = typer.Argument(".", help="Directory to search"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Find files by name pattern."""

    session = _session(ctx, dry_run=dry_run)
    try:
        argv = file_ops.find_argv(pattern, directory)
        if session.is_dry_run:
            session.would_run(argv)
            return
        found = file_ops.parse_found(session.runner.output(argv))
        if not found:
            session.console.print(f"[yellow]No files found matching pattern: {escape(pattern)}[/yellow]")
            return
        session.console.print(f"[green]Found {len(found)} files:[/green]")
        for path in found:
            session.console.print(f"  {escape(path)}")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@file_app.command("grep")
def file_grep(
    ctx: typer.Context,
    pattern: str = typer.Argument(..., help="Text or regular expression to search for"),
    path: str = typer.Argument(..., help="File to search"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Search for text in a file."""

    session = _session(ctx, dry_run=dry_run)
    try:
        argv = file_ops.grep_argv(pattern, path)
        if session.is_dry_run:
            session.would_run(argv)
            return
        file_ops.require_file(path)
        returncode = session.runner.call(argv)
        if returncode == file_ops.NO_MATCH:
            session.console.print(f"[yellow]No matches found for pattern: {escape(pattern)}[/yellow]")
        elif returncode != 0:
            raise ExternalProcessError(argv, returncode=returncode)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@file_app.command("backup")
def file_backup(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to back up"),
    backup: str | None = typer.Argument(None, help="Backup destination (default: <file>.backup)"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Create a backup copy of a file."""

    session = _session(ctx, dry_run=dry_run)
    try:
        argv = file_ops.backup_argv(path, backup)
        if session.is_dry_run:
            session.would_run(argv)
            return
        file_ops.require_file(path)
        session.runner.run(argv)
        session.console.print(f"[green]Created backup: {escape(file_ops.backup_path(path, backup))}[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@file_app.command("diff")
def file_diff(
    ctx: typer.Context,
    first: str = typer.Argument(..., help="First file"),
    second: str = typer.Argument(..., help="Second file"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Show differences between two files."""

    session = _session(ctx, dry_run=dry_run)
    try:
        argv = file_ops.diff_argv(first, second)
        if session.is_dry_run:
            session.would_run(argv)
            return
        file_ops.require_file(first)
        file_ops.require_file(second)
        returncode = session.runner.call(argv)
        if returncode == 0:
            session.console.print("[green]Files are identical[/green]")
        elif returncode != file_ops.FILES_DIFFER:
            raise ExternalProcessError(argv, returncode=returncode)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


# ----------------------------------------------------------------------
# recipes


@brew_app.command("save")
def brew_save(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Recipe name"),
    description: str = typer.Option("", "--description", "-d", help="Recipe description"),
    tags: list[str] = typer.Option(None, "--tags", "-t", help="Recipe tags (repeat or comma-separate)"),
    commands: list[str] = typer.Option(
        None, "--command", "-c", help="Command to add (repeatable); prompts when omitted"
    ),
) -> None:
    """Save a new recipe."""

    session = _session(ctx)
    try:
        store = session.recipes()
        if not commands:
            session.console.print(
                f"Enter commands for recipe '{escape(name)}' (one per line, empty line to finish):"
            )
            commands = _read_lines(session.console)
        store.save(name, description, commands, tags or ())
        session.console.print(f"[green]Recipe '{escape(name)}' saved successfully[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@brew_app.command("list")
def brew_list(ctx: typer.Context) -> None:
    """List all saved recipes."""

    session = _session(ctx)
    try:
        store = session.recipes()
        if not len(store):
            session.console.print("[yellow]No recipes found[/yellow]")
            return
        _format_recipes(session.console, sorted(store.list()))
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@brew_app.command("run")
def brew_run(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Recipe name"),
    dry_run: bool = _dry_run_option(),
    confirm: bool = _confirm_option(),
) -> None:
    """Run a saved recipe."""

    session = _session(ctx, dry_run=dry_run, confirm=confirm)
    try:
        result = session.recipes().run(
            name,
            session.recipe_runner(),
            dry_run=session.is_dry_run,
            skip_confirm=session.skips_confirmation,
        )
        if result.error is not None:
            raise result.error
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@brew_app.command("delete")
def brew_delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Recipe name"),
    dry_run: bool = _dry_run_option(),
    confirm: bool = _confirm_option(),
) -> None:
    """Delete a saved recipe."""

    session = _session(ctx, dry_run=dry_run, confirm=confirm)
    try:
        store = session.recipes()
        store.get(name)
        if session.is_dry_run:
            session.console.print(f"[yellow]Would delete recipe: {escape(name)}[/yellow]")
            return
        if not session.approved(f"Delete recipe '{name}'?"):
            return
        store.delete(name)
        session.console.print(f"[green]Recipe '{escape(name)}' deleted successfully[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@brew_app.command("edit")
def brew_edit(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Recipe name"),
    description: str | None = typer.Option(None, "--description", "-d", help="New description"),
    tags: list[str] = typer.Option(None, "--tags", "-t", help="New tags (repeat or comma-separate)"),
    commands: list[str] = typer.Option(None, "--command", "-c", help="Replacement command (repeatable)"),
) -> None:
    """Edit a saved recipe; prompts for each field when no option is given."""

    session = _session(ctx)
    try:
        store = session.recipes()
        recipe = store.get(name)

        if description is None and not tags and not commands:
            console = session.console
            _format_recipe_detail(console, name, recipe)
            description = _read_value(console, "New description (press Enter to keep current): ")
            raw_tags = _read_value(console, "New tags (comma-separated, press Enter to keep current): ")
            tags = [raw_tags] if raw_tags else []
            console.print("Enter new commands (one per line, empty line to finish):")
            commands = _read_lines(console)

        store.edit(name, description=description, tags=tags, commands=commands)
        session.console.print(f"[green]Recipe '{escape(name)}' updated successfully[/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


# ----------------------------------------------------------------------
# scaffolding and completion


@app.command("init")
def init(
    ctx: typer.Context,
    template: str = typer.Argument(..., help="Template name, or 'list' to show available templates"),
    project_name: str | None = typer.Argument(None, help="Project name used inside the template"),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output directory (default: project name, else current directory)"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Force overwrite existing files"),
    dry_run: bool = _dry_run_option(),
) -> None:
    """Initialize a new project from a template."""

    session = _session(ctx, dry_run=dry_run)
    try:
        template_dir = session.config.templates.path or None
        if template == "list":
            _format_templates(session.console, available_templates(template_dir))
            return

        selected = find_template(template, template_dir)
        if session.is_dry_run:
            session.console.print(f"[yellow]Would initialize template: {escape(selected.name)}[/yellow]")
            if project_name:
                session.console.print(f"[yellow]Project name: {escape(project_name)}[/yellow]")
            if output:
                session.console.print(f"[yellow]Output directory: {escape(output)}[/yellow]")
            return

        written = render_template(selected, project_name=project_name, output=output, force=force)
        for path in written:
            session.console.print(f"  created {escape(str(path))}")
        session.console.print("[green]Project initialized successfully![/green]")
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@app.command("completion")
def completion(shell: Shell = typer.Argument(..., help="Shell to generate the completion script for")) -> None:
    """Print a shell completion script.

    Bash: source <(opsbrew completion bash)
    Zsh: opsbrew completion zsh > "${fpath[1]}/_opsbrew"
    Fish: opsbrew completion fish | source
    PowerShell: opsbrew completion powershell | Out-String | Invoke-Expression
    """

    command = typer.main.get_command(app)
    completion_class = get_completion_class(shell.value)
    if completion_class is None:
        _handle_error(ValidationError(f"Unsupported shell: {shell.value}"))
    complete_var = f"_{PROG_NAME.upper()}_COMPLETE"
    typer.echo(completion_class(command, {}, PROG_NAME, complete_var).source())


def run() -> None:
    """Entry point used for console_script bindings."""

    app(prog_name=PROG_NAME)
