from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from opsbrew import __version__
from opsbrew import kubernetes as kube
from opsbrew.cli import app
from opsbrew.config import DEFAULT_CONFIG_FILENAME
from opsbrew.git import STATUS_ARGV
from opsbrew.session import Session

runner = CliRunner()


def _write_config(directory: Path, body: str) -> Path:
    config_path = directory / DEFAULT_CONFIG_FILENAME
    config_path.write_text(body)
    return config_path


@pytest.fixture
def install_session(monkeypatch: pytest.MonkeyPatch, make_runner, make_selector):  # noqa: ANN001
    def install(fake=None, selector=None):  # noqa: ANN001
        fake = fake or make_runner()
        selector = selector or make_selector()

        def create(*, config, verbose, dry_run, skip_confirm):  # noqa: ANN001
            return Session(
                config_path=config,
                verbose=verbose,
                dry_run=dry_run,
                skip_confirm=skip_confirm,
                runner=fake,
                selector=selector,
            )

        monkeypatch.setattr("opsbrew.cli._create_session", create)
        return fake

    return install


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_git_status_shows_buckets(fake_home: Path, workdir: Path, install_session, make_runner) -> None:  # noqa: ANN001
    fake = install_session(
        make_runner(
            outputs={
                STATUS_ARGV: "M  a.txt\nMM b.txt\n?? c.txt\nUU d.txt\n",
                ("git", "branch", "--show-current"): "main\n",
            }
        )
    )

    result = runner.invoke(app, ["git", "status"])

    assert result.exit_code == 0
    assert "On branch: main" in result.output
    for path in ("a.txt", "b.txt", "c.txt", "d.txt"):
        assert path in result.output
    assert fake.calls[0] == STATUS_ARGV


def test_git_status_clean_tree(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    install_session()

    result = runner.invoke(app, ["git", "status"])

    assert result.exit_code == 0
    assert "Working tree clean" in result.output


def test_dry_run_sync_runs_nothing(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    fake = install_session()

    result = runner.invoke(app, ["--dry-run", "git", "sync"])

    assert result.exit_code == 0
    assert "Would run: git pull --rebase" in result.output
    assert fake.calls == []


def test_sync_declined_is_cancelled(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    fake = install_session()

    result = runner.invoke(app, ["git", "sync"], input="n\n")

    assert result.exit_code == 0
    assert "Operation cancelled" in result.output
    assert fake.calls == []


def test_kctx_translates_alias(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    fake = install_session()

    result = runner.invoke(app, ["k8s", "kctx", "prod"])

    assert result.exit_code == 0
    assert fake.calls == [("kubectl", "config", "use-context", "production-cluster")]
    assert "Switched to context: production-cluster" in result.output


def test_kns_dry_run_with_alias(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    fake = install_session()

    result = runner.invoke(app, ["--dry-run", "k8s", "kns", "mon"])

    assert result.exit_code == 0
    assert "Would run: kubectl config set-context --current --namespace=monitoring" in result.output
    assert fake.calls == []


def test_kctx_cancelled_selection_exits_non_zero(
    fake_home: Path, workdir: Path, install_session, make_runner, make_selector  # noqa: ANN001
) -> None:
    fake = make_runner(
        outputs={
            ("kubectl", "config", "get-contexts", "--no-headers", "-o", "name"): "dev\nprod\n",
            ("kubectl", "config", "current-context"): "dev\n",
        }
    )
    install_session(fake, make_selector(None))

    result = runner.invoke(app, ["k8s", "kctx"])

    assert result.exit_code == 1
    assert "Selection cancelled" in result.output
    assert all(call[:3] != ("kubectl", "config", "use-context") for call in fake.calls)


def test_kpods_reports_lister_failure(fake_home: Path, workdir: Path, install_session, make_runner) -> None:  # noqa: ANN001
    pods_argv = ("kubectl", "get", "pods", "--no-headers", "-o", kube._POD_COLUMNS)
    install_session(make_runner(returncodes={pods_argv: 1}))

    result = runner.invoke(app, ["k8s", "kpods"])

    assert result.exit_code == 1
    assert "exited with status 1: boom" in result.output


def test_khpa_rejects_unknown_action(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    fake = install_session()

    result = runner.invoke(app, ["k8s", "khpa", "explode", "web"])

    assert result.exit_code == 1
    assert "Unknown action: explode" in result.output
    assert fake.calls == []


def test_kscale_runs_kubectl(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    fake = install_session()

    result = runner.invoke(app, ["k8s", "kscale", "deployment", "web", "3", "-n", "app"])

    assert result.exit_code == 0
    assert fake.calls == [("kubectl", "scale", "deployment", "web", "--replicas=3", "-n", "app")]


def test_brew_save_list_run_delete(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    fake = install_session()
    config_path = _write_config(workdir, "brew:\n  recipes: {}\n")

    save = runner.invoke(
        app,
        ["brew", "save", "hello", "-d", "Greets", "-t", "demo", "-c", "echo hello", "-c", "echo world"],
    )
    assert save.exit_code == 0
    assert "Recipe 'hello' saved successfully" in save.output

    data = yaml.safe_load(config_path.read_text())
    assert data["brew"]["recipes"]["hello"]["commands"] == ["echo hello", "echo world"]
    assert data["brew"]["recipes"]["hello"]["tags"] == ["demo"]

    listing = runner.invoke(app, ["brew", "list"])
    assert listing.exit_code == 0
    assert "hello" in listing.output

    run = runner.invoke(app, ["--confirm", "brew", "run", "hello"])
    assert run.exit_code == 0
    assert fake.calls == [("echo", "hello"), ("echo", "world")]
    assert "Recipe 'hello' completed successfully" in run.output

    delete = runner.invoke(app, ["brew", "delete", "hello"], input="y\n")
    assert delete.exit_code == 0
    assert "hello" not in (yaml.safe_load(config_path.read_text())["brew"]["recipes"] or {})


def test_brew_save_reads_commands_interactively(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    install_session()
    config_path = _write_config(workdir, "{}\n")

    result = runner.invoke(app, ["brew", "save", "deploy"], input="make build\nmake push\n\n")

    assert result.exit_code == 0
    recipe = yaml.safe_load(config_path.read_text())["brew"]["recipes"]["deploy"]
    assert recipe["commands"] == ["make build", "make push"]


def test_brew_save_without_commands_fails(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    install_session()
    config_path = _write_config(workdir, "{}\n")

    result = runner.invoke(app, ["brew", "save", "empty"], input="\n")

    assert result.exit_code == 1
    assert "No commands provided" in result.output
    assert "empty" not in config_path.read_text()


def test_brew_run_failure_propagates_exit_status(
    fake_home: Path, workdir: Path, install_session, make_runner  # noqa: ANN001
) -> None:
    fake = install_session(make_runner(returncodes={("false",): 3}))
    _write_config(
        workdir,
        "brew:\n  recipes:\n    chain:\n      commands: ['echo a', 'false', 'echo b']\n",
    )

    result = runner.invoke(app, ["--confirm", "brew", "run", "chain"])

    assert result.exit_code == 3
    assert "Recipe 'chain' failed at command 2: false" in result.output
    assert fake.calls == [("echo", "a"), ("false",)]


def test_brew_run_dry_run(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    fake = install_session()

    result = runner.invoke(app, ["--dry-run", "brew", "run", "deploy-check"])

    assert result.exit_code == 0
    assert "Would run recipe 'deploy-check':" in result.output
    assert "1. kubectl get pods" in result.output
    assert fake.calls == []


def test_brew_delete_missing_recipe(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    install_session()

    result = runner.invoke(app, ["brew", "delete", "missing"])

    assert result.exit_code == 1
    assert "Recipe 'missing' not found" in result.output


def test_brew_edit_with_options(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    install_session()
    config_path = _write_config(
        workdir,
        "brew:\n  recipes:\n    deploy:\n      description: Old\n      commands: [a]\n",
    )

    result = runner.invoke(app, ["brew", "edit", "deploy", "-d", "New", "-c", "b", "-c", "c"])

    assert result.exit_code == 0
    recipe = yaml.safe_load(config_path.read_text())["brew"]["recipes"]["deploy"]
    assert recipe["description"] == "New"
    assert recipe["commands"] == ["b", "c"]


def test_missing_explicit_config(tmp_path: Path, fake_home: Path, workdir: Path) -> None:
    result = runner.invoke(app, ["--config", str(tmp_path / "absent.yaml"), "brew", "list"])

    assert result.exit_code == 1
    assert "does not exist" in result.output
    assert not (fake_home / DEFAULT_CONFIG_FILENAME).exists()


def test_file_grep_without_match(tmp_path: Path, fake_home: Path, workdir: Path, install_session, make_runner) -> None:  # noqa: ANN001
    target = workdir / "app.log"
    target.write_text("all good\n")
    fake = install_session(make_runner(returncodes={("grep", "-n", "ERROR", "app.log"): 1}))

    result = runner.invoke(app, ["file", "grep", "ERROR", "app.log"])

    assert result.exit_code == 0
    assert "No matches found for pattern: ERROR" in result.output
    assert fake.calls == [("grep", "-n", "ERROR", "app.log")]


def test_file_backup_missing_source(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    fake = install_session()

    result = runner.invoke(app, ["file", "backup", "ghost.conf"])

    assert result.exit_code == 1
    assert "File ghost.conf does not exist" in result.output
    assert fake.calls == []


def test_init_list_and_render(fake_home: Path, workdir: Path) -> None:
    listing = runner.invoke(app, ["init", "list"])
    assert listing.exit_code == 0
    assert "k8s-service" in listing.output

    result = runner.invoke(app, ["init", "k8s-service", "billing", "-o", "deploy"])
    assert result.exit_code == 0
    assert "Project initialized successfully!" in result.output
    assert "name: billing-service" in (workdir / "deploy" / "service.yaml").read_text()

    again = runner.invoke(app, ["init", "k8s-service", "billing", "-o", "deploy"])
    assert again.exit_code == 1
    assert "already exists" in again.output


def test_completion_script() -> None:
    result = runner.invoke(app, ["completion", "bash"])

    assert result.exit_code == 0
    assert "_OPSBREW_COMPLETE" in result.output


def test_cli_handles_permission_error(monkeypatch: pytest.MonkeyPatch, fake_home: Path, workdir: Path) -> None:
    def denied(*_args, **_kwargs):  # noqa: ANN002, ANN003
        raise PermissionError("mocked")

    monkeypatch.setattr("opsbrew.cli.render_template", denied)

    result = runner.invoke(app, ["init", "dockerfile", "demo"])

    assert result.exit_code == 1
    assert "Permission denied" in result.output


@pytest.mark.parametrize("body", ["commands: []", "description: nothing here"])
def test_brew_run_rejects_recipe_without_commands(
    fake_home: Path, workdir: Path, install_session, body: str  # noqa: ANN001
) -> None:
    fake = install_session()
    _write_config(workdir, f"brew:\n  recipes:\n    empty:\n      {body}\n")

    result = runner.invoke(app, ["--confirm", "brew", "run", "empty"])

    assert result.exit_code == 1
    assert "Recipe 'empty' has no commands" in result.output
    assert "completed successfully" not in result.output
    assert fake.calls == []


def test_flags_after_subcommand(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    fake = install_session()

    dry = runner.invoke(app, ["brew", "run", "deploy-check", "--dry-run"])
    assert dry.exit_code == 0
    assert "Would run recipe 'deploy-check':" in dry.output
    assert fake.calls == []

    sync = runner.invoke(app, ["git", "sync", "--confirm"], input="")
    assert sync.exit_code == 0
    assert "Operation cancelled" not in sync.output
    assert ("git", "pull", "--rebase") in fake.calls

    kctx = runner.invoke(app, ["k8s", "kctx", "dev", "--dry-run"])
    assert kctx.exit_code == 0
    assert "Would run: kubectl config use-context development-cluster" in kctx.output


def test_brew_delete_confirm_after_subcommand(fake_home: Path, workdir: Path, install_session) -> None:  # noqa: ANN001
    install_session()
    config_path = _write_config(workdir, "brew:\n  recipes:\n    old:\n      commands: [echo]\n")

    result = runner.invoke(app, ["brew", "delete", "old", "--confirm"], input="")

    assert result.exit_code == 0
    assert yaml.safe_load(config_path.read_text())["brew"]["recipes"] == {}


@pytest.mark.parametrize("shell", ["bash", "zsh", "fish"])
def test_completion_script_for_each_shell(shell: str) -> None:
    result = runner.invoke(app, ["completion", shell])

    assert result.exit_code == 0
    assert "_OPSBREW_COMPLETE" in result.output
