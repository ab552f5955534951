"""YAML configuration loading for opsbrew."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigLoadError, PersistenceError

DEFAULT_CONFIG_FILENAME = ".opsbrew.yaml"

logger = logging.getLogger(__name__)


def _none_to_empty(value: Any) -> Any:
    return {} if value is None else value


def _none_to_tuple(value: Any) -> Any:
    return () if value is None else value


class GitSettings(BaseModel):
    """Options for the git shortcuts."""

    model_config = ConfigDict(frozen=True)

    default_branch: str = "main"
    aliases: Dict[str, str] = Field(default_factory=dict)
    auto_fetch: bool = True

    @field_validator("aliases", mode="before")
    @classmethod
    def normalize_aliases(cls, value: Any) -> Any:
        return _none_to_empty(value)


class KubernetesSettings(BaseModel):
    """Options for the kubectl shortcuts."""

    model_config = ConfigDict(frozen=True)

    default_context: str = ""
    default_namespace: str = "default"
    context_aliases: Dict[str, str] = Field(default_factory=dict)
    namespace_aliases: Dict[str, str] = Field(default_factory=dict)

    @field_validator("context_aliases", "namespace_aliases", mode="before")
    @classmethod
    def normalize_aliases(cls, value: Any) -> Any:
        return _none_to_empty(value)


class Recipe(BaseModel):
    """A named, ordered list of commands saved for repeated execution."""

    model_config = ConfigDict(frozen=True)

    description: str = ""
    commands: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()

    @field_validator("commands", "tags", mode="before")
    @classmethod
    def normalize_sequences(cls, value: Any) -> Any:
        return _none_to_tuple(value)

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, value: Any) -> Any:
        return "" if value is None else value


class BrewSettings(BaseModel):
    """Saved recipes keyed by name."""

    model_config = ConfigDict(frozen=True)

    recipes: Dict[str, Recipe] = Field(default_factory=dict)

    @field_validator("recipes", mode="before")
    @classmethod
    def normalize_recipes(cls, value: Any) -> Any:
        return _none_to_empty(value)


class TemplateSettings(BaseModel):
    """Location of user-provided project templates."""

    model_config = ConfigDict(frozen=True)

    path: str = ""


class UISettings(BaseModel):
    """Defaults for the global command-line flags."""

    model_config = ConfigDict(frozen=True)

    colors: bool = True
    verbose: bool = False
    confirm: bool = False
    dry_run: bool = False


class Config(BaseModel):
    """Fully parsed configuration file."""

    model_config = ConfigDict(frozen=True)

    git: GitSettings = Field(default_factory=GitSettings)
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    brew: BrewSettings = Field(default_factory=BrewSettings)
    templates: TemplateSettings = Field(default_factory=TemplateSettings)
    ui: UISettings = Field(default_factory=UISettings)
    config_path: Path | None = Field(default=None, exclude=True)

    @field_validator("git", "kubernetes", "brew", "templates", "ui", mode="before")
    @classmethod
    def empty_sections(cls, value: Any) -> Any:
        return _none_to_empty(value)

    def with_recipes(self, recipes: Dict[str, Recipe]) -> "Config":
        """Return a copy of the configuration holding ``recipes``."""

        return self.model_copy(update={"brew": BrewSettings(recipes=dict(recipes))})

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def global_config_path() -> Path:
    return Path.home() / DEFAULT_CONFIG_FILENAME


def default_config(config_path: Path | None = None) -> Config:
    """Return the configuration written on first use."""

    return Config(
        git=GitSettings(
            default_branch="main",
            auto_fetch=True,
            aliases={
                "st": "status",
                "co": "checkout",
                "br": "branch",
                "cm": "commit",
                "pl": "pull",
                "ps": "push",
                "lg": "log --oneline --graph",
                "sync": "pull --rebase",
            },
        ),
        kubernetes=KubernetesSettings(
            default_context="",
            default_namespace="default",
            context_aliases={
                "prod": "production-cluster",
                "dev": "development-cluster",
                "stg": "staging-cluster",
            },
            namespace_aliases={
                "app": "application",
                "db": "database",
                "mon": "monitoring",
            },
        ),
        brew=BrewSettings(
            recipes={
                "daily-sync": Recipe(
                    description="Daily development workflow",
                    commands=("git fetch --all", "git pull origin main", "git status --short"),
                    tags=("daily", "git"),
                ),
                "deploy-check": Recipe(
                    description="Pre-deployment checks",
                    commands=("kubectl get pods", "kubectl get services", "kubectl get ingress"),
                    tags=("deploy", "k8s"),
                ),
            }
        ),
        templates=TemplateSettings(path=str(Path.home() / ".opsbrew" / "templates")),
        ui=UISettings(colors=True, verbose=False, confirm=False, dry_run=False),
        config_path=config_path,
    )


def load_config(path: Path | None = None, *, cwd: Path | None = None) -> Config:
    """Load and validate the configuration.

    Args:
        path: Optional explicit path to the YAML file. When omitted, a
            ``.opsbrew.yaml`` in ``cwd`` takes precedence over the one in the
            home directory; the latter is created with defaults if missing.
        cwd: Directory searched for the per-directory override.
    """

    config_path = _resolve_config_path(path, cwd=cwd)
    if config_path is None:
        config_path = global_config_path()
        config = default_config(config_path)
        save_config(config)
        logger.info("Created default config file: %s", config_path)
        return config

    logger.debug("Using config file: %s", config_path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Unable to read configuration '{config_path}': {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"Configuration '{config_path}' is not valid YAML: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Configuration '{config_path}' must contain a mapping at the top level")

    try:
        return Config.model_validate({**data, "config_path": config_path})
    except PydanticValidationError as exc:
        raise ConfigLoadError(f"Configuration '{config_path}' is invalid: {exc}") from exc


def save_config(config: Config, path: Path | None = None) -> Path:
    """Write ``config`` back to the file it was loaded from."""

    target = path or config.config_path or global_config_path()
    payload = yaml.safe_dump(config.to_document(), sort_keys=False, default_flow_style=False)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.opsbrew-tmp-", dir=target.parent)
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(temp_path, target)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise PersistenceError(f"Unable to write configuration '{target}': {exc}") from exc

    logger.debug("Saved config file: %s", target)
    return target


def _resolve_config_path(path: Path | None, *, cwd: Path | None) -> Path | None:
    if path is not None:
        path = Path(path).expanduser()
        if not path.exists():
            raise ConfigLoadError(f"Configuration file '{path}' does not exist")
        if path.is_dir():
            candidate = path / DEFAULT_CONFIG_FILENAME
            if not candidate.exists():
                raise ConfigLoadError(
                    f"Expected to find '{DEFAULT_CONFIG_FILENAME}' inside '{path}', but none was located"
                )
            path = candidate
        return path.resolve(strict=False)

    local = (cwd or Path.cwd()) / DEFAULT_CONFIG_FILENAME
    if local.is_file():
        return local.resolve(strict=False)

    global_path = global_config_path()
    if global_path.is_file():
        return global_path
    return None
