"""Core package for the opsbrew project."""

__version__ = "0.1.0"

from .cli import app, run  # noqa: E402
from .config import Config, Recipe, load_config, save_config  # noqa: E402
from .errors import (  # noqa: E402
    ConfigLoadError,
    ExternalProcessError,
    NotFoundError,
    OpsbrewError,
    PersistenceError,
    ResolutionError,
    ValidationError,
)
from .git import classify_status  # noqa: E402
from .models import FileStatus, RunResult, RunState, StatusCategory, StatusReport  # noqa: E402
from .recipes import RecipeRunner, RecipeStepError, RecipeStore  # noqa: E402
from .resolve import resolve  # noqa: E402

__all__ = [
    "Config",
    "Recipe",
    "load_config",
    "save_config",
    "OpsbrewError",
    "ConfigLoadError",
    "ExternalProcessError",
    "NotFoundError",
    "PersistenceError",
    "ResolutionError",
    "ValidationError",
    "classify_status",
    "FileStatus",
    "StatusCategory",
    "StatusReport",
    "RunResult",
    "RunState",
    "RecipeRunner",
    "RecipeStepError",
    "RecipeStore",
    "resolve",
    "app",
    "run",
    "__version__",
]
