"""
Configuration Management.

Loads settings from config/settings/*.yaml and environment overrides from
NOTESYNC_* variables (or config/.env).
No hardcoded values in code; all configuration comes from these sources.

Overrides (.env / environment):
    NOTESYNC_REMOTE_BASE_URL, NOTESYNC_DATABASE_PATH

Settings (YAML):
    application.yaml   - App identity
    database.yaml      - Local SQLite store location
    logging.yaml       - Logging configuration
    remote.yaml        - Remote note service endpoint, timeouts, circuit breaker
    sync.yaml          - Debounce quiet period, connectivity probing
    concurrency.yaml   - Semaphore sizes
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from notesync.core.config_schema import (
    ApplicationSchema,
    ConcurrencySchema,
    DatabaseSchema,
    LoggingSchema,
    RemoteSchema,
    SyncSchema,
)


def _search_upwards(start: Path) -> Path | None:
    current = start
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    return None


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file.

    Searches from the working directory first, then from the installed
    package location.
    """
    root = _search_upwards(Path.cwd()) or _search_upwards(Path(__file__).resolve().parent)
    if root is None:
        raise RuntimeError("Project root not found. Ensure .project_root file exists.")
    return root


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Environment overrides loaded from NOTESYNC_* variables or config/.env."""

    remote_base_url: str | None = None
    database_path: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="NOTESYNC_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Missing keys, wrong types, or unknown fields raise a clear error
    immediately instead of causing cryptic KeyErrors later.

    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._database = _load_validated(DatabaseSchema, "database.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")
        self._remote = _load_validated(RemoteSchema, "remote.yaml")
        self._sync = _load_validated(SyncSchema, "sync.yaml")
        self._concurrency = _load_validated(ConcurrencySchema, "concurrency.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def database(self) -> DatabaseSchema:
        """Local store settings."""
        return self._database

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging

    @property
    def remote(self) -> RemoteSchema:
        """Remote note service settings."""
        return self._remote

    @property
    def sync(self) -> SyncSchema:
        """Debounce and connectivity settings."""
        return self._sync

    @property
    def concurrency(self) -> ConcurrencySchema:
        """Concurrency settings (semaphores)."""
        return self._concurrency


@lru_cache
def get_settings() -> Settings:
    """Get cached overrides instance. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_database_path() -> Path:
    """
    Resolve the SQLite file for the local store.

    NOTESYNC_DATABASE_PATH wins over database.yaml. Relative paths are
    resolved against the project root.
    """
    configured = get_settings().database_path or get_app_config().database.path
    path = Path(configured)
    if not path.is_absolute():
        path = find_project_root() / path
    return path


def get_database_url() -> str:
    """Construct the aiosqlite URL of the local store."""
    return f"sqlite+aiosqlite:///{get_database_path()}"


def get_remote_base_url() -> tuple[str, float]:
    """
    Get the remote note service base URL and timeout.

    Returns:
        Tuple of (base_url, timeout_seconds).
    """
    remote = get_app_config().remote
    base_url = get_settings().remote_base_url or remote.base_url
    return base_url.rstrip("/"), float(remote.timeout_seconds)
