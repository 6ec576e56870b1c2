"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    DatabaseSchema     → database.yaml
    LoggingSchema      → logging.yaml
    RemoteSchema       → remote.yaml
    SyncSchema         → sync.yaml
    ConcurrencySchema  → concurrency.yaml
"""

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str


# =============================================================================
# database.yaml
# =============================================================================


class DatabaseSchema(_StrictBase):
    path: str
    echo: bool


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema


# =============================================================================
# remote.yaml
# =============================================================================


class CircuitBreakerSchema(_StrictBase):
    fail_max: int = Field(gt=0)
    timeout_duration: int = Field(gt=0)


class RemoteSchema(_StrictBase):
    base_url: str
    notes_path: str
    health_path: str
    timeout_seconds: float = Field(gt=0)
    circuit_breaker: CircuitBreakerSchema


# =============================================================================
# sync.yaml
# =============================================================================


class SyncSchema(_StrictBase):
    debounce_seconds: float = Field(ge=0)
    probe_interval_seconds: float = Field(gt=0)
    reconcile_on_reconnect: bool


# =============================================================================
# concurrency.yaml
# =============================================================================


class SemaphoresSchema(_StrictBase):
    remote_api: int = Field(gt=0)


class ConcurrencySchema(_StrictBase):
    semaphores: SemaphoresSchema
