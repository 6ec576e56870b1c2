"""
Centralized Logging Configuration.

structlog over the stdlib logging module, configured from
config/settings/logging.yaml. Every record carries an explicit `source`
(cli, sync, remote, store, internal) so the JSONL file can be filtered
per subsystem.

Usage:
    from notesync.core.logging import get_logger, log_with_source

    logger = get_logger(__name__)
    log_with_source(logger, "sync", "info", "Note synced", note_id="abc")
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from structlog.typing import Processor

from notesync.core.config import find_project_root, load_yaml_config

VALID_SOURCES = frozenset({
    "cli",
    "sync",
    "remote",
    "store",
    "internal",
    "unknown",
})

_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite")

_logging_config: dict[str, Any] | None = None


def _load_logging_config() -> dict[str, Any]:
    global _logging_config
    if _logging_config is None:
        _logging_config = load_yaml_config("logging.yaml")
    return _logging_config


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _file_handler(file_config: dict[str, Any], formatter: logging.Formatter) -> RotatingFileHandler:
    log_path = find_project_root() / file_config["path"]
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=file_config["max_bytes"],
        backupCount=file_config["backup_count"],
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structured logging for the process.

    Arguments override the matching logging.yaml values. Existing root
    handlers are replaced, so calling this twice does not duplicate output.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        format_type: Console format, 'json' or 'console'
        enable_console: Write to stderr
        enable_file_logging: Write JSON lines to the configured file
    """
    config = _load_logging_config()
    console_config = config["handlers"]["console"]
    file_config = config["handlers"]["file"]

    if level is None:
        level = config["level"]
    if format_type is None:
        format_type = config["format"]
    if enable_console is None:
        enable_console = console_config["enabled"]
    if enable_file_logging is None:
        enable_file_logging = file_config["enabled"]

    processors = _shared_processors()
    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=processors,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        if format_type == "console":
            console_handler.setFormatter(structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(colors=True),
                foreign_pre_chain=processors,
            ))
        else:
            console_handler.setFormatter(json_formatter)
        root_logger.addHandler(console_handler)

    if enable_file_logging:
        root_logger.addHandler(_file_handler(file_config, json_formatter))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Get a structlog logger, typically for __name__."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log a message tagged with the subsystem it came from.

    Sources outside VALID_SOURCES are recorded as "unknown".

    Raises:
        AttributeError: If level is not a valid log level
    """
    if source not in VALID_SOURCES:
        source = "unknown"
    log_method = getattr(logger, level.lower())
    log_method(message, source=source, **kwargs)
