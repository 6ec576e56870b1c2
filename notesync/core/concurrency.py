"""
Concurrency Infrastructure.

Named semaphores that limit concurrent access to external services.
Sizing is configured in config/settings/concurrency.yaml.

Semaphores are bound to the running event loop on first use, so they are
reset by clear_semaphores() whenever the loop changes (tests, CLI runs).

Usage:
    from notesync.core.concurrency import get_semaphore

    async with get_semaphore("remote_api"):
        result = await client.get(url)
"""

import asyncio

from notesync.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CAPACITY = 20

_semaphores: dict[str, asyncio.Semaphore] = {}


def _configured_capacity(name: str) -> int:
    try:
        from notesync.core.config import get_app_config
        semaphore_config = get_app_config().concurrency.semaphores
    except (RuntimeError, FileNotFoundError, ValueError):
        return DEFAULT_CAPACITY
    return getattr(semaphore_config, name, DEFAULT_CAPACITY)


def get_semaphore(name: str) -> asyncio.Semaphore:
    """Get a named semaphore for concurrency-limiting external calls.

    Semaphores are created lazily. The capacity is read from concurrency.yaml
    under `semaphores.<name>`. If the name is not configured, or no
    configuration is available, defaults to 20.
    """
    if name not in _semaphores:
        capacity = _configured_capacity(name)
        _semaphores[name] = asyncio.Semaphore(capacity)
        logger.debug("Semaphore created", extra={"name": name, "capacity": capacity})
    return _semaphores[name]


def clear_semaphores() -> None:
    """Drop all semaphores. Called on shutdown."""
    _semaphores.clear()
    logger.debug("Semaphores cleared")
