"""
Resilience Infrastructure.

Circuit breaker listener and the composed call wrapper used for every
remote note service request.

The composed resilience stack is always applied in this order (outside-in):
    Circuit Breaker (aiobreaker) → Semaphore → Timeout → Call

There is no retry layer. A failed remote call leaves the note unsynced and
the next edit or an explicit sync pass re-attempts reconciliation.

Usage:
    from notesync.core.resilience import create_circuit_breaker, guarded_call

    breaker = create_circuit_breaker("remote_notes")
    response = await guarded_call(
        breaker, "remote_api", 5.0, client.get, "/notes/abc",
    )
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, TypeVar

import aiobreaker

from notesync.core.concurrency import get_semaphore
from notesync.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ResilienceLogger(aiobreaker.CircuitBreakerListener):
    """Circuit breaker listener that emits structured resilience events.

    Every state transition is logged with a standardized set of fields
    so that resilience events can be filtered and aggregated:

        jq 'select(.resilience_event != null)' logs/system.jsonl
    """

    def __init__(self, dependency: str) -> None:
        self.dependency = dependency

    def state_change(self, cb: aiobreaker.CircuitBreaker, old_state: Any, new_state: Any) -> None:
        event_map = {
            "open": "circuit_breaker_opened",
            "half-open": "circuit_breaker_half_open",
            "closed": "circuit_breaker_closed",
        }
        new_str = str(new_state).lower()
        event = event_map.get(new_str, f"circuit_breaker_{new_str}")
        log_level = "error" if new_str == "open" else "info"

        getattr(logger, log_level)(
            f"Circuit breaker {self.dependency}: {old_state} → {new_state}",
            extra={
                "resilience_event": event,
                "dependency": self.dependency,
                "failure_count": cb.fail_counter,
            },
        )

    def failure(self, cb: aiobreaker.CircuitBreaker, exception: Exception) -> None:
        logger.warning(
            f"Circuit breaker {self.dependency}: failure recorded",
            extra={
                "resilience_event": "circuit_breaker_failure",
                "dependency": self.dependency,
                "failure_count": cb.fail_counter,
                "error": str(exception),
            },
        )


def create_circuit_breaker(
    dependency: str,
    fail_max: int = 5,
    timeout_duration: int = 30,
) -> aiobreaker.CircuitBreaker:
    """Create a circuit breaker with structured logging.

    Args:
        dependency: Name of the external dependency (for logging)
        fail_max: Number of failures before opening
        timeout_duration: Seconds to wait before half-open test

    Returns:
        Configured CircuitBreaker instance
    """
    return aiobreaker.CircuitBreaker(
        fail_max=fail_max,
        timeout_duration=timedelta(seconds=timeout_duration),
        listeners=[ResilienceLogger(dependency)],
    )


async def guarded_call(
    breaker: aiobreaker.CircuitBreaker,
    semaphore_name: str,
    timeout: float,
    func: Callable[..., Awaitable[T]],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Run `func` behind the breaker, a named semaphore and a hard timeout.

    Raises whatever `func` raises, TimeoutError when the deadline expires,
    and aiobreaker.CircuitBreakerError when the circuit is (or just went) open.
    """

    async def _limited() -> T:
        async with get_semaphore(semaphore_name):
            async with asyncio.timeout(timeout):
                return await func(*args, **kwargs)

    return await breaker.call_async(_limited)
