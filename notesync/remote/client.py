"""
HTTP Client for the Remote Note Service.

REST-style contract:
    GET    {notes_path}/{id}   200 if the record exists, 404 if not
    POST   {notes_path}        full note body, 2xx on success
    PUT    {notes_path}/{id}   full note body, 2xx on success
    DELETE {notes_path}/{id}   2xx on success, 404 treated as already gone
    GET    {health_path}       reachability probe

Every call except the probe goes through the resilience stack in
notesync.core.resilience (circuit breaker, semaphore, timeout). Transport
errors, timeouts, an open circuit and unexpected statuses all surface as
RemoteCallFailure.
"""

from typing import Any

import aiobreaker
import httpx

from notesync.core.exceptions import AmbiguousExistenceResult, RemoteCallFailure
from notesync.core.logging import get_logger, log_with_source
from notesync.core.resilience import create_circuit_breaker, guarded_call
from notesync.remote.base import RemoteNotes
from notesync.schemas.note import NoteRecord

logger = get_logger(__name__)

SEMAPHORE_NAME = "remote_api"


def _get_client_config() -> dict[str, Any]:
    """Load remote endpoint settings from remote.yaml (with env overrides)."""
    from notesync.core.config import get_app_config, get_remote_base_url

    remote = get_app_config().remote
    base_url, timeout = get_remote_base_url()
    return {
        "base_url": base_url,
        "timeout": timeout,
        "notes_path": remote.notes_path,
        "health_path": remote.health_path,
        "fail_max": remote.circuit_breaker.fail_max,
        "timeout_duration": remote.circuit_breaker.timeout_duration,
    }


class RemoteNotesClient(RemoteNotes):
    """
    HTTP client for the remote note service.

    Features:
    - Base URL, paths and timeout from config/settings/remote.yaml
    - Structured logging of requests/responses
    - Circuit breaker + semaphore + hard timeout around every note call
    - Failures normalized to RemoteCallFailure

    Usage:
        client = RemoteNotesClient()
        if await client.exists(note.id):
            await client.update(note)
        else:
            await client.create(note)
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        notes_path: str | None = None,
        health_path: str | None = None,
        breaker: aiobreaker.CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Remote service base URL. If None, read from remote.yaml.
            timeout: Per-call timeout in seconds. If None, read from remote.yaml.
            notes_path: Collection path. Defaults to /notes.
            health_path: Probe path. Defaults to /health.
            breaker: Circuit breaker to use. If None, one is built from config.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        try:
            config = _get_client_config()
        except (RuntimeError, FileNotFoundError, ValueError) as e:
            if base_url is None:
                raise RuntimeError(
                    "Could not determine remote URL from config/settings/remote.yaml"
                ) from e
            config = {
                "base_url": base_url,
                "timeout": 10.0,
                "notes_path": "/notes",
                "health_path": "/health",
                "fail_max": 5,
                "timeout_duration": 30,
            }

        self.base_url = (base_url or config["base_url"]).rstrip("/")
        self.timeout = timeout if timeout is not None else config["timeout"]
        self.notes_path = "/" + (notes_path or config["notes_path"]).strip("/")
        self.health_path = "/" + (health_path or config["health_path"]).strip("/")
        self.breaker = breaker or create_circuit_breaker(
            "remote_notes",
            fail_max=config["fail_max"],
            timeout_duration=config["timeout_duration"],
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _note_path(self, note_id: str) -> str:
        return f"{self.notes_path}/{note_id}"

    async def request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make a raw HTTP request, without the resilience stack.

        Raises:
            httpx.HTTPError: On transport failure
        """
        client = await self._get_client()

        log_with_source(logger, "remote", "debug", "Remote request", method=method, path=path)

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                "remote",
                "warning",
                "Remote request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise

        log_with_source(
            logger,
            "remote",
            "debug",
            "Remote response",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    async def _call(
        self,
        method: str,
        path: str,
        accept: frozenset[int] = frozenset(),
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request through the resilience stack.

        Any 2xx status or a status listed in `accept` is a success. Anything
        else counts as a breaker failure and raises RemoteCallFailure.
        """

        async def _checked() -> httpx.Response:
            response = await self.request(method, path, **kwargs)
            if response.is_success or response.status_code in accept:
                return response
            raise RemoteCallFailure(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return await guarded_call(self.breaker, SEMAPHORE_NAME, self.timeout, _checked)
        except RemoteCallFailure:
            raise
        except aiobreaker.CircuitBreakerError as e:
            cause = e.__cause__ or e.__context__
            status_code = cause.status_code if isinstance(cause, RemoteCallFailure) else None
            raise RemoteCallFailure(
                f"{method} {path} rejected: circuit open", status_code=status_code,
            ) from e
        except TimeoutError as e:
            raise RemoteCallFailure(f"{method} {path} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise RemoteCallFailure(f"{method} {path} failed: {e}") from e

    async def exists(self, note_id: str) -> bool:
        """
        Existence probe. 200 → True, 404 → False.

        Raises:
            AmbiguousExistenceResult: On any other outcome
        """
        path = self._note_path(note_id)
        try:
            response = await self._call("GET", path, accept=frozenset({404}))
        except RemoteCallFailure as e:
            raise AmbiguousExistenceResult(
                f"Existence check for {note_id} failed: {e.message}",
                status_code=e.status_code,
            ) from e

        if response.status_code == 404:
            return False
        if response.status_code == 200:
            return True
        raise AmbiguousExistenceResult(
            f"Existence check for {note_id} returned {response.status_code}",
            status_code=response.status_code,
        )

    async def create(self, note: NoteRecord) -> None:
        """POST the full note body."""
        await self._call("POST", self.notes_path, json=note.to_wire())

    async def update(self, note: NoteRecord) -> None:
        """PUT the full note body."""
        await self._call("PUT", self._note_path(note.id), json=note.to_wire())

    async def delete(self, note_id: str) -> None:
        """DELETE the record. 404 means it is already gone."""
        await self._call("DELETE", self._note_path(note_id), accept=frozenset({404}))

    async def ping(self) -> bool:
        """
        Reachability probe, outside the circuit breaker.

        Any answer below 500 means the service is reachable.
        """
        try:
            response = await self.request("GET", self.health_path)
        except httpx.HTTPError:
            return False
        return response.status_code < 500
