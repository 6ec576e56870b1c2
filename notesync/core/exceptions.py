"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.

Propagation policy:
    LocalPersistenceError  - always propagates to the caller of a save/delete
    RemoteCallFailure      - caught at the SyncReconciler boundary and turned
                             into a failed SyncResult; never reaches the UI
    RemoteUnreachable      - not raised for sync; its code marks deferred results
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a note cannot be found."""

    def __init__(self, message: str = "Note not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when an operation is invalid for the current state."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class LocalPersistenceError(ApplicationError):
    """Raised when a local store operation fails. Fatal to the current operation."""

    def __init__(self, message: str = "Local persistence error") -> None:
        super().__init__(message, code="SYS_LOCAL_PERSISTENCE_ERROR")


class RemoteUnreachable(ApplicationError):
    """Connectivity is known to be down. Sync is deferred, not failed."""

    def __init__(self, message: str = "Remote service unreachable") -> None:
        super().__init__(message, code="SYNC_REMOTE_UNREACHABLE")


class RemoteCallFailure(ApplicationError):
    """Raised when a remote call fails: transport error, timeout, open circuit, bad status."""

    def __init__(
        self,
        message: str = "Remote call failed",
        status_code: int | None = None,
        code: str = "SYS_REMOTE_CALL_FAILURE",
    ) -> None:
        self.status_code = status_code
        super().__init__(message, code=code)


class AmbiguousExistenceResult(RemoteCallFailure):
    """The existence probe returned neither a clean hit nor a clean 404."""

    def __init__(
        self,
        message: str = "Existence check was inconclusive",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, code="SYNC_AMBIGUOUS_EXISTENCE")
