"""Exceptions related to kube-sync."""

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .manifest import NamedResource

__all__ = [
    "KubeSyncException",
    "InputException",
    "ApiError",
    "SyncError",
    "ErrorKind",
    "error_kind",
    "is_not_found",
]


class ErrorKind(StrEnum):
    """Structured category of a failed call against the API server."""

    NOT_FOUND = "NotFound"
    ALREADY_EXISTS = "AlreadyExists"
    CONFLICT = "Conflict"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    INVALID = "Invalid"
    TIMEOUT = "Timeout"
    UNAVAILABLE = "Unavailable"
    UNKNOWN = "Unknown"


class KubeSyncException(Exception):
    """Generic base exception used for this library."""


class InputException(KubeSyncException):
    """Raised when the input objects or values are not formatted as expected."""


class ApiError(KubeSyncException):
    """Raised when a single call against the API server fails."""

    def __init__(
        self,
        error_kind: ErrorKind,
        message: str,
        *,
        verb: str | None = None,
        kind: str | None = None,
        namespace: str | None = None,
        name: str | None = None,
    ) -> None:
        self.error_kind = error_kind
        self.message = message
        self.verb = verb
        self.kind = kind
        self.namespace = namespace
        self.name = name
        target = "/".join(x for x in (kind, namespace, name) if x)
        prefix = f"{verb} {target}" if verb else target
        super().__init__(
            f"{prefix}: {error_kind}: {message}" if prefix else f"{error_kind}: {message}"
        )


class SyncError(KubeSyncException):
    """Raised when a create-or-update of a resource fails.

    The failed verb and the outcome are recorded on the exception and the
    underlying `ApiError` is chained as the cause.
    """

    def __init__(
        self,
        outcome: str,
        verb: str,
        resource: "NamedResource",
        error: Exception,
    ) -> None:
        super().__init__(f"{verb} {resource} failed ({outcome}): {error}")
        self.outcome = outcome
        self.verb = verb
        self.resource = resource
        self.error = error

    @property
    def error_kind(self) -> ErrorKind:
        """Return the structured kind of the underlying error."""
        return error_kind(self.error)


def error_kind(err: BaseException) -> ErrorKind:
    """Return the structured error kind for an exception."""
    if isinstance(err, ApiError):
        return err.error_kind
    if isinstance(err, SyncError):
        return err.error_kind
    return ErrorKind.UNKNOWN


def is_not_found(err: BaseException) -> bool:
    """Return True if the error means the object does not exist.

    Only the structured error kind is consulted. Timeouts, permission
    errors and server errors are never treated as absence.
    """
    return error_kind(err) == ErrorKind.NOT_FOUND
