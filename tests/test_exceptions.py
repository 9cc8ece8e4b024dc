"""Tests for the error classification."""

from kube_sync.exceptions import (
    ApiError,
    ErrorKind,
    InputException,
    SyncError,
    error_kind,
    is_not_found,
)
from kube_sync.manifest import NamedResource
from kube_sync.service import Outcome


def test_api_error_message() -> None:
    """The message names the verb, the object and the error kind."""
    err = ApiError(
        ErrorKind.CONFLICT,
        "the object has been modified",
        verb="UPDATE",
        kind="StatefulSet",
        namespace="ns-a",
        name="redis-1",
    )
    assert str(err) == (
        "UPDATE StatefulSet/ns-a/redis-1: Conflict: the object has been modified"
    )
    assert ApiError(ErrorKind.TIMEOUT, "slow").args[0] == "Timeout: slow"


def test_is_not_found() -> None:
    """Only a structured not found error means absence."""
    assert is_not_found(ApiError(ErrorKind.NOT_FOUND, "gone"))
    assert not is_not_found(ApiError(ErrorKind.TIMEOUT, "not found"))
    assert not is_not_found(ApiError(ErrorKind.FORBIDDEN, "pods not found"))
    assert not is_not_found(ValueError("404 not found"))


def test_error_kind() -> None:
    """Errors that do not come from the API server are unknown."""
    assert error_kind(ApiError(ErrorKind.FORBIDDEN, "denied")) == ErrorKind.FORBIDDEN
    assert error_kind(InputException("bad")) == ErrorKind.UNKNOWN
    assert error_kind(RuntimeError("boom")) == ErrorKind.UNKNOWN


def test_sync_error() -> None:
    """A SyncError carries the kind of the failed call."""
    cause = ApiError(ErrorKind.INVALID, "spec is immutable")
    err = SyncError(
        Outcome.UPDATE_FAILED,
        "UPDATE",
        NamedResource("StatefulSet", "ns-a", "redis-1"),
        cause,
    )
    assert err.error_kind == ErrorKind.INVALID
    assert error_kind(err) == ErrorKind.INVALID
    assert "UPDATE StatefulSet/ns-a/redis-1 failed (UpdateFailed)" in str(err)
