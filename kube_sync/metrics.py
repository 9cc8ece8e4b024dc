"""Metrics recorded for operations against the API server."""

from abc import ABC, abstractmethod

from prometheus_client import REGISTRY, Counter

from .config import MetricsConfig
from .exceptions import ErrorKind, error_kind

__all__ = [
    "MetricsRecorder",
    "DummyRecorder",
    "PrometheusRecorder",
    "NOT_APPLICABLE",
    "SUCCESS",
    "FAIL",
    "error_label",
]

NOT_APPLICABLE = "NA"
SUCCESS = "SUCCESS"
FAIL = "FAIL"

K8S_FORBIDDEN_ERR = "K8S_FORBIDDEN_ERR"
K8S_UNAUTH = "K8S_UNAUTH"
K8S_NOT_FOUND = "K8S_NOT_FOUND"
K8S_MISC = "K8S_MISC"

_ERROR_LABELS = {
    ErrorKind.FORBIDDEN: K8S_FORBIDDEN_ERR,
    ErrorKind.UNAUTHORIZED: K8S_UNAUTH,
    ErrorKind.NOT_FOUND: K8S_NOT_FOUND,
}


def error_label(err: BaseException | None) -> str:
    """Return the metric label for the error of an operation."""
    if err is None:
        return NOT_APPLICABLE
    return _ERROR_LABELS.get(error_kind(err), K8S_MISC)


class MetricsRecorder(ABC):
    """Sink for instrumentation of operations against the API server."""

    @abstractmethod
    def record_k8s_operation(
        self,
        namespace: str,
        kind: str,
        object_name: str,
        operation: str,
        status: str,
        err: str,
    ) -> None:
        """Record one attempted operation against the API server."""


class DummyRecorder(MetricsRecorder):
    """A recorder that discards everything."""

    def record_k8s_operation(
        self,
        namespace: str,
        kind: str,
        object_name: str,
        operation: str,
        status: str,
        err: str,
    ) -> None:
        """Discard the operation."""


class PrometheusRecorder(MetricsRecorder):
    """A recorder that exports a prometheus counter of operations."""

    def __init__(self, config: MetricsConfig | None = None) -> None:
        """Initialize the recorder and register its collectors."""
        config = config or MetricsConfig()
        self._operations = Counter(
            "k8s_operations",
            "Number of operations performed against the kubernetes API server",
            ["namespace", "kind", "object", "operation", "status", "err"],
            namespace=config.namespace,
            registry=config.registry if config.registry is not None else REGISTRY,
        )

    def record_k8s_operation(
        self,
        namespace: str,
        kind: str,
        object_name: str,
        operation: str,
        status: str,
        err: str,
    ) -> None:
        """Increment the operation counter."""
        self._operations.labels(
            namespace=namespace,
            kind=kind,
            object=object_name,
            operation=operation,
            status=status,
            err=err,
        ).inc()
