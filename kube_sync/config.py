"""Configuration objects for kube-sync."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prometheus_client import CollectorRegistry


DEFAULT_NAMESPACE = "default"
DEFAULT_METRICS_NAMESPACE = "kube_sync"


@dataclass
class ClientConfig:
    """Configuration for connecting to the API server."""

    kubeconfig: str | None = None
    """Path to a kubeconfig file, or None to use the default lookup."""

    context: str | None = None
    """The kubeconfig context to use, or None for the current context."""

    namespace: str = DEFAULT_NAMESPACE
    """The namespace used when a command does not name one."""

    request_timeout: float = 30.0
    """Seconds before a request to the API server is abandoned."""


@dataclass
class MetricsConfig:
    """Configuration for the prometheus metrics recorder."""

    namespace: str = DEFAULT_METRICS_NAMESPACE
    """Prefix for the exported metric names."""

    registry: "CollectorRegistry | None" = None
    """Registry to register collectors on, None for the global registry."""
