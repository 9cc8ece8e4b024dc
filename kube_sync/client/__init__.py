"""
The client module provides access to the kubernetes API server.

- `KubeClient` is the abstract interface used by the services.
- `Kr8sClient` talks to a real cluster using kr8s.
- `InMemoryClient` is a self contained backing store for tests and dry runs.
- `InstrumentedClient` decorates any client and reports every call to a
  metrics recorder.
"""

from .client import KubeClient
from .in_memory import Action, InMemoryClient
from .instrumented import InstrumentedClient

__all__ = [
    "KubeClient",
    "Action",
    "InMemoryClient",
    "InstrumentedClient",
]
