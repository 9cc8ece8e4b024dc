"""Abstract interface for the kubernetes API server.

Implementations translate every failure into an `ApiError` carrying a
structured `ErrorKind`, so callers can tell an absent object apart from a
failed request without looking at error messages.
"""

from abc import ABC, abstractmethod
from typing import Any

from kube_sync.kinds import ResourceKind
from kube_sync.manifest import KubeObject


class KubeClient(ABC):
    """Abstract base class for operations against the API server.

    All methods are async. `namespace` is ignored for cluster scoped kinds.
    """

    @abstractmethod
    async def get(
        self, kind: ResourceKind, namespace: str | None, name: str
    ) -> KubeObject:
        """Fetch an object.

        Raises:
            ApiError: With kind NOT_FOUND if the object does not exist.
        """

    @abstractmethod
    async def create(
        self, kind: ResourceKind, namespace: str | None, obj: KubeObject
    ) -> KubeObject:
        """Create an object and return it as stored by the server."""

    @abstractmethod
    async def update(
        self, kind: ResourceKind, namespace: str | None, obj: KubeObject
    ) -> KubeObject:
        """Replace an object and return it as stored by the server.

        The object's resource_version is compared against the stored one and
        a mismatch raises an ApiError with kind CONFLICT.
        """

    @abstractmethod
    async def patch(
        self,
        kind: ResourceKind,
        namespace: str | None,
        name: str,
        patch: dict[str, Any],
    ) -> KubeObject:
        """Apply a JSON merge patch to an object."""

    @abstractmethod
    async def delete(
        self,
        kind: ResourceKind,
        namespace: str | None,
        name: str,
        *,
        cascade: bool = True,
    ) -> None:
        """Delete an object.

        When `cascade` is set the deletion uses foreground propagation so
        dependents are removed before the object itself.
        """

    @abstractmethod
    async def list(
        self,
        kind: ResourceKind,
        namespace: str | None,
        *,
        label_selector: str | None = None,
    ) -> list[KubeObject]:
        """List objects, optionally filtered by a label selector."""

    async def close(self) -> None:
        """Release any resources held by the client."""
