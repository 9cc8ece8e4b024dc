"""
Generic resource service implementing the create-or-update protocol.

A `ResourceService` is bound to one `ResourceKind` and exposes the
operations the operator performs against objects of that kind. The central
operation is `create_or_update`, which makes the stored object converge on a
desired one:

1. Fetch the stored object.
2. If it does not exist, create the desired object.
3. If the fetch fails for any other reason, stop and report the failure.
4. Otherwise copy the stored version token onto the desired object and
   replace the stored object with it.

The version token is always taken from the fetch immediately before the
write, never from the caller. A concurrent writer between the fetch and the
update surfaces as a failed update with a CONFLICT error; retrying is left to
the caller's reconciliation loop.
"""

from enum import StrEnum
import logging
from typing import Any

from kube_sync.client import KubeClient
from kube_sync.exceptions import ApiError, InputException, SyncError, is_not_found
from kube_sync.kinds import ResourceKind, Verb
from kube_sync.manifest import KubeObject, NamedResource

__all__ = [
    "Outcome",
    "ResourceService",
]

_LOGGER = logging.getLogger(__name__)


class Outcome(StrEnum):
    """Result of a create-or-update call."""

    CREATED = "Created"
    UPDATED = "Updated"
    FETCH_FAILED = "FetchFailed"
    CREATE_FAILED = "CreateFailed"
    UPDATE_FAILED = "UpdateFailed"


class ResourceService:
    """Service that knows how to manage objects of one resource kind."""

    def __init__(self, client: KubeClient, kind: ResourceKind) -> None:
        """Initialize the service.

        Args:
            client: The client used to reach the API server.
            kind: Descriptor of the kind this service manages.
        """
        self._client = client
        self._kind = kind

    @property
    def kind(self) -> ResourceKind:
        """Return the descriptor of the managed kind."""
        return self._kind

    def _require(self, verb: Verb) -> None:
        if not self._kind.supports(verb):
            raise InputException(f"{verb} is not supported for {self._kind.kind}")

    def _check_kind(self, obj: KubeObject) -> None:
        if obj.kind != self._kind.kind:
            raise InputException(
                f"Object {obj.resource_id} is not of kind {self._kind.kind}"
            )

    def _resource_id(self, namespace: str | None, name: str) -> NamedResource:
        return NamedResource(
            self._kind.kind, self._kind.scoped_namespace(namespace), name
        )

    async def get(self, namespace: str | None, name: str) -> KubeObject:
        """Retrieve the object with the given namespace and name."""
        return await self._client.get(self._kind, namespace, name)

    async def create(self, namespace: str | None, obj: KubeObject) -> KubeObject:
        """Create the given object."""
        self._check_kind(obj)
        stored = await self._client.create(self._kind, namespace, obj)
        _LOGGER.info(
            "%s %s created",
            self._kind.kind,
            self._resource_id(namespace, obj.name).namespaced_name,
        )
        return stored

    async def update(self, namespace: str | None, obj: KubeObject) -> KubeObject:
        """Replace the stored object with the given object.

        The object must carry the version token of the stored object.
        """
        self._check_kind(obj)
        stored = await self._client.update(self._kind, namespace, obj)
        _LOGGER.info(
            "%s %s updated",
            self._kind.kind,
            self._resource_id(namespace, obj.name).namespaced_name,
        )
        return stored

    async def create_or_update(
        self, namespace: str | None, desired: KubeObject
    ) -> Outcome:
        """Update the object or create it if it does not exist.

        The `resource_version` of `desired` is overwritten with the version of
        the stored object before the update, and cleared before a create.

        Returns:
            Outcome.CREATED or Outcome.UPDATED.

        Raises:
            SyncError: With outcome FETCH_FAILED, CREATE_FAILED or
                UPDATE_FAILED, chained from the underlying ApiError.
        """
        self._check_kind(desired)
        resource_id = self._resource_id(namespace, desired.name)
        stored: KubeObject | None
        try:
            stored = await self._client.get(self._kind, namespace, desired.name)
        except ApiError as err:
            if not is_not_found(err):
                _LOGGER.debug("Failed to fetch %s: %s", resource_id, err)
                raise SyncError(Outcome.FETCH_FAILED, Verb.GET, resource_id, err) from err
            stored = None

        if stored is None:
            # If no resource we need to create, objects to be created carry no
            # version.
            desired.resource_version = None
            try:
                await self.create(namespace, desired)
            except ApiError as err:
                _LOGGER.debug("Failed to create %s: %s", resource_id, err)
                raise SyncError(
                    Outcome.CREATE_FAILED, Verb.CREATE, resource_id, err
                ) from err
            return Outcome.CREATED

        # Already exists, replace it using the latest stored version.
        desired.resource_version = stored.resource_version
        try:
            await self.update(namespace, desired)
        except ApiError as err:
            _LOGGER.debug("Failed to update %s: %s", resource_id, err)
            raise SyncError(Outcome.UPDATE_FAILED, Verb.UPDATE, resource_id, err) from err
        return Outcome.UPDATED

    async def create_if_not_exists(
        self, namespace: str | None, desired: KubeObject
    ) -> bool:
        """Create the object only if it does not exist yet.

        Returns:
            True if the object was created, False if it already existed.
        """
        self._check_kind(desired)
        try:
            await self._client.get(self._kind, namespace, desired.name)
        except ApiError as err:
            if not is_not_found(err):
                raise
        else:
            return False
        desired.resource_version = None
        await self.create(namespace, desired)
        return True

    async def patch(
        self, namespace: str | None, name: str, patch: dict[str, Any]
    ) -> KubeObject:
        """Apply a JSON merge patch to the object."""
        self._require(Verb.PATCH)
        return await self._client.patch(self._kind, namespace, name, patch)

    async def delete(self, namespace: str | None, name: str) -> None:
        """Delete the object and wait for its dependents to be removed."""
        self._require(Verb.DELETE)
        await self._client.delete(self._kind, namespace, name, cascade=True)
        _LOGGER.info(
            "%s %s deleted",
            self._kind.kind,
            self._resource_id(namespace, name).namespaced_name,
        )

    async def list(
        self, namespace: str | None, *, label_selector: str | None = None
    ) -> list[KubeObject]:
        """List the objects in the namespace."""
        self._require(Verb.LIST)
        return await self._client.list(
            self._kind, namespace, label_selector=label_selector
        )
