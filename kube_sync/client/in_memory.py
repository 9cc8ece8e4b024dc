"""In-memory implementation of the KubeClient interface.

The in-memory client behaves like a single API server backing store: it
assigns resource versions on every write, rejects stale versions with a
conflict, rejects duplicate creates, honours foreground cascading deletes
through owner references and filters lists by label selector. Every call is
recorded as an `Action` and failures can be injected per verb and kind.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
import logging
from typing import Any
import uuid

from kube_sync.exceptions import ApiError, ErrorKind
from kube_sync.kinds import KINDS, ResourceKind, Verb
from kube_sync.manifest import KubeObject, NamedResource, selector_matches

from .client import KubeClient

__all__ = [
    "Action",
    "InMemoryClient",
]

_LOGGER = logging.getLogger(__name__)

FOREGROUND = "Foreground"
ORPHAN = "Orphan"


@dataclass(frozen=True)
class Action:
    """A call made against the in-memory client."""

    verb: Verb
    kind: str
    namespace: str | None
    name: str | None = None
    obj: KubeObject | None = None
    label_selector: str | None = None
    propagation_policy: str | None = None
    patch: dict[str, Any] | None = field(default=None, compare=False)


@dataclass
class _InjectedError:
    verb: Verb
    kind: str
    name: str | None
    error: ApiError


def merge_patch(target: Any, patch: Any) -> Any:
    """Apply a JSON merge patch (RFC 7386) and return the result."""
    if not isinstance(patch, dict):
        return copy.deepcopy(patch)
    result = copy.deepcopy(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = merge_patch(result.get(key), value)
    return result


class InMemoryClient(KubeClient):
    """In-memory implementation of the KubeClient interface."""

    def __init__(self, resource_version_start: int = 1) -> None:
        """Initialize the InMemoryClient."""
        self._objects: dict[NamedResource, KubeObject] = {}
        self._next_version = resource_version_start
        self._actions: list[Action] = []
        self._errors: list[_InjectedError] = []

    @property
    def actions(self) -> list[Action]:
        """Return the calls made against the client, oldest first."""
        return list(self._actions)

    def clear_actions(self) -> None:
        """Forget all recorded calls."""
        self._actions.clear()

    def inject_error(
        self,
        verb: Verb,
        kind: ResourceKind | str,
        error: ApiError,
        *,
        name: str | None = None,
    ) -> None:
        """Fail every future call for the verb and kind with the error."""
        kind_name = kind.kind if isinstance(kind, ResourceKind) else kind
        self._errors.append(_InjectedError(verb, kind_name, name, error))

    def clear_errors(self) -> None:
        """Remove all injected errors."""
        self._errors.clear()

    def add_object(self, obj: KubeObject) -> KubeObject:
        """Seed the store with an object, bypassing the action log."""
        stored = copy.deepcopy(obj)
        stored.resource_version = self._bump_version()
        stored.uid = stored.uid or str(uuid.uuid4())
        self._objects[stored.resource_id] = stored
        return copy.deepcopy(stored)

    def list_objects(self, kind: str | None = None) -> list[KubeObject]:
        """Return copies of all stored objects, optionally filtered by kind."""
        return [
            copy.deepcopy(obj)
            for obj in self._objects.values()
            if kind is None or obj.kind == kind
        ]

    async def get(
        self, kind: ResourceKind, namespace: str | None, name: str
    ) -> KubeObject:
        """Fetch an object."""
        namespace = kind.scoped_namespace(namespace)
        self._record(Action(Verb.GET, kind.kind, namespace, name))
        self._check_error(Verb.GET, kind, namespace, name)
        resource_id = NamedResource(kind.kind, namespace, name)
        if (obj := self._objects.get(resource_id)) is None:
            raise _not_found(Verb.GET, resource_id)
        return copy.deepcopy(obj)

    async def create(
        self, kind: ResourceKind, namespace: str | None, obj: KubeObject
    ) -> KubeObject:
        """Create an object."""
        namespace = kind.scoped_namespace(namespace)
        self._record(
            Action(Verb.CREATE, kind.kind, namespace, obj.name, obj=copy.deepcopy(obj))
        )
        self._check_error(Verb.CREATE, kind, namespace, obj.name)
        self._check_object(Verb.CREATE, kind, namespace, obj)
        resource_id = NamedResource(kind.kind, namespace, obj.name)
        if resource_id in self._objects:
            raise ApiError(
                ErrorKind.ALREADY_EXISTS,
                f'{kind.plural} "{obj.name}" already exists',
                **_context(Verb.CREATE, resource_id),
            )
        if obj.resource_version:
            raise ApiError(
                ErrorKind.INVALID,
                "resourceVersion should not be set on objects to be created",
                **_context(Verb.CREATE, resource_id),
            )
        stored = copy.deepcopy(obj)
        stored.namespace = namespace
        stored.uid = str(uuid.uuid4())
        stored.resource_version = self._bump_version()
        self._objects[resource_id] = stored
        _LOGGER.debug("Created %s (version %s)", resource_id, stored.resource_version)
        return copy.deepcopy(stored)

    async def update(
        self, kind: ResourceKind, namespace: str | None, obj: KubeObject
    ) -> KubeObject:
        """Replace an object if its version matches the stored one."""
        namespace = kind.scoped_namespace(namespace)
        self._record(
            Action(Verb.UPDATE, kind.kind, namespace, obj.name, obj=copy.deepcopy(obj))
        )
        self._check_error(Verb.UPDATE, kind, namespace, obj.name)
        self._check_object(Verb.UPDATE, kind, namespace, obj)
        resource_id = NamedResource(kind.kind, namespace, obj.name)
        if (existing := self._objects.get(resource_id)) is None:
            raise _not_found(Verb.UPDATE, resource_id)
        if not obj.resource_version:
            raise ApiError(
                ErrorKind.INVALID,
                "metadata.resourceVersion must be specified for an update",
                **_context(Verb.UPDATE, resource_id),
            )
        if obj.resource_version != existing.resource_version:
            raise ApiError(
                ErrorKind.CONFLICT,
                f'Operation cannot be fulfilled on {kind.plural} "{obj.name}": '
                "the object has been modified; please apply your changes to the "
                "latest version and try again",
                **_context(Verb.UPDATE, resource_id),
            )
        stored = copy.deepcopy(obj)
        stored.namespace = namespace
        stored.uid = existing.uid
        stored.resource_version = self._bump_version()
        self._objects[resource_id] = stored
        _LOGGER.debug("Updated %s (version %s)", resource_id, stored.resource_version)
        return copy.deepcopy(stored)

    async def patch(
        self,
        kind: ResourceKind,
        namespace: str | None,
        name: str,
        patch: dict[str, Any],
    ) -> KubeObject:
        """Apply a JSON merge patch to an object."""
        namespace = kind.scoped_namespace(namespace)
        self._record(Action(Verb.PATCH, kind.kind, namespace, name, patch=patch))
        self._check_error(Verb.PATCH, kind, namespace, name)
        resource_id = NamedResource(kind.kind, namespace, name)
        if (existing := self._objects.get(resource_id)) is None:
            raise _not_found(Verb.PATCH, resource_id)
        doc = merge_patch(existing.to_doc(), patch)
        stored = KubeObject.parse_doc(doc)
        stored.namespace = namespace
        stored.uid = existing.uid
        stored.resource_version = self._bump_version()
        self._objects[resource_id] = stored
        return copy.deepcopy(stored)

    async def delete(
        self,
        kind: ResourceKind,
        namespace: str | None,
        name: str,
        *,
        cascade: bool = True,
    ) -> None:
        """Delete an object and, with cascade, everything it owns."""
        namespace = kind.scoped_namespace(namespace)
        propagation = FOREGROUND if cascade else ORPHAN
        self._record(
            Action(
                Verb.DELETE, kind.kind, namespace, name, propagation_policy=propagation
            )
        )
        self._check_error(Verb.DELETE, kind, namespace, name)
        resource_id = NamedResource(kind.kind, namespace, name)
        if (existing := self._objects.get(resource_id)) is None:
            raise _not_found(Verb.DELETE, resource_id)
        if cascade:
            self._delete_dependents(existing)
        else:
            self._orphan_dependents(existing)
        del self._objects[resource_id]
        _LOGGER.debug("Deleted %s (%s)", resource_id, propagation)

    async def list(
        self,
        kind: ResourceKind,
        namespace: str | None,
        *,
        label_selector: str | None = None,
    ) -> list[KubeObject]:
        """List objects of a kind in a namespace, or all namespaces if None."""
        namespace = kind.scoped_namespace(namespace)
        self._record(
            Action(Verb.LIST, kind.kind, namespace, label_selector=label_selector)
        )
        self._check_error(Verb.LIST, kind, namespace, None)
        return [
            copy.deepcopy(obj)
            for resource_id, obj in sorted(self._objects.items())
            if resource_id.kind == kind.kind
            and (namespace is None or resource_id.namespace == namespace)
            and selector_matches(obj.labels, label_selector)
        ]

    def _record(self, action: Action) -> None:
        self._actions.append(action)

    def _check_error(
        self,
        verb: Verb,
        kind: ResourceKind,
        namespace: str | None,
        name: str | None,
    ) -> None:
        for injected in self._errors:
            if injected.verb != verb or injected.kind != kind.kind:
                continue
            if injected.name is not None and injected.name != name:
                continue
            _LOGGER.debug("Injected %s failure for %s %s", verb, kind.kind, name)
            raise injected.error

    def _check_object(
        self,
        verb: Verb,
        kind: ResourceKind,
        namespace: str | None,
        obj: KubeObject,
    ) -> None:
        resource_id = NamedResource(kind.kind, namespace, obj.name)
        if obj.kind != kind.kind:
            raise ApiError(
                ErrorKind.INVALID,
                f"object kind {obj.kind} does not match {kind.kind}",
                **_context(verb, resource_id),
            )
        if kind.namespaced and obj.namespace and obj.namespace != namespace:
            raise ApiError(
                ErrorKind.INVALID,
                "the namespace of the provided object does not match the "
                "namespace sent on the request",
                **_context(verb, resource_id),
            )

    def _bump_version(self) -> str:
        version = str(self._next_version)
        self._next_version += 1
        return version

    def _dependents(self, owner: KubeObject) -> list[NamedResource]:
        return [
            resource_id
            for resource_id, obj in self._objects.items()
            if any(ref.get("uid") == owner.uid for ref in obj.owner_references or [])
        ]

    def _delete_dependents(self, owner: KubeObject) -> None:
        for resource_id in self._dependents(owner):
            if (dependent := self._objects.pop(resource_id, None)) is None:
                continue
            _LOGGER.debug("Deleting dependent %s of %s", resource_id, owner.resource_id)
            self._delete_dependents(dependent)

    def _orphan_dependents(self, owner: KubeObject) -> None:
        for resource_id in self._dependents(owner):
            dependent = self._objects[resource_id]
            dependent.owner_references = [
                ref
                for ref in dependent.owner_references or []
                if ref.get("uid") != owner.uid
            ] or None


def _context(verb: Verb, resource_id: NamedResource) -> dict[str, Any]:
    return {
        "verb": verb,
        "kind": resource_id.kind,
        "namespace": resource_id.namespace,
        "name": resource_id.name,
    }


def _not_found(verb: Verb, resource_id: NamedResource) -> ApiError:
    plural = KINDS[resource_id.kind].plural if resource_id.kind in KINDS else resource_id.kind
    return ApiError(
        ErrorKind.NOT_FOUND,
        f'{plural} "{resource_id.name}" not found',
        **_context(verb, resource_id),
    )
