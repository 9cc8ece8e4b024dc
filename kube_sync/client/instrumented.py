"""KubeClient decorator that reports every call to a metrics recorder."""

import logging
from typing import Any

from kube_sync.kinds import ResourceKind, Verb
from kube_sync.manifest import KubeObject
from kube_sync.metrics import (
    FAIL,
    NOT_APPLICABLE,
    SUCCESS,
    MetricsRecorder,
    error_label,
)

from .client import KubeClient

__all__ = ["InstrumentedClient"]

_LOGGER = logging.getLogger(__name__)


class InstrumentedClient(KubeClient):
    """Wraps a KubeClient and records each operation it performs.

    Exactly one record is emitted per call, whether it succeeds or fails.
    Failures of the recorder are logged and never reach the caller.
    """

    def __init__(self, client: KubeClient, recorder: MetricsRecorder) -> None:
        """Initialize the client with the wrapped client and the recorder."""
        self._client = client
        self._recorder = recorder

    @property
    def client(self) -> KubeClient:
        """Return the wrapped client."""
        return self._client

    def _record(
        self,
        verb: Verb,
        kind: ResourceKind,
        namespace: str | None,
        name: str,
        err: Exception | None,
    ) -> None:
        try:
            self._recorder.record_k8s_operation(
                kind.scoped_namespace(namespace) or NOT_APPLICABLE,
                kind.kind,
                name,
                str(verb),
                SUCCESS if err is None else FAIL,
                error_label(err),
            )
        except Exception:  # pylint: disable=broad-except
            _LOGGER.exception("Metrics recorder failed for %s %s", verb, kind.kind)

    async def _instrument(
        self,
        verb: Verb,
        kind: ResourceKind,
        namespace: str | None,
        name: str,
        call: Any,
    ) -> Any:
        try:
            result = await call
        except Exception as err:
            self._record(verb, kind, namespace, name, err)
            raise
        self._record(verb, kind, namespace, name, None)
        return result

    async def get(
        self, kind: ResourceKind, namespace: str | None, name: str
    ) -> KubeObject:
        """Fetch an object."""
        return await self._instrument(
            Verb.GET, kind, namespace, name, self._client.get(kind, namespace, name)
        )

    async def create(
        self, kind: ResourceKind, namespace: str | None, obj: KubeObject
    ) -> KubeObject:
        """Create an object."""
        return await self._instrument(
            Verb.CREATE,
            kind,
            namespace,
            obj.name,
            self._client.create(kind, namespace, obj),
        )

    async def update(
        self, kind: ResourceKind, namespace: str | None, obj: KubeObject
    ) -> KubeObject:
        """Replace an object."""
        return await self._instrument(
            Verb.UPDATE,
            kind,
            namespace,
            obj.name,
            self._client.update(kind, namespace, obj),
        )

    async def patch(
        self,
        kind: ResourceKind,
        namespace: str | None,
        name: str,
        patch: dict[str, Any],
    ) -> KubeObject:
        """Apply a JSON merge patch to an object."""
        return await self._instrument(
            Verb.PATCH,
            kind,
            namespace,
            name,
            self._client.patch(kind, namespace, name, patch),
        )

    async def delete(
        self,
        kind: ResourceKind,
        namespace: str | None,
        name: str,
        *,
        cascade: bool = True,
    ) -> None:
        """Delete an object."""
        await self._instrument(
            Verb.DELETE,
            kind,
            namespace,
            name,
            self._client.delete(kind, namespace, name, cascade=cascade),
        )

    async def list(
        self,
        kind: ResourceKind,
        namespace: str | None,
        *,
        label_selector: str | None = None,
    ) -> list[KubeObject]:
        """List objects."""
        return await self._instrument(
            Verb.LIST,
            kind,
            namespace,
            NOT_APPLICABLE,
            self._client.list(kind, namespace, label_selector=label_selector),
        )

    async def close(self) -> None:
        """Close the wrapped client."""
        await self._client.close()
