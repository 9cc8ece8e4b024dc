"""Kr8s-based implementation of KubeClient.

Uses the kr8s library for native async calls against the API server. Every
verb goes through `Api.call_api` so that all kinds, including custom
resources, share one request path and one error translation.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
import kr8s
import kr8s.asyncio

from kube_sync.config import ClientConfig
from kube_sync.exceptions import ApiError, ErrorKind
from kube_sync.kinds import ResourceKind, Verb
from kube_sync.manifest import KubeObject

from .client import KubeClient

__all__ = [
    "Kr8sClient",
    "translate_error",
]

_LOGGER = logging.getLogger(__name__)

MERGE_PATCH = "application/merge-patch+json"

# The reason field of a metav1.Status body is more specific than the HTTP
# status code (e.g. 409 is used for both AlreadyExists and Conflict).
_REASON_KINDS = {
    "NotFound": ErrorKind.NOT_FOUND,
    "AlreadyExists": ErrorKind.ALREADY_EXISTS,
    "Conflict": ErrorKind.CONFLICT,
    "Unauthorized": ErrorKind.UNAUTHORIZED,
    "Forbidden": ErrorKind.FORBIDDEN,
    "Invalid": ErrorKind.INVALID,
    "BadRequest": ErrorKind.INVALID,
    "Timeout": ErrorKind.TIMEOUT,
    "ServerTimeout": ErrorKind.TIMEOUT,
    "ServiceUnavailable": ErrorKind.UNAVAILABLE,
}

_STATUS_CODE_KINDS = {
    400: ErrorKind.INVALID,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    422: ErrorKind.INVALID,
    503: ErrorKind.UNAVAILABLE,
    504: ErrorKind.TIMEOUT,
}


def _server_error_kind(err: kr8s.ServerError) -> ErrorKind:
    status = err.status if isinstance(err.status, dict) else {}
    if (reason := status.get("reason")) in _REASON_KINDS:
        return _REASON_KINDS[reason]
    code = err.response.status_code if err.response is not None else status.get("code")
    return _STATUS_CODE_KINDS.get(code, ErrorKind.UNKNOWN)


def translate_error(
    err: Exception,
    verb: Verb,
    kind: ResourceKind,
    namespace: str | None,
    name: str | None,
) -> ApiError:
    """Translate a kr8s or httpx exception into an ApiError."""
    if isinstance(err, kr8s.NotFoundError):
        error_kind = ErrorKind.NOT_FOUND
    elif isinstance(err, kr8s.ServerError):
        error_kind = _server_error_kind(err)
    elif isinstance(err, (kr8s.APITimeoutError, httpx.TimeoutException)):
        error_kind = ErrorKind.TIMEOUT
    elif isinstance(err, httpx.TransportError):
        error_kind = ErrorKind.UNAVAILABLE
    else:
        error_kind = ErrorKind.UNKNOWN
    return ApiError(
        error_kind,
        str(err),
        verb=verb,
        kind=kind.kind,
        namespace=namespace,
        name=name,
    )


class Kr8sClient(KubeClient):
    """KubeClient using the kr8s library."""

    def __init__(self, config: ClientConfig | None = None, api: Any = None) -> None:
        """Initialize the kr8s client.

        Args:
            config: Connection settings, used when `api` is not supplied.
            api: An existing `kr8s.asyncio.Api` to issue requests with.
        """
        self._config = config or ClientConfig()
        self._api = api

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Get or create the kr8s API client."""
        if self._api is None:
            self._api = await kr8s.asyncio.api(
                kubeconfig=self._config.kubeconfig,
                context=self._config.context,
                namespace=self._config.namespace,
            )
        return self._api

    async def _call(
        self,
        verb: Verb,
        kind: ResourceKind,
        namespace: str | None,
        name: str | None,
        method: str,
        **kwargs: Any,
    ) -> Any:
        """Issue one request and return the decoded JSON response."""
        namespace = kind.scoped_namespace(namespace)
        url = f"{kind.plural}/{name}" if name else kind.plural
        try:
            api = await self._get_api()
            async with api.call_api(
                method,
                version=kind.api_version,
                namespace=namespace,
                url=url,
                timeout=self._config.request_timeout,
                **kwargs,
            ) as resp:
                return resp.json()
        except (
            kr8s.NotFoundError,
            kr8s.ServerError,
            kr8s.APITimeoutError,
            httpx.HTTPError,
        ) as err:
            _LOGGER.debug("%s %s failed: %s", method, url, err)
            raise translate_error(err, verb, kind, namespace, name) from err

    async def get(
        self, kind: ResourceKind, namespace: str | None, name: str
    ) -> KubeObject:
        """Fetch an object."""
        doc = await self._call(Verb.GET, kind, namespace, name, "GET")
        return KubeObject.parse_doc(doc)

    async def create(
        self, kind: ResourceKind, namespace: str | None, obj: KubeObject
    ) -> KubeObject:
        """Create an object."""
        doc = await self._call(
            Verb.CREATE,
            kind,
            namespace,
            None,
            "POST",
            content=json.dumps(obj.to_doc()),
        )
        return KubeObject.parse_doc(doc)

    async def update(
        self, kind: ResourceKind, namespace: str | None, obj: KubeObject
    ) -> KubeObject:
        """Replace an object."""
        doc = await self._call(
            Verb.UPDATE,
            kind,
            namespace,
            obj.name,
            "PUT",
            content=json.dumps(obj.to_doc()),
        )
        return KubeObject.parse_doc(doc)

    async def patch(
        self,
        kind: ResourceKind,
        namespace: str | None,
        name: str,
        patch: dict[str, Any],
    ) -> KubeObject:
        """Apply a JSON merge patch to an object."""
        doc = await self._call(
            Verb.PATCH,
            kind,
            namespace,
            name,
            "PATCH",
            content=json.dumps(patch),
            headers={"Content-Type": MERGE_PATCH},
        )
        return KubeObject.parse_doc(doc)

    async def delete(
        self,
        kind: ResourceKind,
        namespace: str | None,
        name: str,
        *,
        cascade: bool = True,
    ) -> None:
        """Delete an object."""
        propagation = "Foreground" if cascade else "Orphan"
        await self._call(
            Verb.DELETE,
            kind,
            namespace,
            name,
            "DELETE",
            params={"propagationPolicy": propagation},
        )

    async def list(
        self,
        kind: ResourceKind,
        namespace: str | None,
        *,
        label_selector: str | None = None,
    ) -> list[KubeObject]:
        """List objects, optionally filtered by a label selector."""
        params = {"labelSelector": label_selector} if label_selector else {}
        doc = await self._call(Verb.LIST, kind, namespace, None, "GET", params=params)
        results = []
        for item in doc.get("items") or []:
            # List items omit apiVersion and kind.
            item.setdefault("apiVersion", kind.api_version)
            item.setdefault("kind", kind.kind)
            results.append(KubeObject.parse_doc(item))
        return results
