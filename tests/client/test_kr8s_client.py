"""Tests for the kr8s client."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
import json
from typing import Any

import httpx
import kr8s
import pytest

from kube_sync.client.kr8s_client import MERGE_PATCH, Kr8sClient, translate_error
from kube_sync.config import ClientConfig
from kube_sync.exceptions import ApiError, ErrorKind, SyncError
from kube_sync.kinds import CLUSTER_ROLE, POD, REDIS_FAILOVER, STATEFUL_SET, Verb
from kube_sync.service import Outcome, ResourceService

from tests.common import make_statefulset


@dataclass
class FakeApi:
    """Stand-in for a kr8s Api that records requests and replays responses."""

    responses: list[Any] = field(default_factory=list)
    requests: list[dict[str, Any]] = field(default_factory=list)

    @asynccontextmanager
    async def call_api(self, method: str, **kwargs: Any) -> AsyncIterator[httpx.Response]:
        self.requests.append({"method": method, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        yield httpx.Response(200, json=response)


def server_error(code: int, reason: str | None = None) -> kr8s.ServerError:
    status: dict[str, Any] = {"kind": "Status", "code": code, "message": "failed"}
    if reason:
        status["reason"] = reason
    return kr8s.ServerError(
        "failed", status=status, response=httpx.Response(code, json=status)
    )


@pytest.mark.parametrize(
    ("err", "expected"),
    [
        (kr8s.NotFoundError("not found"), ErrorKind.NOT_FOUND),
        (server_error(404, "NotFound"), ErrorKind.NOT_FOUND),
        (server_error(409, "AlreadyExists"), ErrorKind.ALREADY_EXISTS),
        (server_error(409, "Conflict"), ErrorKind.CONFLICT),
        (server_error(409), ErrorKind.CONFLICT),
        (server_error(401), ErrorKind.UNAUTHORIZED),
        (server_error(403, "Forbidden"), ErrorKind.FORBIDDEN),
        (server_error(422, "Invalid"), ErrorKind.INVALID),
        (server_error(400), ErrorKind.INVALID),
        (server_error(504, "Timeout"), ErrorKind.TIMEOUT),
        (server_error(503), ErrorKind.UNAVAILABLE),
        (server_error(500, "InternalError"), ErrorKind.UNKNOWN),
        (kr8s.APITimeoutError("timed out"), ErrorKind.TIMEOUT),
        (httpx.ConnectError("connection refused"), ErrorKind.UNAVAILABLE),
    ],
)
def test_translate_error(err: Exception, expected: ErrorKind) -> None:
    """Test classification of kr8s and transport errors."""
    translated = translate_error(err, Verb.GET, STATEFUL_SET, "ns-a", "redis-1")
    assert translated.error_kind == expected
    assert translated.kind == "StatefulSet"
    assert translated.namespace == "ns-a"
    assert translated.name == "redis-1"


def test_reason_wins_over_status_code() -> None:
    """A 403 status reported as not found is still not found."""
    err = server_error(403, "NotFound")
    assert translate_error(err, Verb.GET, POD, "ns-a", "p").error_kind == (
        ErrorKind.NOT_FOUND
    )


async def test_get() -> None:
    """Test fetching an object."""
    api = FakeApi(responses=[make_statefulset(resource_version="7").to_doc()])
    client = Kr8sClient(ClientConfig(request_timeout=5.0), api=api)

    obj = await client.get(STATEFUL_SET, "ns-a", "redis-1")

    assert obj.resource_version == "7"
    assert api.requests == [
        {
            "method": "GET",
            "version": "apps/v1",
            "namespace": "ns-a",
            "url": "statefulsets/redis-1",
            "timeout": 5.0,
        }
    ]


async def test_get_error() -> None:
    """Errors are translated and chained."""
    api = FakeApi(responses=[server_error(403, "Forbidden")])
    client = Kr8sClient(api=api)
    with pytest.raises(ApiError) as exc_info:
        await client.get(STATEFUL_SET, "ns-a", "redis-1")
    assert exc_info.value.error_kind == ErrorKind.FORBIDDEN
    assert isinstance(exc_info.value.__cause__, kr8s.ServerError)


async def test_create_and_update() -> None:
    """Create posts to the collection and update puts to the object."""
    desired = make_statefulset()
    stored = make_statefulset(resource_version="1")
    api = FakeApi(responses=[stored.to_doc(), stored.to_doc()])
    client = Kr8sClient(api=api)

    assert (await client.create(STATEFUL_SET, "ns-a", desired)).resource_version == "1"
    await client.update(STATEFUL_SET, "ns-a", stored)

    create, update = api.requests
    assert create["method"] == "POST"
    assert create["url"] == "statefulsets"
    assert json.loads(create["content"]) == desired.to_doc()
    assert update["method"] == "PUT"
    assert update["url"] == "statefulsets/redis-1"
    assert json.loads(update["content"])["metadata"]["resourceVersion"] == "1"


async def test_patch() -> None:
    """Patches are sent as JSON merge patches."""
    api = FakeApi(responses=[make_statefulset().to_doc()])
    client = Kr8sClient(api=api)
    await client.patch(STATEFUL_SET, "ns-a", "redis-1", {"spec": {"replicas": 1}})
    (request,) = api.requests
    assert request["method"] == "PATCH"
    assert request["headers"] == {"Content-Type": MERGE_PATCH}
    assert json.loads(request["content"]) == {"spec": {"replicas": 1}}


@pytest.mark.parametrize(
    ("cascade", "policy"), [(True, "Foreground"), (False, "Orphan")]
)
async def test_delete(cascade: bool, policy: str) -> None:
    """Test the propagation policy sent on delete."""
    api = FakeApi(responses=[{"kind": "Status", "status": "Success"}])
    client = Kr8sClient(api=api)
    await client.delete(STATEFUL_SET, "ns-a", "redis-1", cascade=cascade)
    (request,) = api.requests
    assert request["method"] == "DELETE"
    assert request["params"] == {"propagationPolicy": policy}


async def test_list() -> None:
    """List items are completed with the kind of the list."""
    api = FakeApi(
        responses=[
            {
                "kind": "RedisFailoverList",
                "apiVersion": "databases.spotahome.com/v1",
                "items": [
                    {"metadata": {"name": "rf-a", "namespace": "ns-a"}, "spec": {}},
                    {"metadata": {"name": "rf-b", "namespace": "ns-a"}, "spec": {}},
                ],
            }
        ]
    )
    client = Kr8sClient(api=api)
    failovers = await client.list(REDIS_FAILOVER, "ns-a", label_selector="a=b")
    assert [(rf.kind, rf.name) for rf in failovers] == [
        ("RedisFailover", "rf-a"),
        ("RedisFailover", "rf-b"),
    ]
    (request,) = api.requests
    assert request["url"] == "redisfailovers"
    assert request["version"] == "databases.spotahome.com/v1"
    assert request["params"] == {"labelSelector": "a=b"}


async def test_cluster_scoped_request() -> None:
    """Cluster scoped kinds are requested without a namespace."""
    api = FakeApi(
        responses=[
            {
                "kind": "ClusterRole",
                "apiVersion": "rbac.authorization.k8s.io/v1",
                "metadata": {"name": "reader"},
                "rules": [],
            }
        ]
    )
    client = Kr8sClient(api=api)
    role = await client.get(CLUSTER_ROLE, "ns-a", "reader")
    assert role.namespace is None
    assert api.requests[0]["namespace"] is None


async def test_timeout_is_a_fetch_failure() -> None:
    """A request timeout never leads to a create attempt."""
    api = FakeApi(
        responses=[
            kr8s.APITimeoutError("Timeout while waiting for the Kubernetes API server")
        ]
    )
    service = ResourceService(Kr8sClient(api=api), STATEFUL_SET)
    with pytest.raises(SyncError) as exc_info:
        await service.create_or_update("ns-a", make_statefulset())
    assert exc_info.value.outcome == Outcome.FETCH_FAILED
    assert exc_info.value.error_kind == ErrorKind.TIMEOUT
    assert [request["method"] for request in api.requests] == ["GET"]
