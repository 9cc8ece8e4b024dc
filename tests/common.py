"""Helpers for building test objects."""

from typing import Any

from kube_sync.manifest import KubeObject


def make_statefulset(
    name: str = "redis-1",
    namespace: str | None = "ns-a",
    match_labels: dict[str, str] | None = None,
    replicas: int = 3,
    resource_version: str | None = None,
) -> KubeObject:
    """Return a desired StatefulSet."""
    match_labels = match_labels or {"app": "redis", "redisfailovers-role": "replica"}
    return KubeObject(
        kind="StatefulSet",
        api_version="apps/v1",
        name=name,
        namespace=namespace,
        resource_version=resource_version,
        labels=dict(match_labels),
        body={
            "spec": {
                "replicas": replicas,
                "serviceName": name,
                "selector": {"matchLabels": dict(match_labels)},
                "template": {
                    "metadata": {"labels": dict(match_labels)},
                    "spec": {"containers": [{"name": "redis", "image": "redis:7"}]},
                },
            }
        },
    )


def make_pod(
    name: str,
    namespace: str = "ns-a",
    labels: dict[str, str] | None = None,
    owner: KubeObject | None = None,
    phase: str = "Running",
) -> KubeObject:
    """Return a pod, optionally owned by another object."""
    owner_references: list[dict[str, Any]] | None = None
    if owner is not None:
        owner_references = [
            {
                "apiVersion": owner.api_version,
                "kind": owner.kind,
                "name": owner.name,
                "uid": owner.uid,
            }
        ]
    return KubeObject(
        kind="Pod",
        api_version="v1",
        name=name,
        namespace=namespace,
        labels=labels,
        owner_references=owner_references,
        body={
            "spec": {"containers": [{"name": "redis", "image": "redis:7"}]},
            "status": {"phase": phase},
        },
    )
