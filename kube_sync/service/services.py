"""Per-kind services built on top of the generic ResourceService.

Kinds without any kind specific operation are served directly by a
`ResourceService` bound to their descriptor. The classes here add the derived
reads and writes that only make sense for one kind.
"""

import logging

from kube_sync.client import KubeClient
from kube_sync.exceptions import InputException
from kube_sync.kinds import (
    CLUSTER_ROLE,
    DEPLOYMENT,
    POD,
    ROLE,
    ROLE_BINDING,
    SERVICE_ACCOUNT,
    STATEFUL_SET,
    ResourceKind,
)
from kube_sync.manifest import KubeObject, build_label_selector

from .synchronizer import Outcome, ResourceService

__all__ = [
    "PodService",
    "WorkloadService",
    "StatefulSetService",
    "DeploymentService",
    "RBACService",
]

_LOGGER = logging.getLogger(__name__)


class PodService(ResourceService):
    """Service for managing pods."""

    def __init__(self, client: KubeClient) -> None:
        super().__init__(client, POD)

    async def update_pod_labels(
        self, namespace: str, name: str, labels: dict[str, str]
    ) -> KubeObject:
        """Merge the given labels into the labels of the pod."""
        _LOGGER.debug("Updating labels of pod %s/%s: %s", namespace, name, labels)
        return await self.patch(namespace, name, {"metadata": {"labels": labels}})


class WorkloadService(ResourceService):
    """Service for a kind that governs pods through a label selector."""

    def __init__(self, client: KubeClient, kind: ResourceKind) -> None:
        super().__init__(client, kind)
        self._pods = ResourceService(client, POD)

    async def get_pods(self, namespace: str, name: str) -> list[KubeObject]:
        """Return the pods selected by the workload's match labels."""
        workload = await self.get(namespace, name)
        if not (match_labels := workload.match_labels):
            raise InputException(
                f"{workload.resource_id} has no spec.selector.matchLabels"
            )
        return await self._pods.list(
            namespace, label_selector=build_label_selector(match_labels)
        )


class StatefulSetService(WorkloadService):
    """Service for managing statefulsets."""

    def __init__(self, client: KubeClient) -> None:
        super().__init__(client, STATEFUL_SET)

    async def get_statefulset_pods(
        self, namespace: str, name: str
    ) -> list[KubeObject]:
        """Return the pods managed by the statefulset."""
        return await self.get_pods(namespace, name)


class DeploymentService(WorkloadService):
    """Service for managing deployments."""

    def __init__(self, client: KubeClient) -> None:
        super().__init__(client, DEPLOYMENT)

    async def get_deployment_pods(
        self, namespace: str, name: str
    ) -> list[KubeObject]:
        """Return the pods managed by the deployment."""
        return await self.get_pods(namespace, name)


class RBACService:
    """Service for managing the RBAC objects used by the operator.

    Roles, role bindings and service accounts are namespaced and fully
    managed. Cluster roles are only read, they are installed alongside the
    operator itself.
    """

    def __init__(self, client: KubeClient) -> None:
        self.roles = ResourceService(client, ROLE)
        self.role_bindings = ResourceService(client, ROLE_BINDING)
        self.cluster_roles = ResourceService(client, CLUSTER_ROLE)
        self.service_accounts = ResourceService(client, SERVICE_ACCOUNT)

    async def get_cluster_role(self, name: str) -> KubeObject:
        return await self.cluster_roles.get(None, name)

    async def get_role(self, namespace: str, name: str) -> KubeObject:
        return await self.roles.get(namespace, name)

    async def get_role_binding(self, namespace: str, name: str) -> KubeObject:
        return await self.role_bindings.get(namespace, name)

    async def create_role(self, namespace: str, role: KubeObject) -> KubeObject:
        return await self.roles.create(namespace, role)

    async def update_role(self, namespace: str, role: KubeObject) -> KubeObject:
        return await self.roles.update(namespace, role)

    async def create_or_update_role(
        self, namespace: str, role: KubeObject
    ) -> Outcome:
        return await self.roles.create_or_update(namespace, role)

    async def delete_role(self, namespace: str, name: str) -> None:
        await self.roles.delete(namespace, name)

    async def create_role_binding(
        self, namespace: str, binding: KubeObject
    ) -> KubeObject:
        return await self.role_bindings.create(namespace, binding)

    async def update_role_binding(
        self, namespace: str, binding: KubeObject
    ) -> KubeObject:
        return await self.role_bindings.update(namespace, binding)

    async def create_or_update_role_binding(
        self, namespace: str, binding: KubeObject
    ) -> Outcome:
        """Create or update a role binding.

        The roleRef of a binding is immutable, so a binding pointing to a
        different role is rejected by the server as INVALID and surfaces as
        an UPDATE_FAILED error.
        """
        return await self.role_bindings.create_or_update(namespace, binding)

    async def delete_role_binding(self, namespace: str, name: str) -> None:
        await self.role_bindings.delete(namespace, name)

    async def create_or_update_service_account(
        self, namespace: str, account: KubeObject
    ) -> Outcome:
        return await self.service_accounts.create_or_update(namespace, account)
