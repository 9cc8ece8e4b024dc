"""Facade bundling every per-kind service behind one object."""

from dataclasses import dataclass, fields
import logging

from kube_sync.client import InstrumentedClient, KubeClient
from kube_sync.config import ClientConfig
from kube_sync.exceptions import InputException
from kube_sync.kinds import (
    CONFIG_MAP,
    POD_DISRUPTION_BUDGET,
    REDIS_FAILOVER,
    SECRET,
    SERVICE,
    ResourceKind,
)
from kube_sync.metrics import DummyRecorder, MetricsRecorder

from .services import (
    DeploymentService,
    PodService,
    RBACService,
    StatefulSetService,
)
from .synchronizer import ResourceService

__all__ = ["Services"]

_LOGGER = logging.getLogger(__name__)


@dataclass
class Services:
    """All services the operator uses to manage objects in the cluster."""

    client: KubeClient
    config_map: ResourceService
    secret: ResourceService
    pod: PodService
    pod_disruption_budget: ResourceService
    redis_failover: ResourceService
    service: ResourceService
    rbac: RBACService
    deployment: DeploymentService
    stateful_set: StatefulSetService

    @classmethod
    def create(
        cls, client: KubeClient, recorder: MetricsRecorder | None = None
    ) -> "Services":
        """Build the services on top of a client.

        Every call made by any service is reported to the recorder.
        """
        client = InstrumentedClient(client, recorder or DummyRecorder())
        return cls(
            client=client,
            config_map=ResourceService(client, CONFIG_MAP),
            secret=ResourceService(client, SECRET),
            pod=PodService(client),
            pod_disruption_budget=ResourceService(client, POD_DISRUPTION_BUDGET),
            redis_failover=ResourceService(client, REDIS_FAILOVER),
            service=ResourceService(client, SERVICE),
            rbac=RBACService(client),
            deployment=DeploymentService(client),
            stateful_set=StatefulSetService(client),
        )

    @classmethod
    def from_config(
        cls, config: ClientConfig, recorder: MetricsRecorder | None = None
    ) -> "Services":
        """Build the services on top of a kr8s client for a real cluster."""
        from kube_sync.client.kr8s_client import Kr8sClient

        return cls.create(Kr8sClient(config), recorder)

    def for_kind(self, kind: ResourceKind) -> ResourceService:
        """Return the service that manages the given kind."""
        candidates = [
            self.rbac.roles,
            self.rbac.role_bindings,
            self.rbac.cluster_roles,
            self.rbac.service_accounts,
        ]
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, ResourceService):
                candidates.append(value)
        for service in candidates:
            if service.kind.kind == kind.kind:
                return service
        raise InputException(f"No service manages kind {kind.kind}")

    async def close(self) -> None:
        """Release the underlying client."""
        _LOGGER.debug("Closing services")
        await self.client.close()
