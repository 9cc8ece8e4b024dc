"""
The service module holds the per-kind services that reconcile objects.

- `ResourceService` implements get, create, update, create-or-update, delete
  and list for one resource kind.
- The per-kind services add derived operations, e.g. listing the pods of a
  StatefulSet.
- `Services` bundles all of them on top of one instrumented client.
"""

from .synchronizer import Outcome, ResourceService
from .services import (
    DeploymentService,
    PodService,
    RBACService,
    StatefulSetService,
    WorkloadService,
)
from .facade import Services

__all__ = [
    "Outcome",
    "ResourceService",
    "PodService",
    "WorkloadService",
    "StatefulSetService",
    "DeploymentService",
    "RBACService",
    "Services",
]
