"""Static descriptors for the resource kinds managed by the operator.

Each descriptor maps a kind name onto the coordinates needed to reach it on
the API server and declares which verbs the operator uses for it.
"""

from dataclasses import dataclass
from enum import StrEnum

from .exceptions import InputException

__all__ = [
    "Verb",
    "ResourceKind",
    "CONFIG_MAP",
    "SECRET",
    "POD",
    "POD_DISRUPTION_BUDGET",
    "REDIS_FAILOVER",
    "SERVICE",
    "SERVICE_ACCOUNT",
    "ROLE",
    "ROLE_BINDING",
    "CLUSTER_ROLE",
    "DEPLOYMENT",
    "STATEFUL_SET",
    "KINDS",
    "lookup",
]


class Verb(StrEnum):
    """An operation performed against the API server."""

    GET = "GET"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    PATCH = "PATCH"
    DELETE = "DELETE"
    LIST = "LIST"


REQUIRED_VERBS = frozenset({Verb.GET, Verb.CREATE, Verb.UPDATE})
ALL_VERBS = frozenset(Verb)


@dataclass(frozen=True)
class ResourceKind:
    """Descriptor for one kind of kubernetes resource."""

    kind: str
    """The kind name, e.g. StatefulSet."""

    api_version: str
    """The group/version the kind is served from, e.g. apps/v1."""

    plural: str
    """The lower case plural resource name used in API paths."""

    namespaced: bool = True
    """False for cluster scoped kinds."""

    verbs: frozenset[Verb] = ALL_VERBS
    """The verbs the operator performs on this kind."""

    def __post_init__(self) -> None:
        if not REQUIRED_VERBS <= self.verbs:
            missing = ", ".join(sorted(REQUIRED_VERBS - self.verbs))
            raise ValueError(f"Resource kind {self.kind} must support {missing}")

    def supports(self, verb: Verb) -> bool:
        """Return True if the verb is used for this kind."""
        return verb in self.verbs

    def scoped_namespace(self, namespace: str | None) -> str | None:
        """Return the namespace to use in requests for this kind."""
        return namespace if self.namespaced else None


CONFIG_MAP = ResourceKind("ConfigMap", "v1", "configmaps")
SECRET = ResourceKind("Secret", "v1", "secrets")
POD = ResourceKind("Pod", "v1", "pods")
SERVICE = ResourceKind("Service", "v1", "services")
SERVICE_ACCOUNT = ResourceKind(
    "ServiceAccount",
    "v1",
    "serviceaccounts",
    verbs=frozenset({Verb.GET, Verb.CREATE, Verb.UPDATE, Verb.DELETE}),
)
POD_DISRUPTION_BUDGET = ResourceKind(
    "PodDisruptionBudget",
    "policy/v1",
    "poddisruptionbudgets",
    verbs=frozenset({Verb.GET, Verb.CREATE, Verb.UPDATE, Verb.DELETE}),
)
REDIS_FAILOVER = ResourceKind(
    "RedisFailover",
    "databases.spotahome.com/v1",
    "redisfailovers",
    verbs=frozenset({Verb.GET, Verb.CREATE, Verb.UPDATE, Verb.LIST}),
)
# RBAC objects are never enumerated by the operator.
ROLE = ResourceKind(
    "Role",
    "rbac.authorization.k8s.io/v1",
    "roles",
    verbs=frozenset({Verb.GET, Verb.CREATE, Verb.UPDATE, Verb.DELETE}),
)
ROLE_BINDING = ResourceKind(
    "RoleBinding",
    "rbac.authorization.k8s.io/v1",
    "rolebindings",
    verbs=frozenset({Verb.GET, Verb.CREATE, Verb.UPDATE, Verb.DELETE}),
)
CLUSTER_ROLE = ResourceKind(
    "ClusterRole",
    "rbac.authorization.k8s.io/v1",
    "clusterroles",
    namespaced=False,
    verbs=REQUIRED_VERBS,
)
DEPLOYMENT = ResourceKind("Deployment", "apps/v1", "deployments")
STATEFUL_SET = ResourceKind("StatefulSet", "apps/v1", "statefulsets")

KINDS: dict[str, ResourceKind] = {
    desc.kind: desc
    for desc in (
        CONFIG_MAP,
        SECRET,
        POD,
        POD_DISRUPTION_BUDGET,
        REDIS_FAILOVER,
        SERVICE,
        SERVICE_ACCOUNT,
        ROLE,
        ROLE_BINDING,
        CLUSTER_ROLE,
        DEPLOYMENT,
        STATEFUL_SET,
    )
}

# Short names accepted on the command line, in addition to kind names.
_ALIASES: dict[str, str] = {
    "cm": "ConfigMap",
    "po": "Pod",
    "pdb": "PodDisruptionBudget",
    "rf": "RedisFailover",
    "svc": "Service",
    "sa": "ServiceAccount",
    "deploy": "Deployment",
    "sts": "StatefulSet",
}


def lookup(name: str) -> ResourceKind:
    """Return the descriptor for a kind name, plural or short name."""
    name = _ALIASES.get(name.lower(), name)
    for desc in KINDS.values():
        if name in (desc.kind, desc.plural) or name.lower() == desc.kind.lower():
            return desc
    raise InputException(f"Unsupported resource kind: {name}")
