"""Tests for the resource kind descriptors."""

import pytest

from kube_sync.exceptions import InputException
from kube_sync.kinds import (
    CLUSTER_ROLE,
    CONFIG_MAP,
    KINDS,
    POD_DISRUPTION_BUDGET,
    REDIS_FAILOVER,
    ROLE,
    STATEFUL_SET,
    ResourceKind,
    Verb,
    lookup,
)


def test_every_kind_supports_the_required_verbs() -> None:
    """Every managed kind can be fetched, created and updated."""
    for kind in KINDS.values():
        assert kind.supports(Verb.GET)
        assert kind.supports(Verb.CREATE)
        assert kind.supports(Verb.UPDATE)


def test_missing_required_verb() -> None:
    """A descriptor without the required verbs is rejected."""
    with pytest.raises(ValueError, match="must support UPDATE"):
        ResourceKind(
            "Widget", "v1", "widgets", verbs=frozenset({Verb.GET, Verb.CREATE})
        )


def test_declared_verbs() -> None:
    """Kinds only declare the verbs the operator uses on them."""
    assert CONFIG_MAP.verbs == frozenset(Verb)
    assert not POD_DISRUPTION_BUDGET.supports(Verb.LIST)
    assert POD_DISRUPTION_BUDGET.supports(Verb.DELETE)
    assert REDIS_FAILOVER.supports(Verb.LIST)
    assert not REDIS_FAILOVER.supports(Verb.DELETE)
    assert not ROLE.supports(Verb.LIST)
    assert not CLUSTER_ROLE.supports(Verb.DELETE)


def test_scoped_namespace() -> None:
    """Cluster scoped kinds ignore the namespace."""
    assert STATEFUL_SET.scoped_namespace("ns-a") == "ns-a"
    assert CLUSTER_ROLE.scoped_namespace("ns-a") is None


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("StatefulSet", STATEFUL_SET),
        ("statefulset", STATEFUL_SET),
        ("statefulsets", STATEFUL_SET),
        ("sts", STATEFUL_SET),
        ("cm", CONFIG_MAP),
        ("PDB", POD_DISRUPTION_BUDGET),
        ("rf", REDIS_FAILOVER),
        ("clusterroles", CLUSTER_ROLE),
    ],
)
def test_lookup(name: str, expected: ResourceKind) -> None:
    """Test resolving kind names, plurals and short names."""
    assert lookup(name) == expected


def test_lookup_unknown_kind() -> None:
    """Test resolving a kind that is not managed."""
    with pytest.raises(InputException, match="Unsupported resource kind: Ingress"):
        lookup("Ingress")
