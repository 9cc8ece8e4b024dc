"""Shared test fixtures for kube-sync."""

from dataclasses import dataclass, field

import pytest

from kube_sync.client import InMemoryClient
from kube_sync.metrics import MetricsRecorder
from kube_sync.service import Services


@dataclass
class FakeRecorder(MetricsRecorder):
    """Recorder that keeps every operation in memory."""

    records: list[tuple[str, str, str, str, str, str]] = field(default_factory=list)

    def record_k8s_operation(
        self,
        namespace: str,
        kind: str,
        object_name: str,
        operation: str,
        status: str,
        err: str,
    ) -> None:
        self.records.append((namespace, kind, object_name, operation, status, err))


@pytest.fixture
def client() -> InMemoryClient:
    """Create an in-memory client for testing."""
    return InMemoryClient()


@pytest.fixture
def recorder() -> FakeRecorder:
    """Create a recorder that keeps operations in memory."""
    return FakeRecorder()


@pytest.fixture
def services(client: InMemoryClient, recorder: FakeRecorder) -> Services:
    """Create the services on top of the in-memory client."""
    return Services.create(client, recorder)
