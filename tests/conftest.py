from typing import List, Optional

import pytest

from cluster_hibernation.domain.cluster import AWSPlatform, ClusterIdentity, IBMCloudPlatform, PlatformSpec
from cluster_hibernation.domain.machine import Instance, StatusClassifier
from cluster_hibernation.infrastructure.call_context import CallContext
from cluster_hibernation.providers.base import HibernationActuator
from cluster_hibernation.providers.ibmcloud.registration import IBMCLOUD_INSTANCE_STATES


def make_instance(name: str, status: Optional[str], instance_id: Optional[str] = None) -> Instance:
    return Instance(name=name, instance_id=instance_id or f"id-{name}", status=status)


class FakeProviderCapability:
    """Records mutating calls instead of talking to a cloud."""

    def __init__(self, instances: Optional[List[Instance]] = None, error: Optional[Exception] = None):
        self.instances = list(instances or [])
        self.error = error
        self.stop_calls: List[List[str]] = []
        self.start_calls: List[List[str]] = []
        self.list_calls = 0

    def list_cluster_instances(self, ctx, cluster):
        self.list_calls += 1
        return list(self.instances)

    def stop_instances(self, ctx, instances):
        self.stop_calls.append([i.name for i in instances])
        if self.error:
            raise self.error

    def start_instances(self, ctx, instances):
        self.start_calls.append([i.name for i in instances])
        if self.error:
            raise self.error

    @property
    def mutation_count(self) -> int:
        return len(self.stop_calls) + len(self.start_calls)


def make_actuator(capability, name: str = "fake", can_handle=None) -> HibernationActuator:
    return HibernationActuator(
        name=name,
        can_handle=can_handle or (lambda cluster: True),
        capability_factory=lambda cluster, ctx: capability,
        classifier=StatusClassifier(name, IBMCLOUD_INSTANCE_STATES),
    )


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS Credentials for moto."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def ibm_cluster() -> ClusterIdentity:
    return ClusterIdentity(
        name="ibm-cluster",
        namespace="clusters",
        infra_id="ibm-cluster-x7k2p",
        platform=PlatformSpec(
            ibmcloud=IBMCloudPlatform(region="us-south", credentials_secret_ref="ibm-creds")
        ),
    )


@pytest.fixture
def aws_cluster() -> ClusterIdentity:
    return ClusterIdentity(
        name="aws-cluster",
        namespace="clusters",
        infra_id="aws-cluster-q9d4m",
        platform=PlatformSpec(aws=AWSPlatform(region="us-east-1")),
    )


@pytest.fixture
def ctx() -> CallContext:
    return CallContext(per_call_timeout=5.0)
