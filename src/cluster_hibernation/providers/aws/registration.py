"""AWS Provider Registration - register the AWS actuator with the actuator registry."""
from typing import Callable, Optional

from cluster_hibernation.config.schemas import AWSProviderSettings
from cluster_hibernation.domain.cluster import ClusterIdentity
from cluster_hibernation.domain.core.exceptions import CredentialsError
from cluster_hibernation.domain.machine import CanonicalState, StatusClassifier
from cluster_hibernation.infrastructure.call_context import CallContext
from cluster_hibernation.infrastructure.interfaces.credentials import CredentialsSource
from cluster_hibernation.infrastructure.logging.logger import get_logger
from cluster_hibernation.infrastructure.registry import ActuatorRegistry
from cluster_hibernation.providers.aws.aws_client import AWSClient
from cluster_hibernation.providers.aws.instance_manager import AWSInstanceManager
from cluster_hibernation.providers.base import CapabilityFactory, HibernationActuator

ACTUATOR_NAME = "aws"

# EC2 instance-state names; shutting-down and terminated are filtered out when listing.
AWS_INSTANCE_STATES = {
    "running": CanonicalState.RUNNING,
    "pending": CanonicalState.PENDING,
    "stopping": CanonicalState.STOPPING,
    "stopped": CanonicalState.STOPPED,
}

ClientFactory = Callable[[ClusterIdentity, CallContext], AWSClient]

logger = get_logger(__name__)


def can_handle_aws(cluster: ClusterIdentity) -> bool:
    """Return True if the cluster runs on AWS."""
    return cluster.platform.aws is not None


def create_aws_client_factory(credentials: Optional[CredentialsSource] = None,
                              settings: Optional[AWSProviderSettings] = None) -> ClientFactory:
    """
    Build EC2 clients for a cluster.

    Clusters without a credentials secret reference use the default boto3
    credential chain.
    """

    def _create_client(cluster: ClusterIdentity, ctx: CallContext) -> AWSClient:
        platform = cluster.platform.aws
        if platform is None:
            raise CredentialsError(f"cluster {cluster.name!r} has no AWS platform")
        if not platform.credentials_secret_ref:
            return AWSClient(platform.region, settings, read_timeout=ctx.call_timeout())
        if credentials is None:
            raise CredentialsError(
                f"cluster {cluster.name!r} references secret {platform.credentials_secret_ref!r} "
                "but no credentials source is configured"
            )
        try:
            secret = credentials.get_secret(cluster.namespace, platform.credentials_secret_ref)
        except CredentialsError as e:
            logger.error("failed to fetch AWS credentials secret", cluster=cluster.name, error=str(e))
            raise
        return AWSClient.from_secret(platform.region, secret, platform.credentials_secret_ref,
                                     settings, read_timeout=ctx.call_timeout())

    return _create_client


def create_aws_capability_factory(client_factory: ClientFactory) -> CapabilityFactory:
    def _create_capability(cluster: ClusterIdentity, ctx: CallContext) -> AWSInstanceManager:
        return AWSInstanceManager(client_factory(cluster, ctx))

    return _create_capability


def create_aws_actuator(credentials: Optional[CredentialsSource] = None,
                        settings: Optional[AWSProviderSettings] = None,
                        client_factory: Optional[ClientFactory] = None) -> HibernationActuator:
    """
    Create the AWS hibernation actuator.

    Args:
        credentials: Source of the clusters' credentials secrets
        settings: AWS provider settings
        client_factory: Overrides client construction, used by tests

    Returns:
        Configured HibernationActuator
    """
    if client_factory is None:
        client_factory = create_aws_client_factory(credentials, settings)

    return HibernationActuator(
        name=ACTUATOR_NAME,
        can_handle=can_handle_aws,
        capability_factory=create_aws_capability_factory(client_factory),
        classifier=StatusClassifier(ACTUATOR_NAME, AWS_INSTANCE_STATES),
    )


def register_aws_actuator(registry: ActuatorRegistry,
                          credentials: Optional[CredentialsSource] = None,
                          settings: Optional[AWSProviderSettings] = None) -> HibernationActuator:
    """Register the AWS actuator with ``registry``."""
    actuator = create_aws_actuator(credentials, settings)
    registry.register(actuator)
    return actuator
