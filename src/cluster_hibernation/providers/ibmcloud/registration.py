"""IBM Cloud Registration - register the IBM Cloud actuator with the actuator registry."""
from typing import Callable, Optional

from cluster_hibernation.config.schemas import IBMCloudProviderSettings
from cluster_hibernation.domain.cluster import ClusterIdentity
from cluster_hibernation.domain.core.exceptions import CredentialsError
from cluster_hibernation.domain.machine import CanonicalState, StatusClassifier
from cluster_hibernation.infrastructure.call_context import CallContext
from cluster_hibernation.infrastructure.interfaces.credentials import CredentialsSource
from cluster_hibernation.infrastructure.logging.logger import get_logger
from cluster_hibernation.infrastructure.registry import ActuatorRegistry
from cluster_hibernation.providers.base import CapabilityFactory, HibernationActuator
from cluster_hibernation.providers.ibmcloud.ibm_client import IBMCloudClient
from cluster_hibernation.providers.ibmcloud.instance_manager import IBMCloudInstanceManager

ACTUATOR_NAME = "ibmcloud"

# States described in the IBM Cloud VPC API docs (get instance).
IBMCLOUD_INSTANCE_STATES = {
    "running": CanonicalState.RUNNING,
    "pending": CanonicalState.PENDING,
    "starting": CanonicalState.PENDING,
    "restarting": CanonicalState.PENDING,
    "stopping": CanonicalState.STOPPING,
    "stopped": CanonicalState.STOPPED,
}

ClientFactory = Callable[[ClusterIdentity, CallContext], IBMCloudClient]

logger = get_logger(__name__)


def can_handle_ibmcloud(cluster: ClusterIdentity) -> bool:
    """Return True if the cluster runs on IBM Cloud."""
    return cluster.platform.ibmcloud is not None


def create_ibmcloud_client_factory(credentials: CredentialsSource,
                                   settings: Optional[IBMCloudProviderSettings] = None) -> ClientFactory:
    """Build clients from the cluster's credentials secret."""

    def _create_client(cluster: ClusterIdentity, ctx: CallContext) -> IBMCloudClient:
        platform = cluster.platform.ibmcloud
        if platform is None:
            raise CredentialsError(f"cluster {cluster.name!r} has no IBM Cloud platform")
        secret_name = platform.credentials_secret_ref
        try:
            secret = credentials.get_secret(cluster.namespace, secret_name)
        except CredentialsError as e:
            logger.error("failed to fetch IBM Cloud credentials secret", cluster=cluster.name, error=str(e))
            raise
        return IBMCloudClient.from_secret(secret, secret_name, platform.region, settings)

    return _create_client


def create_ibmcloud_capability_factory(client_factory: ClientFactory) -> CapabilityFactory:
    def _create_capability(cluster: ClusterIdentity, ctx: CallContext) -> IBMCloudInstanceManager:
        return IBMCloudInstanceManager(client_factory(cluster, ctx))

    return _create_capability


def create_ibmcloud_actuator(credentials: Optional[CredentialsSource] = None,
                             settings: Optional[IBMCloudProviderSettings] = None,
                             client_factory: Optional[ClientFactory] = None) -> HibernationActuator:
    """
    Create the IBM Cloud hibernation actuator.

    Args:
        credentials: Source of the clusters' credentials secrets
        settings: IBM Cloud provider settings
        client_factory: Overrides client construction, used by tests

    Returns:
        Configured HibernationActuator
    """
    if client_factory is None:
        if credentials is None:
            raise ValueError("Either credentials or client_factory must be provided")
        client_factory = create_ibmcloud_client_factory(credentials, settings)

    return HibernationActuator(
        name=ACTUATOR_NAME,
        can_handle=can_handle_ibmcloud,
        capability_factory=create_ibmcloud_capability_factory(client_factory),
        classifier=StatusClassifier(ACTUATOR_NAME, IBMCLOUD_INSTANCE_STATES),
    )


def register_ibmcloud_actuator(registry: ActuatorRegistry,
                               credentials: CredentialsSource,
                               settings: Optional[IBMCloudProviderSettings] = None) -> HibernationActuator:
    """Register the IBM Cloud actuator with ``registry``."""
    actuator = create_ibmcloud_actuator(credentials, settings)
    registry.register(actuator)
    return actuator
