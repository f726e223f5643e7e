"""Build the actuator registry at process start-up."""
from typing import Optional

from cluster_hibernation.application.hibernation import HibernationDriver
from cluster_hibernation.config.schemas import HibernationConfig
from cluster_hibernation.infrastructure.interfaces.credentials import CredentialsSource
from cluster_hibernation.infrastructure.logging.logger import get_logger
from cluster_hibernation.infrastructure.registry import ActuatorRegistry
from cluster_hibernation.providers.aws.registration import register_aws_actuator
from cluster_hibernation.providers.ibmcloud.registration import register_ibmcloud_actuator

logger = get_logger(__name__)


def create_actuator_registry(credentials: CredentialsSource,
                             config: Optional[HibernationConfig] = None) -> ActuatorRegistry:
    """
    Register every enabled provider actuator and freeze the registry.

    Args:
        credentials: Source of the clusters' credentials secrets
        config: Application configuration, defaults when omitted

    Returns:
        Frozen ActuatorRegistry
    """
    config = config or HibernationConfig()
    registry = ActuatorRegistry()

    if config.aws.enabled:
        register_aws_actuator(registry, credentials, config.aws)
    if config.ibmcloud.enabled:
        register_ibmcloud_actuator(registry, credentials, config.ibmcloud)

    registry.freeze()
    logger.info("Actuator registry initialized", actuators=registry.names())
    return registry


def create_hibernation_driver(credentials: CredentialsSource,
                              config: Optional[HibernationConfig] = None) -> HibernationDriver:
    """Create a driver over a freshly built registry."""
    config = config or HibernationConfig()
    registry = create_actuator_registry(credentials, config)
    return HibernationDriver(registry, call_timeout=config.provider_call_timeout_seconds)
