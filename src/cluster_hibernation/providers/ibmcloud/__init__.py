"""IBM Cloud VPC provider."""

from .ibm_client import IBMCloudClient
from .instance_manager import IBMCloudInstanceManager
from .registration import (
    IBMCLOUD_INSTANCE_STATES,
    create_ibmcloud_actuator,
    register_ibmcloud_actuator,
)

__all__ = [
    "IBMCLOUD_INSTANCE_STATES",
    "IBMCloudClient",
    "IBMCloudInstanceManager",
    "create_ibmcloud_actuator",
    "register_ibmcloud_actuator",
]
