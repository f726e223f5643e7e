"""AWS EC2 provider."""

from .aws_client import AWSClient
from .instance_manager import AWSInstanceManager
from .registration import AWS_INSTANCE_STATES, create_aws_actuator, register_aws_actuator

__all__ = [
    "AWSClient",
    "AWSInstanceManager",
    "AWS_INSTANCE_STATES",
    "create_aws_actuator",
    "register_aws_actuator",
]
