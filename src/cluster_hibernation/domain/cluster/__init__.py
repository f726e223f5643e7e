"""Cluster identity value objects."""

from .value_objects import (
    AWSPlatform,
    ClusterIdentity,
    IBMCloudPlatform,
    PlatformSpec,
)

__all__ = ["AWSPlatform", "ClusterIdentity", "IBMCloudPlatform", "PlatformSpec"]
