"""Configuration package.

Schemas are exported here; loading lives in ``config.manager``.
"""

from .schemas import (
    AWSProviderSettings,
    HibernationConfig,
    IBMCloudProviderSettings,
    LoggingConfig,
    validate_config,
)

__all__ = [
    "AWSProviderSettings",
    "HibernationConfig",
    "IBMCloudProviderSettings",
    "LoggingConfig",
    "validate_config",
]
