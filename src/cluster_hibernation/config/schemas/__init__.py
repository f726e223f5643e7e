"""Configuration schemas."""

from .app_schema import HibernationConfig, validate_config
from .logging_schema import LogDestination, LogFileConfig, LogFormat, LoggingConfig, LogLevel
from .provider_schema import AWSProviderSettings, IBMCloudProviderSettings

__all__ = [
    "AWSProviderSettings",
    "HibernationConfig",
    "IBMCloudProviderSettings",
    "LogDestination",
    "LogFileConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "validate_config",
]
