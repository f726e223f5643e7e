"""Main application configuration schema."""
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from .logging_schema import LoggingConfig
from .provider_schema import AWSProviderSettings, IBMCloudProviderSettings


class HibernationConfig(BaseModel):
    """Application configuration."""

    version: str = Field("1.0.0", description="Configuration version")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    provider_call_timeout_seconds: float = Field(
        60.0, description="Upper bound for a single provider API call"
    )
    aws: AWSProviderSettings = Field(default_factory=AWSProviderSettings)
    ibmcloud: IBMCloudProviderSettings = Field(default_factory=IBMCloudProviderSettings)

    @field_validator("provider_call_timeout_seconds")
    @classmethod
    def validate_call_timeout(cls, v: float) -> float:
        """Validate provider call timeout."""
        if v <= 0:
            raise ValueError("Provider call timeout must be positive")
        return v


def validate_config(config: Dict[str, Any]) -> HibernationConfig:
    """
    Validate configuration.

    Args:
        config: Configuration to validate

    Returns:
        Validated configuration

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    return HibernationConfig(**config)
