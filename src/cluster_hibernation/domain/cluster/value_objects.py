"""Cluster identity passed to every actuator and provider call."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class AWSPlatform(BaseModel):
    """AWS scoping for a cluster."""
    model_config = ConfigDict(frozen=True)

    region: str
    credentials_secret_ref: Optional[str] = Field(
        None, description="Secret holding aws_access_key_id / aws_secret_access_key"
    )


class IBMCloudPlatform(BaseModel):
    """IBM Cloud scoping for a cluster."""
    model_config = ConfigDict(frozen=True)

    region: str
    credentials_secret_ref: str = Field(..., description="Secret holding ibmcloud_api_key")
    resource_group: Optional[str] = None


class PlatformSpec(BaseModel):
    """Cloud platform of a cluster. At most one block is set."""
    model_config = ConfigDict(frozen=True)

    aws: Optional[AWSPlatform] = None
    ibmcloud: Optional[IBMCloudPlatform] = None

    @model_validator(mode="after")
    def validate_single_platform(self) -> "PlatformSpec":
        """Reject specs naming more than one platform."""
        configured = [name for name in ("aws", "ibmcloud") if getattr(self, name) is not None]
        if len(configured) > 1:
            raise ValueError(f"Only one platform may be configured, got {configured}")
        return self


class ClusterIdentity(BaseModel):
    """
    Opaque key identifying a managed cluster.

    The hibernation core never inspects this beyond forwarding it to the
    provider adapters, which use ``infra_id`` and their platform block to
    scope instance lookups.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str = "default"
    infra_id: str
    platform: PlatformSpec = Field(default_factory=PlatformSpec)

    @field_validator("infra_id")
    @classmethod
    def validate_infra_id(cls, v: str) -> str:
        """Validate infrastructure ID."""
        if not v or not v.strip():
            raise ValueError("Infrastructure ID cannot be empty")
        return v.strip()
