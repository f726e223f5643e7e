"""Provider configuration schemas."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AWSProviderSettings(BaseModel):
    """Settings for the AWS EC2 hibernation actuator."""

    enabled: bool = Field(True, description="Register the AWS actuator")
    endpoint_url: Optional[str] = Field(None, description="Override EC2 endpoint (testing, private endpoints)")
    request_retry_attempts: int = Field(
        0, description="botocore standard-mode retries after the first attempt; the caller owns retrying"
    )
    connection_timeout_ms: int = Field(10000, description="Connection timeout in milliseconds")

    @field_validator("request_retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry attempts."""
        if v < 0:
            raise ValueError("Retry attempts cannot be negative")
        return v

    @field_validator("connection_timeout_ms")
    @classmethod
    def validate_connection_timeout(cls, v: int) -> int:
        """Validate connection timeout."""
        if v <= 0:
            raise ValueError("Connection timeout must be positive")
        return v


class IBMCloudProviderSettings(BaseModel):
    """Settings for the IBM Cloud VPC hibernation actuator."""

    enabled: bool = Field(True, description="Register the IBM Cloud actuator")
    service_url_template: str = Field(
        "https://{region}.iaas.cloud.ibm.com/v1",
        description="Regional VPC endpoint, formatted with the cluster region",
    )
    iam_url: Optional[str] = Field(None, description="Override the IAM token endpoint")
    page_limit: int = Field(50, description="Page size when listing instances")

    @field_validator("service_url_template")
    @classmethod
    def validate_service_url_template(cls, v: str) -> str:
        """Validate that the template can be formatted with a region."""
        if "{region}" not in v:
            raise ValueError("service_url_template must contain '{region}'")
        return v

    @field_validator("page_limit")
    @classmethod
    def validate_page_limit(cls, v: int) -> int:
        """Validate page limit."""
        if not 1 <= v <= 100:
            raise ValueError("page_limit must be between 1 and 100")
        return v
