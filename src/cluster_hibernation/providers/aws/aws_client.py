import logging
from typing import Any, Dict, List, Mapping, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, ConnectTimeoutError, ReadTimeoutError

from cluster_hibernation.config.schemas import AWSProviderSettings
from cluster_hibernation.domain.core.exceptions import (
    DeadlineExceededError,
    ProviderError,
    ResourceNotFoundError,
)
from cluster_hibernation.infrastructure.call_context import CallContext
from cluster_hibernation.infrastructure.interfaces.credentials import require_secret_key

AWS_ACCESS_KEY_ID_SECRET_KEY = "aws_access_key_id"
AWS_SECRET_ACCESS_KEY_SECRET_KEY = "aws_secret_access_key"

# Instances in any other state are gone for good and no longer belong to the cluster.
HIBERNATABLE_INSTANCE_STATES = ["pending", "running", "stopping", "stopped"]

_NOT_FOUND_CODES = {"InvalidInstanceID.NotFound", "InvalidInstanceID.Malformed"}

logger = logging.getLogger(__name__)


def cluster_owned_tag(infra_id: str) -> str:
    return f"kubernetes.io/cluster/{infra_id}"


class AWSClient:
    """
    EC2 client management for hibernation.
    Handles client creation and the EC2 calls the actuator needs.
    """

    def __init__(self,
                 region_name: str,
                 settings: Optional[AWSProviderSettings] = None,
                 credentials: Optional[Mapping[str, str]] = None,
                 read_timeout: float = 60.0):
        """
        Initialize AWS client with configuration.

        Args:
            region_name: AWS region name
            settings: AWS provider settings
            credentials: Optional access key pair; the default boto3
                credential chain is used when omitted
            read_timeout: Read timeout for each EC2 call in seconds
        """
        settings = settings or AWSProviderSettings()
        self.region_name = region_name
        self.config = Config(
            region_name=region_name,
            retries={
                'total_max_attempts': settings.request_retry_attempts + 1,
                'mode': 'standard'
            },
            connect_timeout=settings.connection_timeout_ms / 1000,
            read_timeout=read_timeout,
        )

        session_kwargs: Dict[str, Any] = {'region_name': region_name}
        if credentials:
            session_kwargs['aws_access_key_id'] = credentials[AWS_ACCESS_KEY_ID_SECRET_KEY]
            session_kwargs['aws_secret_access_key'] = credentials[AWS_SECRET_ACCESS_KEY_SECRET_KEY]
        self._session = boto3.session.Session(**session_kwargs)
        self._endpoint_url = settings.endpoint_url
        self.ec2_client = self._create_ec2_client(self.config)

    def _create_ec2_client(self, config: Config):
        client_kwargs: Dict[str, Any] = {'config': config}
        if self._endpoint_url:
            client_kwargs['endpoint_url'] = self._endpoint_url
        return self._session.client('ec2', **client_kwargs)

    def _client_for(self, ctx: CallContext, step: str):
        """Return an EC2 client whose read timeout fits the context's remaining time."""
        ctx.check(step)
        timeout = ctx.call_timeout()
        if timeout >= self.config.read_timeout:
            return self.ec2_client
        return self._create_ec2_client(self.config.merge(Config(read_timeout=timeout)))

    @classmethod
    def from_secret(cls,
                    region_name: str,
                    secret: Mapping[str, str],
                    secret_name: str,
                    settings: Optional[AWSProviderSettings] = None,
                    read_timeout: float = 60.0) -> 'AWSClient':
        """
        Create a client from a credentials secret.

        Raises:
            CredentialsError: If a key of the access key pair is missing
        """
        credentials = {
            key: require_secret_key(secret, key, secret_name)
            for key in (AWS_ACCESS_KEY_ID_SECRET_KEY, AWS_SECRET_ACCESS_KEY_SECRET_KEY)
        }
        return cls(region_name, settings, credentials, read_timeout)

    def describe_cluster_instances(self, ctx: CallContext, infra_id: str) -> List[Dict[str, Any]]:
        """Describe the instances tagged as owned by the cluster."""
        step = "failed to describe instances"
        filters = [
            {'Name': f"tag:{cluster_owned_tag(infra_id)}", 'Values': ['owned']},
            {'Name': 'instance-state-name', 'Values': HIBERNATABLE_INSTANCE_STATES},
        ]
        instances: List[Dict[str, Any]] = []
        request: Dict[str, Any] = {'Filters': filters}
        while True:
            ec2_client = self._client_for(ctx, step)
            try:
                page = ec2_client.describe_instances(**request)
            except (ClientError, BotoCoreError) as e:
                raise self._translate(e, step) from e
            for reservation in page['Reservations']:
                instances.extend(reservation['Instances'])
            next_token = page.get('NextToken')
            if not next_token:
                break
            request['NextToken'] = next_token
        logger.debug("Described %d instances for cluster %s", len(instances), infra_id)
        return instances

    def stop_instances(self, ctx: CallContext, instance_ids: List[str]) -> None:
        """Stop EC2 instances."""
        step = "failed to stop instances"
        ec2_client = self._client_for(ctx, step)
        try:
            ec2_client.stop_instances(InstanceIds=instance_ids)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, step, instance_ids) from e

    def start_instances(self, ctx: CallContext, instance_ids: List[str]) -> None:
        """Start EC2 instances."""
        step = "failed to start instances"
        ec2_client = self._client_for(ctx, step)
        try:
            ec2_client.start_instances(InstanceIds=instance_ids)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, step, instance_ids) from e

    @staticmethod
    def _translate(error: Exception, step: str, instance_ids: Optional[List[str]] = None) -> Exception:
        if isinstance(error, (ReadTimeoutError, ConnectTimeoutError)):
            return DeadlineExceededError(step, details=str(error))
        if isinstance(error, ClientError):
            code = error.response.get('Error', {}).get('Code', '')
            if code in _NOT_FOUND_CODES:
                return ResourceNotFoundError("instance", ", ".join(instance_ids or []), details=str(error))
            return ProviderError(step, str(error), details={'code': code})
        return ProviderError(step, str(error))
