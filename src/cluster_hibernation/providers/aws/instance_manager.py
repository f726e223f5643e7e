"""AWS Instance Manager implementation."""
from typing import Any, Dict, List, Sequence

from cluster_hibernation.domain.cluster import ClusterIdentity
from cluster_hibernation.domain.core.exceptions import ProviderError, ResourceNotFoundError
from cluster_hibernation.domain.machine import Instance
from cluster_hibernation.infrastructure.call_context import CallContext
from cluster_hibernation.infrastructure.logging.logger import get_logger
from cluster_hibernation.providers.aws.aws_client import AWSClient


class AWSInstanceManager:
    """AWS implementation of ProviderCapabilityPort.

    EC2 accepts every instance of the cluster in one stop/start call, so a
    failure reports the whole batch as unprocessed.
    """

    def __init__(self, aws_client: AWSClient):
        """Initialize AWS instance manager."""
        self._aws_client = aws_client
        self._logger = get_logger(__name__)

    def list_cluster_instances(self, ctx: CallContext, cluster: ClusterIdentity) -> List[Instance]:
        """List the instances owned by the cluster."""
        return [_to_instance(raw) for raw in self._aws_client.describe_cluster_instances(ctx, cluster.infra_id)]

    def stop_instances(self, ctx: CallContext, instances: Sequence[Instance]) -> None:
        """Stop running instances."""
        self._batch(ctx, instances, "stop")

    def start_instances(self, ctx: CallContext, instances: Sequence[Instance]) -> None:
        """Start stopped instances."""
        self._batch(ctx, instances, "start")

    def _batch(self, ctx: CallContext, instances: Sequence[Instance], action: str) -> None:
        instance_ids = [instance.instance_id for instance in instances]
        names = [instance.name for instance in instances]
        operation = self._aws_client.stop_instances if action == "stop" else self._aws_client.start_instances
        try:
            operation(ctx, instance_ids)
        except (ProviderError, ResourceNotFoundError) as e:
            self._logger.error(f"Failed to {action} instances", instances=names, error=str(e))
            raise ProviderError(
                f"failed to {action} instances",
                e.message,
                unprocessed=names,
                details={"instance_ids": instance_ids},
                kind=e.kind,
            ) from e


def _to_instance(raw: Dict[str, Any]) -> Instance:
    tags = {tag['Key']: tag['Value'] for tag in raw.get('Tags', [])}
    return Instance(
        name=tags.get('Name', raw['InstanceId']),
        instance_id=raw['InstanceId'],
        status=(raw.get('State') or {}).get('Name'),
        provider_data={
            'instance_type': raw.get('InstanceType'),
            'availability_zone': (raw.get('Placement') or {}).get('AvailabilityZone'),
            'tags': tags,
        },
    )
