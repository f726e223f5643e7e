"""IBM Cloud implementation of the provider capability port."""
from typing import Any, Dict, List, Sequence

from cluster_hibernation.domain.cluster import ClusterIdentity
from cluster_hibernation.domain.core.exceptions import (
    DeadlineExceededError,
    HibernationError,
    OperationCancelledError,
    ProviderError,
)
from cluster_hibernation.domain.machine import Instance
from cluster_hibernation.infrastructure.call_context import CallContext
from cluster_hibernation.infrastructure.logging.logger import get_logger
from cluster_hibernation.providers.ibmcloud.ibm_client import (
    INSTANCE_ACTION_START,
    INSTANCE_ACTION_STOP,
    IBMCloudClient,
)


class IBMCloudInstanceManager:
    """Lists, stops and starts the VPC instances of a cluster."""

    def __init__(self, client: IBMCloudClient):
        self._client = client
        self._logger = get_logger(__name__)

    def list_cluster_instances(self, ctx: CallContext, cluster: ClusterIdentity) -> List[Instance]:
        platform = cluster.platform.ibmcloud
        resource_group = platform.resource_group if platform else None
        raw_instances = self._client.list_vpc_instances(ctx, cluster.infra_id, resource_group)
        return [_to_instance(raw) for raw in raw_instances]

    def stop_instances(self, ctx: CallContext, instances: Sequence[Instance]) -> None:
        self._run_action(ctx, instances, INSTANCE_ACTION_STOP)

    def start_instances(self, ctx: CallContext, instances: Sequence[Instance]) -> None:
        self._run_action(ctx, instances, INSTANCE_ACTION_START)

    def _run_action(self, ctx: CallContext, instances: Sequence[Instance], action: str) -> None:
        # One API call per instance; the first failure aborts the rest.
        for index, instance in enumerate(instances):
            try:
                self._client.create_instance_action(ctx, instance.instance_id, action)
            except HibernationError as e:
                unprocessed = [i.name for i in instances[index:]]
                self._logger.error(
                    f"failed to {action} instance",
                    instance=instance.name,
                    unprocessed=unprocessed,
                    error=str(e),
                )
                if isinstance(e, (OperationCancelledError, DeadlineExceededError)):
                    raise
                raise ProviderError(
                    f"failed to {action} instances",
                    e.message,
                    instance_name=instance.name,
                    unprocessed=unprocessed,
                    kind=e.kind,
                ) from e
            self._logger.debug(f"{action} requested", instance=instance.name)


def _to_instance(raw: Dict[str, Any]) -> Instance:
    return Instance(
        name=raw.get("name", ""),
        instance_id=raw.get("id", ""),
        status=raw.get("status"),
        provider_data={
            "crn": raw.get("crn"),
            "vpc": (raw.get("vpc") or {}).get("name"),
            "zone": (raw.get("zone") or {}).get("name"),
        },
    )
