"""Core provider capability interface - what every cloud backend must implement."""
from typing import List, Protocol, Sequence, runtime_checkable

from cluster_hibernation.domain.cluster import ClusterIdentity
from cluster_hibernation.domain.machine import Instance
from cluster_hibernation.infrastructure.call_context import CallContext


@runtime_checkable
class ProviderCapabilityPort(Protocol):
    """
    Minimal contract the hibernation core requires from a cloud backend.

    Start and stop are fire-and-forget state transitions: they return once
    the provider accepted the request, not when the instance reached the
    target state. Convergence is observed on a later listing.
    """

    def list_cluster_instances(self, ctx: CallContext, cluster: ClusterIdentity) -> List[Instance]:
        """List instances belonging to the cluster, and only those."""
        ...

    def stop_instances(self, ctx: CallContext, instances: Sequence[Instance]) -> None:
        """Request a stop of every given instance."""
        ...

    def start_instances(self, ctx: CallContext, instances: Sequence[Instance]) -> None:
        """Request a start of every given instance."""
        ...
