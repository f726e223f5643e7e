"""Hibernation actuator - binds a provider capability to the stop/start/observe protocol."""
from typing import Callable, List, Optional, Sequence

from cluster_hibernation.domain.cluster import ClusterIdentity
from cluster_hibernation.domain.core.exceptions import HibernationError, ProviderError
from cluster_hibernation.domain.machine import (
    NOT_RUNNING,
    NOT_STOPPED,
    RUNNING_OR_PENDING,
    STOPPED_OR_STOPPING,
    CanonicalState,
    ConvergenceReport,
    Instance,
    PowerActionResult,
    PowerDirection,
    PredicateSet,
    StatusClassifier,
    in_set,
)
from cluster_hibernation.infrastructure.call_context import CallContext
from cluster_hibernation.infrastructure.interfaces.provider_capability import ProviderCapabilityPort
from cluster_hibernation.infrastructure.logging.logger import get_logger

CapabilityFactory = Callable[[ClusterIdentity, CallContext], ProviderCapabilityPort]


def instance_names(instances: Sequence[Instance]) -> List[str]:
    return [instance.name for instance in instances]


class HibernationActuator:
    """
    Generic hibernation actuator for one cloud provider.

    The provider capability is built fresh for every operation through
    ``capability_factory`` and is never shared between calls.
    """

    def __init__(self,
                 name: str,
                 can_handle: Callable[[ClusterIdentity], bool],
                 capability_factory: CapabilityFactory,
                 classifier: StatusClassifier):
        """
        Initialize the actuator.

        Args:
            name: Actuator name, also used as the ``cloud`` log field
            can_handle: Side-effect free predicate selecting clusters
            capability_factory: Builds the provider capability for a cluster
            classifier: Raw status table of the provider
        """
        self._name = name
        self._can_handle = can_handle
        self._capability_factory = capability_factory
        self._classifier = classifier
        self._logger = get_logger(__name__).bind(cloud=name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def classifier(self) -> StatusClassifier:
        return self._classifier

    def can_handle(self, cluster: ClusterIdentity) -> bool:
        """Return True if this actuator handles the cluster."""
        return bool(self._can_handle(cluster))

    def stop_machines(self, cluster: ClusterIdentity, ctx: Optional[CallContext] = None) -> PowerActionResult:
        """Stop the running or pending machines of the cluster."""
        return self._act(cluster, ctx, PowerDirection.STOP)

    def start_machines(self, cluster: ClusterIdentity, ctx: Optional[CallContext] = None) -> PowerActionResult:
        """Start the stopped or stopping machines of the cluster."""
        return self._act(cluster, ctx, PowerDirection.START)

    def machines_running(self, cluster: ClusterIdentity, ctx: Optional[CallContext] = None) -> ConvergenceReport:
        """
        Report whether every machine of the cluster is running.

        Stragglers are the machines that are not running yet plus machines
        whose status could not be classified, in provider order.
        """
        logger = self._logger.bind(cluster=cluster.name)
        logger.info("checking whether machines are running")
        return self._observe(cluster, ctx, NOT_RUNNING)

    def machines_stopped(self, cluster: ClusterIdentity, ctx: Optional[CallContext] = None) -> ConvergenceReport:
        """
        Report whether every machine of the cluster is stopped.

        Stragglers are the machines that have not stopped yet plus machines
        whose status could not be classified, in provider order.
        """
        logger = self._logger.bind(cluster=cluster.name)
        logger.info("checking whether machines are stopped")
        return self._observe(cluster, ctx, NOT_STOPPED)

    def _act(self, cluster: ClusterIdentity, ctx: Optional[CallContext],
             direction: PowerDirection) -> PowerActionResult:
        ctx = ctx or CallContext.background()
        logger = self._logger.bind(cluster=cluster.name, direction=direction.value)
        states = RUNNING_OR_PENDING if direction is PowerDirection.STOP else STOPPED_OR_STOPPING
        verb = direction.value

        capability = self._build_capability(cluster, ctx)
        listed = self._list(capability, cluster, ctx)
        unclassified = [
            instance.name for instance in listed
            if self._classifier.classify(instance.status) is CanonicalState.UNKNOWN
        ]
        instances = self._filter(listed, states, cluster)
        if not instances:
            logger.info(f"No instances were found to {verb}")
            return PowerActionResult(cluster_name=cluster.name, direction=direction, unclassified=unclassified)

        names = instance_names(instances)
        logger.info(f"Requesting {verb} of instances", instances=names)
        try:
            if direction is PowerDirection.STOP:
                capability.stop_instances(ctx, instances)
            else:
                capability.start_instances(ctx, instances)
        except HibernationError as e:
            logger.error(f"failed to {verb} instances", error=str(e))
            raise
        except Exception as e:
            logger.error(f"failed to {verb} instances", error=str(e))
            raise ProviderError(f"failed to {verb} instances", str(e), unprocessed=names) from e

        return PowerActionResult(cluster_name=cluster.name, direction=direction, instance_names=names,
                                 unclassified=unclassified)

    def _observe(self, cluster: ClusterIdentity, ctx: Optional[CallContext],
                 states: PredicateSet) -> ConvergenceReport:
        ctx = ctx or CallContext.background()
        capability = self._build_capability(cluster, ctx)
        instances = self._list(capability, cluster, ctx)
        stragglers = [
            instance for instance in instances
            if self._is_straggler(self._classifier.classify(instance.status), states)
        ]
        return ConvergenceReport(not stragglers, instance_names(stragglers))

    @staticmethod
    def _is_straggler(state: CanonicalState, states: PredicateSet) -> bool:
        # Unknown is never part of a predicate set but still blocks convergence.
        return state is CanonicalState.UNKNOWN or in_set(state, states)

    def _build_capability(self, cluster: ClusterIdentity, ctx: CallContext) -> ProviderCapabilityPort:
        ctx.check("build provider client")
        try:
            return self._capability_factory(cluster, ctx)
        except HibernationError:
            raise
        except Exception as e:
            self._logger.error("failed to build provider client", cluster=cluster.name, error=str(e))
            raise ProviderError("failed to build provider client", str(e)) from e

    def _list(self, capability: ProviderCapabilityPort, cluster: ClusterIdentity,
              ctx: CallContext) -> List[Instance]:
        logger = self._logger.bind(cluster=cluster.name, infra_id=cluster.infra_id)
        logger.debug("listing cluster instances")
        try:
            instances = capability.list_cluster_instances(ctx, cluster)
        except HibernationError as e:
            logger.error("failed to list instances", error=str(e))
            raise
        except Exception as e:
            logger.error("failed to list instances", error=str(e))
            raise ProviderError("failed to list instances", str(e)) from e
        for instance in instances:
            if self._classifier.classify(instance.status) is CanonicalState.UNKNOWN:
                logger.warning("instance has unrecognized status", instance=instance.name,
                               status=instance.status)
        return list(instances)

    def _filter(self, instances: Sequence[Instance], states: PredicateSet,
                cluster: ClusterIdentity) -> List[Instance]:
        result = [
            instance for instance in instances
            if in_set(self._classifier.classify(instance.status), states)
        ]
        self._logger.debug("result of listing instances", cluster=cluster.name, count=len(result),
                           states=states.name)
        return result

    def __repr__(self) -> str:
        return f"HibernationActuator(name={self._name!r})"

