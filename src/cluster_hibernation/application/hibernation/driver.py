"""Hibernation driver - runs one stop or start cycle for a cluster.

The driver is called repeatedly by an external reconciliation loop. It
performs no retries or waiting of its own: a cycle either requests the
power action, reports that there was nothing to do, or raises.
"""
from typing import Optional

from cluster_hibernation.domain.cluster import ClusterIdentity
from cluster_hibernation.domain.machine import ConvergenceReport, PowerActionResult, PowerDirection
from cluster_hibernation.infrastructure.call_context import DEFAULT_CALL_TIMEOUT_SECONDS, CallContext
from cluster_hibernation.infrastructure.logging.logger import get_logger
from cluster_hibernation.infrastructure.registry import ActuatorRegistry


class HibernationDriver:
    """Resolves a cluster's actuator and drives it towards a power direction."""

    def __init__(self, registry: ActuatorRegistry, call_timeout: float = DEFAULT_CALL_TIMEOUT_SECONDS):
        self._registry = registry
        self._call_timeout = call_timeout
        self._logger = get_logger(__name__)

    def drive(self, cluster: ClusterIdentity, direction: PowerDirection,
              ctx: Optional[CallContext] = None) -> PowerActionResult:
        """
        Run one stop or start cycle.

        Args:
            cluster: Cluster to act on
            direction: STOP to hibernate, START to resume
            ctx: Deadline and cancellation for provider calls

        Returns:
            PowerActionResult; ``in_desired_state`` is True when every
            machine was already in or heading to the desired state

        Raises:
            ActuatorSelectionError: If the cluster has no unique actuator
            HibernationError: If a provider call fails
        """
        direction = PowerDirection(direction)
        ctx = ctx or self._new_context()
        actuator = self._registry.select(cluster)
        logger = self._logger.bind(cluster=cluster.name, cloud=actuator.name, direction=direction.value)

        if direction is PowerDirection.STOP:
            result = actuator.stop_machines(cluster, ctx)
        else:
            result = actuator.start_machines(cluster, ctx)

        if result.in_desired_state:
            logger.info("Nothing to do, cluster already in desired power state")
        elif result.noop:
            logger.warning("No instance could be acted upon, some statuses are unrecognized",
                           unclassified=result.unclassified)
        else:
            logger.info("Power action requested", instances=result.instance_names,
                        count=len(result.instance_names))
        return result

    def hibernate(self, cluster: ClusterIdentity, ctx: Optional[CallContext] = None) -> PowerActionResult:
        """Stop the cluster's machines."""
        return self.drive(cluster, PowerDirection.STOP, ctx)

    def resume(self, cluster: ClusterIdentity, ctx: Optional[CallContext] = None) -> PowerActionResult:
        """Start the cluster's machines."""
        return self.drive(cluster, PowerDirection.START, ctx)

    def check_converged(self, cluster: ClusterIdentity, direction: PowerDirection,
                        ctx: Optional[CallContext] = None) -> ConvergenceReport:
        """Report whether every machine reached the state ``direction`` leads to."""
        direction = PowerDirection(direction)
        ctx = ctx or self._new_context()
        actuator = self._registry.select(cluster)
        if direction is PowerDirection.STOP:
            report = actuator.machines_stopped(cluster, ctx)
        else:
            report = actuator.machines_running(cluster, ctx)

        if not report.converged:
            self._logger.info("Machines have not converged", cluster=cluster.name,
                              direction=direction.value, stragglers=report.stragglers)
        return report

    def _new_context(self) -> CallContext:
        return CallContext(per_call_timeout=self._call_timeout)
