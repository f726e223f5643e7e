"""Actuator Registry - selects the hibernation actuator for a cluster.

New clouds are supported by registering an actuator; selection is driven
by each actuator's ``can_handle`` predicate, never by provider conditionals
in the core.
"""
import threading
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from cluster_hibernation.domain.cluster import ClusterIdentity
from cluster_hibernation.domain.core.exceptions import (
    AmbiguousActuatorError,
    ConfigurationError,
    NoMatchingActuatorError,
)
from cluster_hibernation.domain.machine import ConvergenceReport, PowerActionResult
from cluster_hibernation.infrastructure.call_context import CallContext
from cluster_hibernation.infrastructure.logging.logger import get_logger


@runtime_checkable
class HibernationActuatorPort(Protocol):
    """Stop/start/observe protocol every registered actuator implements."""

    @property
    def name(self) -> str:
        ...

    def can_handle(self, cluster: ClusterIdentity) -> bool:
        ...

    def stop_machines(self, cluster: ClusterIdentity, ctx: Optional[CallContext] = None) -> PowerActionResult:
        ...

    def start_machines(self, cluster: ClusterIdentity, ctx: Optional[CallContext] = None) -> PowerActionResult:
        ...

    def machines_running(self, cluster: ClusterIdentity, ctx: Optional[CallContext] = None) -> ConvergenceReport:
        ...

    def machines_stopped(self, cluster: ClusterIdentity, ctx: Optional[CallContext] = None) -> ConvergenceReport:
        ...


class ActuatorRegistry:
    """
    Registry of hibernation actuators.

    Actuators are registered during process initialization, after which the
    registry is frozen. A frozen registry is never mutated again, so
    ``select`` reads the actuator tuple without taking a lock.
    """

    def __init__(self):
        """Initialize actuator registry."""
        self._actuators: Tuple[HibernationActuatorPort, ...] = ()
        self._frozen = False
        self._registration_lock = threading.Lock()
        self._logger = get_logger(__name__)

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def actuators(self) -> Tuple[HibernationActuatorPort, ...]:
        """Snapshot of registered actuators in registration order."""
        return self._actuators

    def register(self, actuator: HibernationActuatorPort) -> None:
        """
        Register an actuator.

        Args:
            actuator: Actuator to register

        Raises:
            ConfigurationError: If the registry is frozen or the name is taken
        """
        with self._registration_lock:
            if self._frozen:
                raise ConfigurationError(
                    f"Cannot register actuator '{actuator.name}': registry is frozen"
                )
            if any(existing.name == actuator.name for existing in self._actuators):
                raise ConfigurationError(f"Actuator '{actuator.name}' is already registered")
            self._actuators = self._actuators + (actuator,)
            self._logger.info("Registered hibernation actuator", actuator=actuator.name)

    def freeze(self) -> None:
        """Disallow further registrations."""
        with self._registration_lock:
            self._frozen = True
        self._logger.debug("Actuator registry frozen", actuators=self.names())

    def names(self) -> List[str]:
        return [actuator.name for actuator in self._actuators]

    def select(self, cluster: ClusterIdentity) -> HibernationActuatorPort:
        """
        Return the one actuator that can handle ``cluster``.

        Every actuator is asked, so overlapping ``can_handle`` predicates are
        reported instead of being resolved by registration order.

        Raises:
            NoMatchingActuatorError: If no actuator handles the cluster
            AmbiguousActuatorError: If more than one actuator does
        """
        matches = [actuator for actuator in self._actuators if actuator.can_handle(cluster)]
        if not matches:
            self._logger.error("No hibernation actuator found", cluster=cluster.name,
                               registered=self.names())
            raise NoMatchingActuatorError(cluster.name)
        if len(matches) > 1:
            names = [actuator.name for actuator in matches]
            self._logger.error("Multiple hibernation actuators claim cluster", cluster=cluster.name,
                               candidates=names)
            raise AmbiguousActuatorError(cluster.name, names)
        return matches[0]
