"""Provider-independent actuator."""

from .actuator import CapabilityFactory, HibernationActuator

__all__ = ["CapabilityFactory", "HibernationActuator"]
