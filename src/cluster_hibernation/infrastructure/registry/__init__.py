"""Actuator registry."""

from .actuator_registry import ActuatorRegistry, HibernationActuatorPort

__all__ = ["ActuatorRegistry", "HibernationActuatorPort"]
