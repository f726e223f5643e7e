"""Instance model and lifecycle state classification."""

from .instance import ConvergenceReport, Instance, PowerActionResult, PowerDirection
from .machine_status import (
    NOT_RUNNING,
    NOT_STOPPED,
    RUNNING_OR_PENDING,
    STOPPED_OR_STOPPING,
    CanonicalState,
    PowerPhase,
    PredicateSet,
    StatusClassifier,
    in_set,
)

__all__ = [
    "CanonicalState",
    "ConvergenceReport",
    "Instance",
    "NOT_RUNNING",
    "NOT_STOPPED",
    "PowerActionResult",
    "PowerDirection",
    "PowerPhase",
    "PredicateSet",
    "RUNNING_OR_PENDING",
    "STOPPED_OR_STOPPING",
    "StatusClassifier",
    "in_set",
]
