# src/cluster_hibernation/domain/core/exceptions.py
from enum import Enum
from typing import Any, List, Optional


class ErrorKind(str, Enum):
    """Error kinds callers can branch on without string matching."""
    NOT_FOUND = "not_found"
    PROVIDER_ERROR = "provider_error"
    NO_MATCHING_ACTUATOR = "no_matching_actuator"
    CANCELLED = "cancelled"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    CONFIGURATION = "configuration"


class HibernationError(Exception):
    """Base exception for all hibernation errors."""
    kind: ErrorKind = ErrorKind.PROVIDER_ERROR

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ResourceNotFoundError(HibernationError):
    """Raised when a referenced provider resource does not exist."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource_type: str, resource_id: str, details: Any = None):
        super().__init__(f"{resource_type} {resource_id!r} not found", details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ProviderError(HibernationError):
    """Raised when a call to the provider capability layer fails.

    ``step`` names the failing step (e.g. "failed to stop instances").
    For per-instance actions ``instance_name`` is the instance whose call
    failed and ``unprocessed`` lists every instance whose outcome is unknown,
    starting with the failing one. When it wraps another failure whose
    kind matters to callers (e.g. a missing instance), ``kind`` is that
    failure's kind.
    """
    kind = ErrorKind.PROVIDER_ERROR

    def __init__(self,
                 step: str,
                 message: str,
                 instance_name: Optional[str] = None,
                 unprocessed: Optional[List[str]] = None,
                 details: Any = None,
                 kind: Optional[ErrorKind] = None):
        if instance_name:
            text = f"{step} for instance {instance_name!r}: {message}"
        else:
            text = f"{step}: {message}"
        super().__init__(text, details)
        self.step = step
        self.instance_name = instance_name
        self.unprocessed = list(unprocessed or [])
        if kind is not None:
            self.kind = kind


class ActuatorSelectionError(HibernationError):
    """Raised when a cluster cannot be resolved to exactly one actuator."""
    kind = ErrorKind.NO_MATCHING_ACTUATOR

    def __init__(self, message: str, cluster_name: str, candidates: Optional[List[str]] = None):
        super().__init__(message, details={"candidates": list(candidates or [])})
        self.cluster_name = cluster_name
        self.candidates = list(candidates or [])


class NoMatchingActuatorError(ActuatorSelectionError):
    """Raised when no registered actuator can handle a cluster."""

    def __init__(self, cluster_name: str):
        super().__init__(f"no actuator found for cluster {cluster_name!r}", cluster_name)


class AmbiguousActuatorError(ActuatorSelectionError):
    """Raised when more than one registered actuator claims a cluster."""

    def __init__(self, cluster_name: str, candidates: List[str]):
        super().__init__(
            f"multiple actuators claim cluster {cluster_name!r}: {', '.join(candidates)}",
            cluster_name,
            candidates,
        )


class OperationCancelledError(HibernationError):
    """Raised when the caller cancelled the operation."""
    kind = ErrorKind.CANCELLED

    def __init__(self, operation: str):
        super().__init__(f"{operation}: operation cancelled")
        self.operation = operation


class DeadlineExceededError(HibernationError):
    """Raised when the operation deadline or a per-call timeout expired."""
    kind = ErrorKind.DEADLINE_EXCEEDED

    def __init__(self, operation: str, details: Any = None):
        super().__init__(f"{operation}: deadline exceeded", details)
        self.operation = operation


class ConfigurationError(HibernationError):
    """Raised when there's an issue with configuration."""
    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class CredentialsError(ConfigurationError):
    """Raised when provider credentials cannot be resolved."""
    pass
