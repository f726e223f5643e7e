"""Instance information and hibernation outcomes."""
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


class Instance(BaseModel):
    """Instance as reported by a provider. Read-only to the hibernation core."""

    model_config = ConfigDict(frozen=True)

    name: str
    instance_id: str
    status: Optional[str] = None
    provider_data: Dict[str, Any] = Field(default_factory=dict)


class PowerDirection(str, Enum):
    """Desired aggregate power state of a cluster."""

    STOP = "stop"
    START = "start"


class PowerActionResult(BaseModel):
    """Outcome of a single stop or start cycle."""

    model_config = ConfigDict(frozen=True)

    cluster_name: str
    direction: PowerDirection
    instance_names: List[str] = Field(default_factory=list)
    # Instances left alone because their status could not be classified.
    unclassified: List[str] = Field(default_factory=list)

    @property
    def noop(self) -> bool:
        """True when no instance needed the action."""
        return not self.instance_names

    @property
    def in_desired_state(self) -> bool:
        """True when nothing was acted upon and every instance was classified."""
        return self.noop and not self.unclassified


class ConvergenceReport(NamedTuple):
    """Result of an observation call: converged flag and straggler names."""

    converged: bool
    stragglers: List[str]
