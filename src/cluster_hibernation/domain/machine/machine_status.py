"""Canonical lifecycle states and the predicate sets derived from them.

Every provider reports instance status with its own vocabulary. Adapters
supply a ``StatusClassifier`` table that maps their raw strings onto
``CanonicalState``; the predicate sets below are shared so that every
provider gets the same stop/start semantics.
"""
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Mapping, Optional


class PowerPhase(str, Enum):
    """Direction an instance is heading in."""
    UP = "up"
    DOWN = "down"


class CanonicalState(str, Enum):
    """Provider-independent instance lifecycle state."""
    RUNNING = "Running"
    PENDING = "Pending"
    STOPPING = "Stopping"
    STOPPED = "Stopped"
    UNKNOWN = "Unknown"

    @property
    def phase(self) -> Optional[PowerPhase]:
        """Power phase of this state, None for Unknown."""
        return _STATE_PHASES[self]

    @property
    def is_settled(self) -> bool:
        """True for the terminal state of a phase (Running, Stopped)."""
        return self in _SETTLED_STATES


# Single source of truth for the predicate sets.
_STATE_PHASES: Dict[CanonicalState, Optional[PowerPhase]] = {
    CanonicalState.RUNNING: PowerPhase.UP,
    CanonicalState.PENDING: PowerPhase.UP,
    CanonicalState.STOPPING: PowerPhase.DOWN,
    CanonicalState.STOPPED: PowerPhase.DOWN,
    CanonicalState.UNKNOWN: None,
}

_SETTLED_STATES = frozenset({CanonicalState.RUNNING, CanonicalState.STOPPED})


class PredicateSet:
    """Named, immutable set of canonical states."""

    __slots__ = ("_name", "_states")

    def __init__(self, name: str, states: Iterable[CanonicalState]):
        self._name = name
        self._states: FrozenSet[CanonicalState] = frozenset(states)

    @property
    def name(self) -> str:
        return self._name

    @property
    def states(self) -> FrozenSet[CanonicalState]:
        return self._states

    def union(self, name: str, other: Iterable[CanonicalState]) -> "PredicateSet":
        """Return a new named set holding the states of both."""
        return PredicateSet(name, self._states | frozenset(other))

    def __contains__(self, state: object) -> bool:
        return state in self._states

    def __iter__(self):
        return iter(sorted(self._states, key=lambda s: s.value))

    def __len__(self) -> int:
        return len(self._states)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PredicateSet):
            return self._states == other._states
        if isinstance(other, (set, frozenset)):
            return self._states == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._states)

    def __repr__(self) -> str:
        return f"PredicateSet({self._name}: {', '.join(s.value for s in self)})"


def _states_in_phase(phase: PowerPhase) -> FrozenSet[CanonicalState]:
    return frozenset(s for s, p in _STATE_PHASES.items() if p is phase)


def _transitional(phase: PowerPhase) -> FrozenSet[CanonicalState]:
    return frozenset(s for s in _states_in_phase(phase) if not s.is_settled)


RUNNING_OR_PENDING = PredicateSet("RunningOrPending", _states_in_phase(PowerPhase.UP))
STOPPED_OR_STOPPING = PredicateSet("StoppedOrStopping", _states_in_phase(PowerPhase.DOWN))
NOT_RUNNING = STOPPED_OR_STOPPING.union("NotRunning", _transitional(PowerPhase.UP))
NOT_STOPPED = RUNNING_OR_PENDING.union("NotStopped", _transitional(PowerPhase.DOWN))


def in_set(state: CanonicalState, predicate_set: PredicateSet) -> bool:
    """Return True if ``state`` is a member of ``predicate_set``."""
    return state in predicate_set


class StatusClassifier:
    """
    Maps a provider's raw status strings to canonical states.

    Lookups ignore case and surrounding whitespace. Anything not in the
    table, including None and the empty string, classifies as Unknown.
    """

    def __init__(self, provider: str, table: Mapping[str, CanonicalState]):
        """
        Initialize the classifier.

        Args:
            provider: Provider name, used in log and repr output
            table: Raw status string to canonical state mapping

        Raises:
            ValueError: If the table maps a status to Unknown explicitly
        """
        self.provider = provider
        normalized: Dict[str, CanonicalState] = {}
        for raw, state in table.items():
            if state is CanonicalState.UNKNOWN:
                raise ValueError(f"Status {raw!r} must not be mapped to Unknown explicitly")
            normalized[raw.strip().lower()] = CanonicalState(state)
        self._table = normalized

    @property
    def known_statuses(self) -> FrozenSet[str]:
        return frozenset(self._table)

    def classify(self, raw_status: Optional[str]) -> CanonicalState:
        """Classify a raw provider status. Never fails."""
        if not raw_status:
            return CanonicalState.UNKNOWN
        return self._table.get(raw_status.strip().lower(), CanonicalState.UNKNOWN)

    def __repr__(self) -> str:
        return f"StatusClassifier(provider={self.provider!r}, statuses={sorted(self._table)})"
