"""Type definitions for the pod planner."""

from dataclasses import dataclass, field
from enum import Enum

from pod_planner.power import mean_power


class LeniencyMode(Enum):
    """How far a unit's power may deviate from a pod's anchor."""

    NONE = "none"
    REGULAR = "regular"
    SUPER = "super"

    @property
    def tolerance(self) -> float:
        return _TOLERANCES[self]


_TOLERANCES = {
    LeniencyMode.NONE: 0.0,
    LeniencyMode.REGULAR: 0.5,
    LeniencyMode.SUPER: 1.0,
}


class PlanStrategy(Enum):
    """Target pod size policy."""

    BALANCED = "balanced"
    AVOID_FIVE = "avoid-five"


class AssignmentStatus(Enum):
    """Status of a participant's assignment."""

    ASSIGNED = "ASSIGNED"
    UNASSIGNED = "UNASSIGNED"


@dataclass(frozen=True)
class Participant:
    """A single participant and every power level they can play at."""

    id: str
    powers: tuple[float, ...]
    name: str = ""
    brackets: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.powers:
            raise ValueError(
                f"Participant '{self.id}' must have at least one admissible power"
            )
        object.__setattr__(
            self, "powers", tuple(sorted({float(p) for p in self.powers}))
        )
        if not self.name:
            object.__setattr__(self, "name", self.id)

    @property
    def power(self) -> float:
        """Representative power: the mean of admissible powers on the 0.5 grid."""
        return mean_power(self.powers)


@dataclass(frozen=True)
class Group:
    """Participants that must always be seated in the same pod."""

    id: str
    members: tuple[Participant, ...]

    def __post_init__(self) -> None:
        if not self.members:
            raise ValueError(f"Group '{self.id}' must have at least one member")
        object.__setattr__(self, "members", tuple(self.members))


Unit = Participant | Group


@dataclass(frozen=True)
class Candidate:
    """One way a unit could seed or join a pod: the unit at one anchor power."""

    unit: Unit
    anchor: float


@dataclass(frozen=True)
class Pod:
    """Units sharing one play session at one anchor power."""

    members: tuple[Unit, ...]
    anchor_power: float


@dataclass
class ParticipantAssignment:
    """Assignment result for a single participant."""

    status: AssignmentStatus
    pod_number: int | None = None  # 1-based
    pod_anchor: float | None = None
    group_id: str | None = None


@dataclass
class Metrics:
    """Metrics for a pod generation run."""

    pods_formed: int
    participants_seated: int
    participants_unassigned: int
    seat_rate: float
    pod_size_distribution: dict[int, int]
    unfilled_targets: int
    tolerance_violations: list[str] = field(default_factory=list)


@dataclass
class AssignmentResult:
    """Complete result of one pod generation run."""

    pods: list[Pod]
    unassigned: list[Unit]
    target_sizes: list[int] = field(default_factory=list)
    participant_assignments: dict[str, ParticipantAssignment] = field(
        default_factory=dict
    )
    metrics: Metrics | None = None
