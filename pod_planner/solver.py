"""Solver module for packing participants and groups into pods."""

import logging
import random
from collections import Counter, defaultdict
from collections.abc import Mapping, Sequence

from pod_planner.compatibility import admits, best_anchor, common_anchors, matches
from pod_planner.planner import MIN_POD_SIZE, plan_pod_sizes
from pod_planner.power import EPSILON, mean_power, round_to_grid
from pod_planner.types import (
    AssignmentResult,
    AssignmentStatus,
    Candidate,
    LeniencyMode,
    Metrics,
    Participant,
    ParticipantAssignment,
    PlanStrategy,
    Pod,
    Unit,
)
from pod_planner.units import (
    build_units,
    expand_candidates,
    flatten_participants,
    pod_size,
    total_size,
    unit_group_id,
    unit_id,
    unit_participants,
    unit_size,
)

logger = logging.getLogger(__name__)

SMALL_COHORT_SIZES = range(3, 6)


def assemble_result(pods: Sequence[Pod], units: Sequence[Unit]) -> list[Unit]:
    """Units that no pod consumed, in input order.

    Identity is by unit id, so a group is present or absent as a whole.
    """
    placed = {unit_id(member) for pod in pods for member in pod.members}
    return [unit for unit in units if unit_id(unit) not in placed]


class PodSearch:
    """
    Backtracking search over the planned pod sizes.

    One target size is consumed per recursion level. At every level each
    anchor power still available is tried as the base of a pod, and so is
    skipping the size altogether. The solution with the most pods wins.

    Candidates join a pod when their anchor is within `tolerance` of the base.
    Members are not checked pairwise, so the extremes of a pod can sit up to
    twice the tolerance apart unless `strict_spread` is set.

    Attributes:
        units: Units to place
        target_sizes: Planned pod sizes, consumed in order
        tolerance: Maximum distance between a candidate's anchor and the base
        strict_spread: Also reject pods whose anchors span more than `tolerance`
        nodes_explored: Recursion nodes visited by the last run
    """

    def __init__(
        self,
        units: Sequence[Unit],
        target_sizes: Sequence[int],
        tolerance: float,
        strict_spread: bool = False,
    ):
        if tolerance < 0:
            raise ValueError("tolerance must be non-negative")

        self.units = list(units)
        self.target_sizes = list(target_sizes)
        self.tolerance = tolerance
        self.strict_spread = strict_spread
        self.nodes_explored = 0

        self._candidates = expand_candidates(self.units)
        self._total_seats = total_size(self.units)
        self._buckets = self._build_buckets()

        self._best: list[Pod] = []
        self._visited: dict[tuple[frozenset[str], int], int] = {}

    def _build_buckets(self) -> dict[float, list[Candidate]]:
        """Candidates keyed by grid-rounded anchor, in ascending key order."""
        buckets: dict[float, list[Candidate]] = defaultdict(list)
        for candidate in self._candidates:
            buckets[round_to_grid(candidate.anchor)].append(candidate)
        return dict(sorted(buckets.items()))

    def _pools(
        self, used: frozenset[str]
    ) -> list[tuple[float, list[Candidate]]]:
        """Every (base, compatible unused candidates) pair worth trying."""
        if self.tolerance == 0:
            return [
                (base, [c for c in bucket if unit_id(c.unit) not in used])
                for base, bucket in self._buckets.items()
            ]

        available = [c for c in self._candidates if unit_id(c.unit) not in used]
        bases = sorted({c.anchor for c in available})
        return [
            (base, [c for c in available if matches(c.anchor, base, self.tolerance)])
            for base in bases
        ]

    def _select(self, pool: list[Candidate], base: float, target: int) -> list[Candidate] | None:
        """Greedily fill `target` seats from a compatible pool, larger units first."""
        closest: dict[str, Candidate] = {}
        for candidate in pool:
            key = unit_id(candidate.unit)
            current = closest.get(key)
            if current is None or abs(candidate.anchor - base) < abs(current.anchor - base):
                closest[key] = candidate

        ordered = sorted(closest.values(), key=lambda c: unit_size(c.unit), reverse=True)

        selected: list[Candidate] = []
        filled = 0
        for candidate in ordered:
            size = unit_size(candidate.unit)
            if filled + size <= target:
                selected.append(candidate)
                filled += size
                if filled == target:
                    break

        if filled < MIN_POD_SIZE:
            return None

        if self.strict_spread:
            anchors = [c.anchor for c in selected]
            if max(anchors) - min(anchors) > self.tolerance + EPSILON:
                return None

        return selected

    def _backtrack(
        self, current: list[Pod], used: frozenset[str], seated: int, level: int
    ) -> None:
        self.nodes_explored += 1

        # Skipping every remaining size is always allowed, so any node is a solution
        if len(current) > len(self._best):
            self._best = list(current)

        remaining = len(self.target_sizes) - level
        if remaining == 0:
            return

        free_seats = self._total_seats - seated
        bound = len(current) + min(remaining, free_seats // MIN_POD_SIZE)
        if bound <= len(self._best):
            return

        state = (used, level)
        if self._visited.get(state, -1) >= len(current):
            return
        self._visited[state] = len(current)

        target = self.target_sizes[level]
        for base, pool in self._pools(used):
            selected = self._select(pool, base, target)
            if selected is None:
                continue

            pod = Pod(
                members=tuple(c.unit for c in selected),
                anchor_power=mean_power(c.anchor for c in selected),
            )
            self._backtrack(
                current + [pod],
                used | {unit_id(c.unit) for c in selected},
                seated + pod_size(pod),
                level + 1,
            )

        self._backtrack(current, used, seated, level + 1)

    def run(self) -> list[Pod]:
        """Search for the partition with the most pods."""
        self._best = []
        self._visited = {}
        self.nodes_explored = 0

        if self.units and self.target_sizes:
            self._backtrack([], frozenset(), 0, 0)

        logger.debug(
            "Search over %d candidates for targets %s explored %d nodes, found %d pods",
            len(self._candidates),
            self.target_sizes,
            self.nodes_explored,
            len(self._best),
        )
        return list(self._best)


def search_pods(
    units: Sequence[Unit],
    target_sizes: Sequence[int],
    tolerance: float,
    strict_spread: bool = False,
) -> AssignmentResult:
    """Run the backtracking search and account for every unit.

    Returns:
        AssignmentResult with the chosen pods and every unit no pod consumed
    """
    pods = PodSearch(units, target_sizes, tolerance, strict_spread).run()
    return AssignmentResult(
        pods=pods,
        unassigned=assemble_result(pods, units),
        target_sizes=list(target_sizes),
    )


class PodAssignmentSolver:
    """
    Plans pod sizes and assigns units to pods.

    Attributes:
        units: Participants and groups to place, in caller order
        leniency: Tolerance mode for power compatibility
        strategy: Target pod size policy
        seed: Optional seed that shuffles the search order to vary tie-breaking
        strict_spread: Reject pods whose anchors span more than the tolerance
        trust_best_anchor: Seat a 3-5 person cohort in one pod even when no
                           power is compatible with everyone
    """

    def __init__(
        self,
        units: Sequence[Unit],
        leniency: LeniencyMode = LeniencyMode.NONE,
        strategy: PlanStrategy = PlanStrategy.BALANCED,
        seed: int | None = None,
        strict_spread: bool = False,
        trust_best_anchor: bool = False,
    ):
        """
        Initialize the solver with problem data.

        Raises:
            ValueError: If a unit id or a participant id appears more than once
        """
        self.units = list(units)
        self.leniency = leniency
        self.strategy = strategy
        self.seed = seed
        self.strict_spread = strict_spread
        self.trust_best_anchor = trust_best_anchor

        self._check_unique_ids()

    @property
    def tolerance(self) -> float:
        return self.leniency.tolerance

    def _check_unique_ids(self) -> None:
        for label, ids in (
            ("unit", [unit_id(unit) for unit in self.units]),
            ("participant", [p.id for p in flatten_participants(self.units)]),
        ):
            duplicates = sorted(i for i, count in Counter(ids).items() if count > 1)
            if duplicates:
                raise ValueError(f"Duplicate {label} ids: {', '.join(duplicates)}")

    def _search_order(self) -> list[Unit]:
        order = list(self.units)
        if self.seed is not None:
            random.Random(self.seed).shuffle(order)
        return order

    def _small_cohort_pod(self) -> Pod | None:
        """One pod holding everybody, or None when no shared power exists."""
        participants = flatten_participants(self.units)
        common = common_anchors(participants, self.tolerance)

        if self.trust_best_anchor:
            anchor = best_anchor(participants)
        elif common:
            anchor = best_anchor(participants, among=common)
        else:
            logger.debug(
                "No power shared by all %d participants; using the full search",
                len(participants),
            )
            return None

        return Pod(members=tuple(self.units), anchor_power=anchor)

    def _process_assignments(
        self, pods: list[Pod]
    ) -> dict[str, ParticipantAssignment]:
        assignments: dict[str, ParticipantAssignment] = {}

        for number, pod in enumerate(pods, start=1):
            for member in pod.members:
                group_id = unit_group_id(member)
                for participant in unit_participants(member):
                    assignments[participant.id] = ParticipantAssignment(
                        status=AssignmentStatus.ASSIGNED,
                        pod_number=number,
                        pod_anchor=pod.anchor_power,
                        group_id=group_id,
                    )

        for unit in self.units:
            group_id = unit_group_id(unit)
            for participant in unit_participants(unit):
                if participant.id not in assignments:
                    assignments[participant.id] = ParticipantAssignment(
                        status=AssignmentStatus.UNASSIGNED,
                        group_id=group_id,
                    )

        return assignments

    def _calculate_metrics(
        self, pods: list[Pod], unassigned: list[Unit], target_sizes: list[int]
    ) -> Metrics:
        """Calculate metrics from the chosen pods."""
        total = total_size(self.units)
        seated = sum(pod_size(pod) for pod in pods)

        pod_size_distribution: dict[int, int] = dict(
            sorted(Counter(pod_size(pod) for pod in pods).items())
        )

        # Anchor-vs-base matching can leave a unit outside the pod's final anchor
        tolerance_violations = []
        for number, pod in enumerate(pods, start=1):
            for member in pod.members:
                if not admits(member, pod.anchor_power, self.tolerance):
                    tolerance_violations.append(
                        f"Pod {number} (power {pod.anchor_power:g}): "
                        f"{unit_id(member)} has no power within "
                        f"{self.tolerance:g} of the pod"
                    )

        return Metrics(
            pods_formed=len(pods),
            participants_seated=seated,
            participants_unassigned=total_size(unassigned),
            seat_rate=seated / total if total else 0.0,
            pod_size_distribution=pod_size_distribution,
            unfilled_targets=max(len(target_sizes) - len(pods), 0),
            tolerance_violations=tolerance_violations,
        )

    def solve(self) -> AssignmentResult:
        """
        Assign units to pods.

        Totals of 3-5 seats try a single pod first. Otherwise the backtracking
        search runs over the planned sizes. Inputs that cannot be packed come
        back as unassigned units, never as errors.

        Returns:
            AssignmentResult with pods, unassigned units and metrics
        """
        total = total_size(self.units)
        target_sizes = plan_pod_sizes(total, self.strategy)
        logger.debug(
            "Planned pod sizes %s for %d participants (%s leniency)",
            target_sizes,
            total,
            self.leniency.value,
        )

        pods: list[Pod] = []
        shortcut = None
        if total in SMALL_COHORT_SIZES:
            shortcut = self._small_cohort_pod()

        if shortcut is not None:
            pods = [shortcut]
        elif target_sizes:
            pods = search_pods(
                self._search_order(),
                target_sizes,
                self.tolerance,
                self.strict_spread,
            ).pods

        unassigned = assemble_result(pods, self.units)
        logger.info(
            "Formed %d pods, %d units unassigned", len(pods), len(unassigned)
        )

        return AssignmentResult(
            pods=pods,
            unassigned=unassigned,
            target_sizes=target_sizes,
            participant_assignments=self._process_assignments(pods),
            metrics=self._calculate_metrics(pods, unassigned, target_sizes),
        )


def generate_pods(
    participants: Sequence[Participant],
    grouping: Mapping[str, Sequence[str]] | None = None,
    leniency: LeniencyMode = LeniencyMode.NONE,
    strategy: PlanStrategy = PlanStrategy.BALANCED,
    seed: int | None = None,
    strict_spread: bool = False,
    trust_best_anchor: bool = False,
) -> AssignmentResult:
    """
    Build units from participants and a grouping map, then assign pods.

    Parameters:
        participants: Validated participants
        grouping: Group id -> member participant ids; grouped participants
                  are always seated together
        leniency: Tolerance mode for power compatibility
        strategy: Target pod size policy
        seed: Optional seed for reproducible tie-breaking
        strict_spread: Reject pods whose powers span more than the tolerance
        trust_best_anchor: Always seat a 3-5 person cohort together

    Returns:
        AssignmentResult with pods, unassigned units and metrics
    """
    solver = PodAssignmentSolver(
        units=build_units(participants, grouping),
        leniency=leniency,
        strategy=strategy,
        seed=seed,
        strict_spread=strict_spread,
        trust_best_anchor=trust_best_anchor,
    )
    return solver.solve()
