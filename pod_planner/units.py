"""Uniform access to participants and groups, and virtual candidate expansion."""

from collections.abc import Iterable, Mapping, Sequence

from pod_planner.power import mean_power
from pod_planner.types import Candidate, Group, Participant, Pod, Unit


def unit_id(unit: Unit) -> str:
    match unit:
        case Participant(id=participant_id):
            return participant_id
        case Group(id=group_id):
            return group_id
        case _:
            raise TypeError(f"Not an assignable unit: {unit!r}")


def unit_size(unit: Unit) -> int:
    match unit:
        case Participant():
            return 1
        case Group(members=members):
            return len(members)
        case _:
            raise TypeError(f"Not an assignable unit: {unit!r}")


def unit_participants(unit: Unit) -> tuple[Participant, ...]:
    match unit:
        case Participant():
            return (unit,)
        case Group(members=members):
            return members
        case _:
            raise TypeError(f"Not an assignable unit: {unit!r}")


def unit_group_id(unit: Unit) -> str | None:
    match unit:
        case Participant():
            return None
        case Group(id=group_id):
            return group_id
        case _:
            raise TypeError(f"Not an assignable unit: {unit!r}")


def group_anchors(group: Group) -> tuple[float, ...]:
    """Representative anchors of a group: (mean, min, max), deduplicated.

    The mean is taken over the members' representative powers; min and max
    range over every power any member can play at.
    """
    all_powers = [power for member in group.members for power in member.powers]
    anchors = (
        mean_power(member.power for member in group.members),
        min(all_powers),
        max(all_powers),
    )
    return tuple(dict.fromkeys(anchors))


def unit_anchors(unit: Unit) -> tuple[float, ...]:
    """Admissible anchor powers a unit could seed or join a pod at."""
    match unit:
        case Participant(powers=powers):
            return powers
        case Group():
            return group_anchors(unit)
        case _:
            raise TypeError(f"Not an assignable unit: {unit!r}")


def total_size(units: Iterable[Unit]) -> int:
    return sum(unit_size(unit) for unit in units)


def pod_size(pod: Pod) -> int:
    return total_size(pod.members)


def flatten_participants(units: Iterable[Unit]) -> list[Participant]:
    return [participant for unit in units for participant in unit_participants(unit)]


def expand_candidates(units: Iterable[Unit]) -> list[Candidate]:
    """Expand every unit into one candidate per admissible anchor.

    Groups only expand over their three representative anchors, not over every
    power of every member.
    """
    return [
        Candidate(unit=unit, anchor=anchor)
        for unit in units
        for anchor in unit_anchors(unit)
    ]


def build_units(
    participants: Sequence[Participant],
    grouping: Mapping[str, Sequence[str]] | None = None,
) -> list[Unit]:
    """Turn validated participants and a grouping map into assignable units.

    Parameters:
        participants: Validated participants, in roster order
        grouping: Group id -> ordered participant ids of its members

    Returns:
        Ungrouped participants in roster order, followed by one Group per
        non-empty grouping entry

    Raises:
        ValueError: If a grouping references an unknown participant, or a
                    participant belongs to more than one group
    """
    by_id = {participant.id: participant for participant in participants}
    grouped: dict[str, str] = {}
    groups: list[Group] = []

    for group_id, member_ids in (grouping or {}).items():
        members = []
        for member_id in member_ids:
            if member_id not in by_id:
                raise ValueError(
                    f"Group '{group_id}' references unknown participant '{member_id}'"
                )
            if member_id in grouped:
                raise ValueError(
                    f"Participant '{member_id}' is in both group "
                    f"'{grouped[member_id]}' and group '{group_id}'"
                )
            grouped[member_id] = group_id
            members.append(by_id[member_id])
        if members:
            groups.append(Group(id=group_id, members=tuple(members)))

    units: list[Unit] = [p for p in participants if p.id not in grouped]
    units.extend(groups)
    return units
