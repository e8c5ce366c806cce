"""Output formatting and export for pod assignments."""

import csv
from pathlib import Path

from pod_planner.types import AssignmentResult, Group, Participant, Unit
from pod_planner.units import unit_participants


def describe_unit(unit: Unit) -> str:
    """One-line label for a participant or group."""
    match unit:
        case Participant(name=name, powers=powers):
            return f"{name} ({', '.join(f'{p:g}' for p in powers)})"
        case Group(id=group_id, members=members):
            names = ", ".join(member.name for member in members)
            return f"[{group_id}: {names}]"
        case _:
            raise TypeError(f"Not an assignable unit: {unit!r}")


def print_pod_summary(result: AssignmentResult) -> None:
    """Pretty-print pod assignments."""
    print(f"\n=== Pods Formed: {len(result.pods)} ===\n")

    if result.metrics:
        m = result.metrics
        print(f"Target Sizes: {', '.join(str(s) for s in result.target_sizes) or '-'}")
        print(f"Participants Seated: {m.participants_seated}")
        print(f"Participants Unassigned: {m.participants_unassigned}")
        print(f"Seat Rate: {m.seat_rate:.0%}")

        print("\nPod Sizes:")
        for size, count in m.pod_size_distribution.items():
            print(f"  {size}: {count}")

        if m.tolerance_violations:
            print("\n⚠️  Tolerance Violations:")
            for v in m.tolerance_violations:
                print(f"  - {v}")

    print("\n=== Pods ===")
    for number, pod in enumerate(result.pods, start=1):
        members = "; ".join(describe_unit(member) for member in pod.members)
        print(f"Pod {number} (power {pod.anchor_power:g}): {members}")

    if result.unassigned:
        print("\n=== Unassigned ===")
        for unit in result.unassigned:
            print(describe_unit(unit))


def export_results_to_csv(result: AssignmentResult, filepath: Path | str) -> None:
    """Export participant assignments to CSV."""
    names = {
        participant.id: participant.name
        for pod in result.pods
        for member in pod.members
        for participant in unit_participants(member)
    }
    names.update(
        (participant.id, participant.name)
        for unit in result.unassigned
        for participant in unit_participants(unit)
    )

    try:
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(
                ["participant_id", "name", "group_id", "pod", "pod_power", "status"]
            )
            for participant, assignment in sorted(result.participant_assignments.items()):
                writer.writerow([
                    participant,
                    names.get(participant, participant),
                    assignment.group_id or "",
                    assignment.pod_number or "",
                    f"{assignment.pod_anchor:g}" if assignment.pod_anchor is not None else "",
                    assignment.status.value,
                ])
    except OSError as e:
        raise OSError(f"Failed to write results to '{filepath}': {e}") from e
