"""Target pod size planning."""

from pod_planner.types import PlanStrategy

MIN_POD_SIZE = 3

_SMALL_TOTALS = {
    3: [3],
    4: [4],
    5: [5],
    6: [3, 3],
    7: [4, 3],
    8: [4, 4],
    9: [3, 3, 3],
    10: [5, 5],
}

_AVOID_FIVE_TOTALS = {
    9: [3, 3, 3],
    10: [4, 3, 3],
    11: [4, 4, 3],
    12: [4, 4, 4],
    13: [4, 3, 3, 3],
    14: [4, 4, 3, 3],
    15: [4, 4, 4, 3],
}


def _balanced(total: int) -> list[int]:
    if total in _SMALL_TOTALS:
        return list(_SMALL_TOTALS[total])

    fours, remainder = divmod(total, 4)
    if remainder == 0:
        return [4] * fours
    if remainder == 1:
        # 4,4,1 -> 5,4; totals above 10 always leave at least two 4s
        return [4] * (fours - 2) + [5, 4]
    if remainder == 2:
        # 4,2 -> 3,3
        return [4] * (fours - 1) + [3, 3]
    return [4] * fours + [3]


def _avoid_five(total: int) -> list[int]:
    if total < 9:
        return _balanced(total)
    if total in _AVOID_FIVE_TOTALS:
        return list(_AVOID_FIVE_TOTALS[total])

    sizes: list[int] = []
    remaining = total
    while remaining >= 7:
        sizes.append(4)
        remaining -= 4

    if remaining == 6:
        sizes.extend([3, 3])
    elif remaining == 5:
        # 4 + 5 -> 3 + 3 + 3
        sizes.pop()
        sizes.extend([3, 3, 3])
    else:
        sizes.append(remaining)

    return sorted(sizes, reverse=True)


def plan_pod_sizes(
    total: int, strategy: PlanStrategy = PlanStrategy.BALANCED
) -> list[int]:
    """Derive the ordered target pod sizes for a participant count.

    Sizes stay within [3, 5] and sum to `total`. Totals below 3 cannot seat a
    pod and give an empty plan. The plan is a target: the search may
    under-fill or skip sizes it cannot satisfy.

    Raises:
        ValueError: If total is negative
    """
    if total < 0:
        raise ValueError("total must be non-negative")
    if total < MIN_POD_SIZE:
        return []
    if strategy == PlanStrategy.AVOID_FIVE:
        return _avoid_five(total)
    return _balanced(total)
