"""Tests for pod size planning."""

import pytest

from pod_planner.planner import plan_pod_sizes
from pod_planner.types import PlanStrategy


class TestBalancedPlan:
    @pytest.mark.parametrize(
        "total, expected",
        [
            (3, [3]),
            (4, [4]),
            (5, [5]),
            (6, [3, 3]),
            (7, [4, 3]),
            (8, [4, 4]),
            (9, [3, 3, 3]),
            (10, [5, 5]),
        ],
    )
    def test_small_totals(self, total, expected):
        assert plan_pod_sizes(total) == expected

    def test_multiple_of_four(self):
        assert plan_pod_sizes(12) == [4, 4, 4]
        assert plan_pod_sizes(20) == [4, 4, 4, 4, 4]

    def test_remainder_one_makes_a_five(self):
        assert plan_pod_sizes(13) == [4, 5, 4]
        assert plan_pod_sizes(17) == [4, 4, 5, 4]

    def test_remainder_two_splits_a_four(self):
        assert plan_pod_sizes(14) == [4, 4, 3, 3]

    def test_remainder_three_adds_a_three(self):
        assert plan_pod_sizes(11) == [4, 4, 3]
        assert plan_pod_sizes(15) == [4, 4, 4, 3]


class TestAvoidFivePlan:
    def test_small_totals_match_balanced(self):
        for total in range(3, 9):
            assert plan_pod_sizes(total, PlanStrategy.AVOID_FIVE) == plan_pod_sizes(total)

    @pytest.mark.parametrize(
        "total, expected",
        [
            (9, [3, 3, 3]),
            (10, [4, 3, 3]),
            (13, [4, 3, 3, 3]),
            (16, [4, 4, 4, 4]),
            (17, [4, 4, 3, 3, 3]),
            (18, [4, 4, 4, 3, 3]),
            (19, [4, 4, 4, 4, 3]),
        ],
    )
    def test_larger_totals(self, total, expected):
        assert plan_pod_sizes(total, PlanStrategy.AVOID_FIVE) == expected

    def test_never_plans_a_five_from_nine(self):
        for total in range(9, 60):
            assert 5 not in plan_pod_sizes(total, PlanStrategy.AVOID_FIVE)


class TestPlanProperties:
    @pytest.mark.parametrize("strategy", list(PlanStrategy))
    def test_sizes_sum_to_total(self, strategy):
        for total in range(3, 101):
            sizes = plan_pod_sizes(total, strategy)
            assert sum(sizes) == total, f"plan({total}) = {sizes}"
            assert all(3 <= size <= 5 for size in sizes), f"plan({total}) = {sizes}"

    def test_below_three_is_empty(self):
        assert plan_pod_sizes(0) == []
        assert plan_pod_sizes(2) == []

    def test_negative_total_raises_error(self):
        with pytest.raises(ValueError, match="non-negative"):
            plan_pod_sizes(-1)
