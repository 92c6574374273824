"""Tests for the allocation engine."""

import pytest

from tests.fixtures import constraint
from timebox.allocation import WarningType, calculate_allocations, round_half_up


class TestWorkedExamples:
    """Reference allocations that must be reproduced exactly."""

    def test_equal_weights_split_evenly(self):
        result = calculate_allocations(
            [constraint("A", priority=1), constraint("B", priority=2)], 100
        )
        assert result.as_minutes() == {"A": 50, "B": 50}
        assert result.warnings == []
        assert result.is_valid is True
        assert result.total_allocated == 100

    def test_over_committed_minimums_are_scaled(self):
        result = calculate_allocations(
            [constraint("A", priority=1, min=40), constraint("B", priority=2, min=40)], 60
        )
        # ratio 60/80 -> 30 + 30, nothing left to settle
        assert result.as_minutes() == {"A": 30, "B": 30}
        assert result.is_valid is True

        warning = result.warning(WarningType.OVER_COMMITTED_MINIMUMS)
        assert warning is not None
        assert warning.details == {"excess_minutes": 20, "suggested_minutes": 80}

    def test_over_committed_remainder_lands_on_highest_priority(self):
        result = calculate_allocations(
            [
                constraint("A", priority=2, min=40),
                constraint("B", priority=1, min=40),
                constraint("C", priority=3, min=40),
            ],
            100,
        )
        # ratio 100/120 -> 33 each, the missing minute goes to B
        assert result.as_minutes() == {"A": 33, "B": 34, "C": 33}
        assert result.total_allocated == 100
        warning = result.warning(WarningType.OVER_COMMITTED_MINIMUMS)
        assert warning.details == {"excess_minutes": 20, "suggested_minutes": 120}

    def test_capped_excess_flows_to_uncapped(self):
        result = calculate_allocations(
            [constraint("A", priority=1, max=10), constraint("B", priority=2)], 100
        )
        assert result.as_minutes() == {"A": 10, "B": 90}
        assert result.warnings == []


class TestNoCategories:
    def test_empty_input_is_invalid(self):
        result = calculate_allocations([], 60)
        assert result.is_valid is False
        assert result.allocations == []
        assert result.total_allocated == 0
        assert [w.type for w in result.warnings] == [WarningType.NO_CONTEXTS]


class TestDistribution:
    def test_minimum_seeded_before_weights(self):
        result = calculate_allocations([constraint("A", min=30), constraint("B", weight=3)], 70)
        # 40 remaining: A +10, B +30
        assert result.as_minutes() == {"A": 40, "B": 30}

    def test_zero_weights_split_equally(self):
        result = calculate_allocations(
            [constraint("A", weight=0), constraint("B", weight=0)], 10
        )
        assert result.as_minutes() == {"A": 5, "B": 5}

    def test_cascading_caps(self):
        result = calculate_allocations(
            [constraint("A", max=10), constraint("B", max=30), constraint("C")], 90
        )
        assert result.as_minutes() == {"A": 10, "B": 30, "C": 50}
        assert result.warnings == []

    def test_minimum_equal_to_session(self):
        result = calculate_allocations([constraint("A", min=30), constraint("B", min=30)], 60)
        assert result.as_minutes() == {"A": 30, "B": 30}
        assert result.warnings == []

    def test_over_committed_category_without_minimum_gets_nothing(self):
        result = calculate_allocations([constraint("A", min=50), constraint("B")], 25)
        assert result.as_minutes() == {"A": 25, "B": 0}


class TestUnderUtilizedMaximums:
    def test_all_capped_reports_unused_minutes(self):
        result = calculate_allocations([constraint("A", max=10), constraint("B", max=20)], 60)
        warning = result.warning(WarningType.UNDER_UTILIZED_MAXIMUMS)
        assert warning is not None
        assert warning.details == {"unused_minutes": 30}
        assert result.is_valid is True
        # The session total is still honoured; the anchor absorbs the rest
        assert result.total_allocated == 60
        assert result.as_minutes() == {"A": 40, "B": 20}

    def test_small_shortfall_is_tolerated(self):
        result = calculate_allocations([constraint("A", max=50), constraint("B")], 100)
        assert result.warning(WarningType.UNDER_UTILIZED_MAXIMUMS) is None


class TestRounding:
    def test_remainder_goes_to_highest_priority(self):
        result = calculate_allocations(
            [constraint("A", priority=2), constraint("B", priority=1), constraint("C", priority=1)], 100
        )
        # 33.33 each -> 99, B is the first priority-1 category
        assert result.as_minutes() == {"A": 33, "B": 34, "C": 33}

    def test_priority_ties_resolved_by_input_order(self):
        result = calculate_allocations([constraint("A"), constraint("B"), constraint("C")], 100)
        assert result.as_minutes() == {"A": 34, "B": 33, "C": 33}

    def test_halves_round_up(self):
        result = calculate_allocations(
            [constraint("A", priority=2), constraint("B", priority=1)], 5
        )
        # 2.5 + 2.5 -> 3 + 3 = 6, anchor B gives one back
        assert result.as_minutes() == {"A": 3, "B": 2}

    def test_anchor_can_drift_below_zero(self):
        result = calculate_allocations(
            [constraint("A", priority=1, max=0), constraint("B"), constraint("C")], 5
        )
        # B and C round 2.5 -> 3 each; the capped anchor gives back the extra minute
        assert result.as_minutes() == {"A": -1, "B": 3, "C": 3}
        assert result.warnings == []
        assert result.total_allocated == 5

    def test_anchor_can_drift_above_max(self):
        result = calculate_allocations(
            [constraint("A", priority=1, max=10), constraint("B"), constraint("C"), constraint("D")], 101
        )
        # 30.33 x 3 rounds to 90; the anchor takes the lost minute past its cap
        assert result.as_minutes() == {"A": 11, "B": 30, "C": 30, "D": 30}
        assert result.warnings == []

    @pytest.mark.parametrize(
        "value,expected",
        [(2.5, 3), (3.5, 4), (2.4999, 2), (-2.5, -2), (0.0, 0)],
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestPurity:
    def test_same_input_same_output(self):
        constraints = [constraint("A", priority=1, min=15, weight=2), constraint("B", max=25)]
        first = calculate_allocations(constraints, 95)
        second = calculate_allocations(constraints, 95)
        assert first.to_dict() == second.to_dict()

    def test_result_allocations_start_unused(self):
        result = calculate_allocations([constraint("A")], 30)
        alloc = result.allocations[0]
        assert alloc.used_minutes == 0
        assert alloc.adjusted_minutes == 0

    def test_to_dict_shape(self):
        result = calculate_allocations([constraint("A", min=40), constraint("B", min=40)], 60)
        data = result.to_dict()
        assert data["is_valid"] is True
        assert data["warnings"][0]["type"] == "over_committed_minimums"
        assert data["allocations"][0]["category_id"] == "A"
