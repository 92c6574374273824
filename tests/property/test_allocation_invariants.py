"""
Property-based tests for allocation invariants using Hypothesis.

Random category sets and session lengths stress the solver; the budget
must always add up and respect bounds wherever rounding allows.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from timebox.allocation import AllocationConstraint, WarningType, calculate_allocations

# ============================================================================
# Strategies
# ============================================================================


@st.composite
def constraint_sets(draw):
    n = draw(st.integers(min_value=1, max_value=6))
    constraints = []
    for i in range(n):
        min_duration = draw(st.one_of(st.none(), st.integers(min_value=0, max_value=90)))
        max_duration = draw(
            st.one_of(st.none(), st.integers(min_value=min_duration or 0, max_value=240))
        )
        constraints.append(
            AllocationConstraint(
                id=f"c{i}",
                priority=draw(st.integers(min_value=1, max_value=5)),
                weight=draw(st.floats(min_value=0.0, max_value=10.0, allow_nan=False)),
                min_duration=min_duration,
                max_duration=max_duration,
            )
        )
    return constraints


totals = st.integers(min_value=1, max_value=720)


def _anchor(constraints):
    return min(range(len(constraints)), key=lambda i: (constraints[i].priority, i))


# ============================================================================
# Sum and Shape
# ============================================================================


@given(constraint_sets(), totals)
@settings(max_examples=300)
def test_budget_sums_to_session(constraints, total):
    """Whatever the constraints, the whole-minute budget adds up exactly."""
    result = calculate_allocations(constraints, total)
    assert result.is_valid
    assert result.total_allocated == total
    assert sum(a.allocated_minutes for a in result.allocations) == total


@given(constraint_sets(), totals)
def test_one_allocation_per_category_in_order(constraints, total):
    result = calculate_allocations(constraints, total)
    assert [a.category_id for a in result.allocations] == [c.id for c in constraints]
    assert all(a.used_minutes == 0 and a.adjusted_minutes == 0 for a in result.allocations)


@given(constraint_sets(), totals)
def test_deterministic(constraints, total):
    assert calculate_allocations(constraints, total).to_dict() == calculate_allocations(constraints, total).to_dict()


# ============================================================================
# Bounds
# ============================================================================


@given(constraint_sets(), totals)
@settings(max_examples=300)
def test_bounds_respected_when_feasible(constraints, total):
    """
    With no over-commit and no unusable time, every category other than the
    anchor sits inside its bounds.

    The anchor absorbs the rounding difference, so it is only held to its
    bounds within one minute per category. It can end below its minimum,
    above its maximum, or below zero.
    """
    result = calculate_allocations(constraints, total)
    if result.warnings:
        return

    anchor = _anchor(constraints)
    slack = len(constraints)
    for i, (c, a) in enumerate(zip(constraints, result.allocations, strict=True)):
        lower = c.min_duration or 0
        upper = c.max_duration if c.max_duration is not None else total
        if i == anchor:
            assert lower - slack <= a.allocated_minutes <= upper + slack
        else:
            assert lower <= a.allocated_minutes <= upper


@given(constraint_sets(), totals)
def test_over_commit_reported_iff_minimums_exceed(constraints, total):
    result = calculate_allocations(constraints, total)
    sum_min = sum(c.min_duration or 0 for c in constraints)
    over = result.warning(WarningType.OVER_COMMITTED_MINIMUMS)
    assert (over is not None) == (sum_min > total)
    if over is not None:
        assert over.details["excess_minutes"] == sum_min - total


@given(st.integers(min_value=0, max_value=720))
def test_no_categories_is_invalid(total):
    result = calculate_allocations([], total)
    assert not result.is_valid
    assert result.allocations == []
    assert result.warning(WarningType.NO_CONTEXTS) is not None
