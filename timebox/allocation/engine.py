"""
Allocation Engine - Turn category constraints into a whole-minute budget.

Algorithm:
1. No categories -> invalid result with a no_contexts warning
2. Minimums exceed the session -> scale minimums down proportionally
3. Seed every category with its minimum
4. Spread the remaining time by weight (equally when all weights are 0)
5. Clamp categories above their maximum and redistribute the excess
6. Round to whole minutes; the highest-priority category absorbs the
   rounding difference so the budget sums to the session length exactly

Pure and deterministic. Never raises: every anomaly is reported as a
warning on the result.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from .models import (
    AllocationConstraint,
    AllocationResult,
    AllocationWarning,
    CategoryAllocation,
    WarningType,
)

logger = logging.getLogger(__name__)

# Shortfall (minutes) tolerated before reporting under-utilized maximums
UNDER_UTILIZED_TOLERANCE = 0.5


@dataclass
class _Working:
    """Mutable per-category state while the solver runs."""

    category_id: str
    priority: int
    weight: float
    max_duration: int | None
    allocated: float
    capped: bool = False


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def _anchor_index(priorities: Sequence[int]) -> int:
    """
    Index of the category that absorbs rounding differences.

    Lowest priority number wins; among equal priorities the earliest
    category in input order wins.
    """
    return min(range(len(priorities)), key=lambda i: (priorities[i], i))


def _spread(amount: float, working: list[_Working]) -> None:
    """Add amount across uncapped categories by weight, or equally if weightless."""
    uncapped = [w for w in working if not w.capped]
    if not uncapped:
        return

    total_weight = sum(w.weight for w in uncapped)
    if total_weight > 0:
        for w in uncapped:
            w.allocated += amount * (w.weight / total_weight)
    else:
        share = amount / len(uncapped)
        for w in uncapped:
            w.allocated += share


def _settle(allocations: list[CategoryAllocation], priorities: Sequence[int], total_minutes: int) -> None:
    """Push the rounding difference onto the anchor category."""
    diff = total_minutes - sum(a.allocated_minutes for a in allocations)
    if diff != 0 and allocations:
        allocations[_anchor_index(priorities)].allocated_minutes += diff


def _scale_minimums(
    constraints: Sequence[AllocationConstraint], total_minutes: int, sum_min: int
) -> AllocationResult:
    excess = sum_min - total_minutes
    warning = AllocationWarning(
        type=WarningType.OVER_COMMITTED_MINIMUMS,
        message=f"Minimum durations exceed session time by {excess} minutes.",
        details={"excess_minutes": excess, "suggested_minutes": sum_min},
    )

    ratio = total_minutes / sum_min
    allocations = [
        CategoryAllocation(
            category_id=c.id,
            allocated_minutes=round_half_up((c.min_duration or 0) * ratio),
        )
        for c in constraints
    ]
    _settle(allocations, [c.priority for c in constraints], total_minutes)

    logger.info(
        "Minimums over-committed by %d min; scaled by %.3f across %d categories",
        excess,
        ratio,
        len(allocations),
    )
    return AllocationResult(
        allocations=allocations,
        total_allocated=sum(a.allocated_minutes for a in allocations),
        warnings=[warning],
        is_valid=True,
    )


def calculate_allocations(
    constraints: Sequence[AllocationConstraint], total_minutes: int
) -> AllocationResult:
    """
    Compute a minute budget per category.

    Args:
        constraints: Category constraints, in display order
        total_minutes: Session length in whole minutes

    Returns:
        AllocationResult whose allocations sum to total_minutes whenever
        at least one category is given
    """
    if not constraints:
        return AllocationResult(
            allocations=[],
            total_allocated=0,
            warnings=[
                AllocationWarning(
                    type=WarningType.NO_CONTEXTS,
                    message="No categories defined. Create at least one category to start a session.",
                )
            ],
            is_valid=False,
        )

    sum_min = sum(c.min_duration or 0 for c in constraints)
    if sum_min > total_minutes and sum_min > 0:
        return _scale_minimums(constraints, total_minutes, sum_min)

    warnings: list[AllocationWarning] = []
    working = [
        _Working(
            category_id=c.id,
            priority=c.priority,
            weight=c.weight,
            max_duration=c.max_duration,
            allocated=float(c.min_duration or 0),
        )
        for c in constraints
    ]

    remaining = total_minutes - sum_min
    if remaining > 0:
        _spread(remaining, working)

    # Each pass caps at least one new category or ends the loop, so
    # len + 1 passes always suffice.
    max_passes = len(working) + 1
    passes = 0
    violation = True
    while violation and passes < max_passes:
        violation = False
        passes += 1
        for w in working:
            if w.capped or w.max_duration is None or w.allocated <= w.max_duration:
                continue
            excess = w.allocated - w.max_duration
            w.allocated = float(w.max_duration)
            w.capped = True
            violation = True
            _spread(excess, working)

    tentative = sum(w.allocated for w in working)
    if tentative < total_minutes - UNDER_UTILIZED_TOLERANCE:
        unused = round_half_up(total_minutes - tentative)
        warnings.append(
            AllocationWarning(
                type=WarningType.UNDER_UTILIZED_MAXIMUMS,
                message=f"Maximum caps prevent using {unused} minutes of session time.",
                details={"unused_minutes": unused},
            )
        )
        logger.info("Maximum caps leave %d min unallocated", unused)

    allocations = [
        CategoryAllocation(category_id=w.category_id, allocated_minutes=round_half_up(w.allocated))
        for w in working
    ]
    _settle(allocations, [w.priority for w in working], total_minutes)

    logger.debug(
        "Allocated %d min across %d categories in %d cap passes",
        total_minutes,
        len(allocations),
        passes,
    )
    return AllocationResult(
        allocations=allocations,
        total_allocated=sum(a.allocated_minutes for a in allocations),
        warnings=warnings,
        is_valid=True,
    )
