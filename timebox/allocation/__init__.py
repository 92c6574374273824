"""
Allocation Module

Turns a snapshot of category constraints plus a session length into a
concrete per-category minute budget.

Objects:
- AllocationConstraint (priority, weight, min/max minutes)
- CategoryAllocation (the budget a session carries)
- AllocationResult (allocations + warnings + validity)

Invariants:
- sum(allocated_minutes) == session minutes for any non-empty input
- Categories are never allocated above their maximum unless every
  category is capped (reported as under_utilized_maximums)
- Identical inputs produce identical outputs
"""

from .durations import format_clock, format_duration, parse_duration, validate_duration
from .engine import calculate_allocations, round_half_up
from .models import (
    AllocationConstraint,
    AllocationResult,
    AllocationWarning,
    CategoryAllocation,
    WarningType,
)

__all__ = [
    "AllocationConstraint",
    "AllocationResult",
    "AllocationWarning",
    "CategoryAllocation",
    "WarningType",
    "calculate_allocations",
    "round_half_up",
    "parse_duration",
    "format_duration",
    "validate_duration",
    "format_clock",
]
