"""
Allocation models.

Constraints go in, a per-category minute budget comes out. The
CategoryAllocation produced here is the same object a Session carries for
its whole lifetime.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from timebox import config


class WarningType(StrEnum):
    """Anomalies the allocation engine reports instead of raising."""

    NO_CONTEXTS = "no_contexts"
    OVER_COMMITTED_MINIMUMS = "over_committed_minimums"
    UNDER_UTILIZED_MAXIMUMS = "under_utilized_maximums"


@dataclass(frozen=True)
class AllocationConstraint:
    """Snapshot of one category's scheduling constraints. Input only."""

    id: str
    priority: int = config.DEFAULT_PRIORITY  # 1-5, 1 = highest
    weight: float = config.DEFAULT_WEIGHT
    min_duration: int | None = None  # minutes
    max_duration: int | None = None  # minutes


@dataclass
class CategoryAllocation:
    category_id: str
    allocated_minutes: int  # frozen once a session starts
    used_minutes: float = 0.0
    adjusted_minutes: float = 0.0  # signed runtime correction

    @property
    def budget_minutes(self) -> float:
        """Allocation including any runtime adjustment."""
        return self.allocated_minutes + self.adjusted_minutes

    def to_dict(self) -> dict[str, Any]:
        return {
            "category_id": self.category_id,
            "allocated_minutes": self.allocated_minutes,
            "used_minutes": self.used_minutes,
            "adjusted_minutes": self.adjusted_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CategoryAllocation":
        return cls(
            category_id=data["category_id"],
            allocated_minutes=int(data["allocated_minutes"]),
            used_minutes=float(data.get("used_minutes", 0.0)),
            adjusted_minutes=float(data.get("adjusted_minutes", 0.0)),
        )


@dataclass
class AllocationWarning:
    type: WarningType
    message: str
    details: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": str(self.type), "message": self.message}
        if self.details:
            data["details"] = dict(self.details)
        return data


@dataclass
class AllocationResult:
    allocations: list[CategoryAllocation]
    total_allocated: int
    warnings: list[AllocationWarning] = field(default_factory=list)
    is_valid: bool = True

    def warning(self, warning_type: WarningType) -> AllocationWarning | None:
        """First warning of the given type, if any."""
        for w in self.warnings:
            if w.type == warning_type:
                return w
        return None

    def as_minutes(self) -> dict[str, int]:
        """category_id -> allocated minutes, in input order."""
        return {a.category_id: a.allocated_minutes for a in self.allocations}

    def to_dict(self) -> dict[str, Any]:
        return {
            "allocations": [a.to_dict() for a in self.allocations],
            "total_allocated": self.total_allocated,
            "warnings": [w.to_dict() for w in self.warnings],
            "is_valid": self.is_valid,
        }
