"""
Session summary, captured just before a session ends.
"""

from dataclasses import dataclass

from .models import Session


@dataclass(frozen=True)
class CategorySummary:
    category_id: str
    allocated_minutes: int
    used_minutes: float

    @property
    def over_minutes(self) -> float:
        return max(0.0, self.used_minutes - self.allocated_minutes)


@dataclass(frozen=True)
class SessionSummary:
    total_duration_minutes: int
    total_used_minutes: float
    breakdown: list[CategorySummary]

    @property
    def completion_pct(self) -> float:
        if self.total_duration_minutes <= 0:
            return 0.0
        return round(self.total_used_minutes / self.total_duration_minutes * 100, 1)


def summarize(session: Session, current_elapsed_minutes: float = 0.0) -> SessionSummary:
    """
    Build the end-of-session summary.

    The live elapsed span is counted toward the active category without
    touching the session itself.
    """
    breakdown = []
    for alloc in session.allocations:
        used = alloc.used_minutes
        if alloc.category_id == session.active_category_id:
            used += max(0.0, current_elapsed_minutes)
        breakdown.append(
            CategorySummary(
                category_id=alloc.category_id,
                allocated_minutes=alloc.allocated_minutes,
                used_minutes=used,
            )
        )

    return SessionSummary(
        total_duration_minutes=session.total_duration,
        total_used_minutes=sum(c.used_minutes for c in breakdown),
        breakdown=breakdown,
    )
