"""
Session models.

A Session carries the budget frozen at start plus the mutable usage that
transitions fold into it. Whether the category clock is running is an
explicit tagged value (Running / Stopped) rather than something read off
the status string.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from timebox.allocation.models import CategoryAllocation


def generate_id(prefix: str = "") -> str:
    """Generate a unique ID with optional prefix."""
    uid = uuid.uuid4().hex[:16]
    if prefix:
        return f"{prefix}_{uid}"
    return uid


class SessionStatus(StrEnum):
    ACTIVE = "active"
    PAUSED = "paused"
    SUSPENDED = "suspended"
    COMPLETED = "completed"


class AppMode(StrEnum):
    """Planning (definition) vs executing a session (working)."""

    DEFINITION = "definition"
    WORKING = "working"


@dataclass(frozen=True)
class Running:
    """The active category's clock has been running since `since`."""

    since: datetime


@dataclass(frozen=True)
class Stopped:
    """No clock is running; nothing accrues."""


ClockState = Running | Stopped


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass
class Session:
    id: str
    total_duration: int  # minutes
    started_at: datetime
    allocations: list[CategoryAllocation]
    active_category_id: str | None
    status: SessionStatus = SessionStatus.ACTIVE
    clock: ClockState = field(default_factory=Stopped)

    @property
    def category_started_at(self) -> datetime | None:
        """When the active category's clock was last anchored, if running."""
        if isinstance(self.clock, Running):
            return self.clock.since
        return None

    @property
    def is_running(self) -> bool:
        return isinstance(self.clock, Running)

    def allocation_for(self, category_id: str | None) -> CategoryAllocation | None:
        for alloc in self.allocations:
            if alloc.category_id == category_id:
                return alloc
        return None

    @property
    def active_allocation(self) -> CategoryAllocation | None:
        return self.allocation_for(self.active_category_id)

    @property
    def total_allocated(self) -> int:
        return sum(a.allocated_minutes for a in self.allocations)

    @property
    def total_used(self) -> float:
        return sum(a.used_minutes for a in self.allocations)

    def to_dict(self) -> dict[str, Any]:
        started = self.category_started_at
        return {
            "id": self.id,
            "total_duration": self.total_duration,
            "started_at": self.started_at.isoformat(),
            "allocations": [a.to_dict() for a in self.allocations],
            "active_category_id": self.active_category_id,
            "category_started_at": started.isoformat() if started else None,
            "status": str(self.status),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        since = _parse_ts(data.get("category_started_at"))
        return cls(
            id=data["id"],
            total_duration=int(data["total_duration"]),
            started_at=datetime.fromisoformat(data["started_at"]),
            allocations=[CategoryAllocation.from_dict(a) for a in data.get("allocations", [])],
            active_category_id=data.get("active_category_id"),
            status=SessionStatus(data.get("status", SessionStatus.ACTIVE)),
            clock=Running(since) if since else Stopped(),
        )


@dataclass
class SessionPreset:
    """A saved allocation plan that can seed future sessions."""

    id: str
    name: str
    total_duration: int
    allocations: list[CategoryAllocation]
    category_ids: list[str] = field(default_factory=list)
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "total_duration": self.total_duration,
            "allocations": [a.to_dict() for a in self.allocations],
            "category_ids": list(self.category_ids),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionPreset":
        return cls(
            id=data["id"],
            name=data["name"],
            total_duration=int(data["total_duration"]),
            allocations=[CategoryAllocation.from_dict(a) for a in data.get("allocations", [])],
            category_ids=list(data.get("category_ids") or []),
            created_at=_parse_ts(data.get("created_at")),
        )


@dataclass
class AppState:
    """Everything persisted between runs."""

    mode: AppMode = AppMode.DEFINITION
    session: Session | None = None
    presets: list[SessionPreset] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": str(self.mode),
            "session": self.session.to_dict() if self.session else None,
            "presets": [p.to_dict() for p in self.presets],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppState":
        session = data.get("session")
        return cls(
            mode=AppMode.WORKING if data.get("mode") == AppMode.WORKING else AppMode.DEFINITION,
            session=Session.from_dict(session) if session else None,
            presets=[SessionPreset.from_dict(p) for p in data.get("presets") or []],
        )
