"""
Contracts Module - Pydantic models for persisted and user-supplied shapes.

Everything crossing a process boundary (the saved app state, category
definition files) is validated here before it is turned into domain
objects. Validation failure is a hard gate: callers fall back or report,
they never half-load.
"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

SCHEMA_VERSION = 1


# =============================================================================
# CATEGORY DEFINITIONS (input)
# =============================================================================


class CategorySpec(BaseModel):
    """One category as written in a categories file."""

    id: str = Field(min_length=1)
    priority: int = Field(ge=1, le=5, default=3)
    weight: float = Field(ge=0.0, default=1.0)
    min_duration: int | None = Field(ge=0, default=None)
    max_duration: int | None = Field(ge=0, default=None)

    @model_validator(mode="after")
    def _min_not_above_max(self) -> "CategorySpec":
        if (
            self.min_duration is not None
            and self.max_duration is not None
            and self.min_duration > self.max_duration
        ):
            raise ValueError(
                f"category {self.id}: min_duration {self.min_duration} exceeds max_duration {self.max_duration}"
            )
        return self


class CategoryFile(BaseModel):
    categories: list[CategorySpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> "CategoryFile":
        seen: set[str] = set()
        for c in self.categories:
            if c.id in seen:
                raise ValueError(f"duplicate category id: {c.id}")
            seen.add(c.id)
        return self


# =============================================================================
# PERSISTED STATE
# =============================================================================


class AllocationSnapshot(BaseModel):
    category_id: str
    allocated_minutes: int
    used_minutes: float = Field(ge=0.0, default=0.0)
    adjusted_minutes: float = 0.0


class SessionSnapshot(BaseModel):
    id: str
    total_duration: int = Field(ge=0)
    started_at: str
    allocations: list[AllocationSnapshot]
    active_category_id: str | None = None
    category_started_at: str | None = None
    status: Literal["active", "paused", "suspended", "completed"]


class PresetSnapshot(BaseModel):
    id: str
    name: str
    total_duration: int = Field(ge=0)
    allocations: list[AllocationSnapshot]
    category_ids: list[str] = Field(default_factory=list)
    created_at: str | None = None


class AppStateSnapshot(BaseModel):
    schema_version: int = SCHEMA_VERSION
    mode: Literal["definition", "working"] = "definition"
    session: SessionSnapshot | None = None
    presets: list[PresetSnapshot] = Field(default_factory=list)
