"""
Session presets - reusable allocation plans.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from timebox.allocation.models import CategoryAllocation

from .models import AppState, SessionPreset, generate_id

logger = logging.getLogger(__name__)


def save_preset(
    state: AppState,
    name: str,
    total_duration: int,
    allocations: Sequence[CategoryAllocation],
    created_at: datetime,
) -> SessionPreset:
    """Store a plan under a name. Usage is stripped; only the budget is kept."""
    preset = SessionPreset(
        id=generate_id("pre"),
        name=name.strip() or "Untitled",
        total_duration=total_duration,
        allocations=[
            CategoryAllocation(category_id=a.category_id, allocated_minutes=a.allocated_minutes)
            for a in allocations
        ],
        category_ids=[a.category_id for a in allocations],
        created_at=created_at,
    )
    state.presets.append(preset)
    logger.info("Saved preset %r (%d min)", preset.name, preset.total_duration)
    return preset


def find_preset(state: AppState, preset_id: str) -> SessionPreset | None:
    for preset in state.presets:
        if preset.id == preset_id or preset.name == preset_id:
            return preset
    return None


def apply_preset(preset: SessionPreset) -> list[CategoryAllocation]:
    """Fresh allocations for a new session: no usage, no adjustments."""
    return [
        CategoryAllocation(category_id=a.category_id, allocated_minutes=a.allocated_minutes)
        for a in preset.allocations
    ]


def delete_preset(state: AppState, preset_id: str) -> bool:
    preset = find_preset(state, preset_id)
    if preset is None:
        return False
    state.presets.remove(preset)
    logger.info("Deleted preset %r", preset.name)
    return True
