# Timebox - Core Library
"""
Exports for the CLI and other consumers.
"""

from .allocation import AllocationConstraint, AllocationResult, calculate_allocations
from .session import (
    AppMode,
    AppState,
    RecoveryGuard,
    Session,
    SessionStateMachine,
    SessionStatus,
)

__all__ = [
    "AllocationConstraint",
    "AllocationResult",
    "calculate_allocations",
    "AppMode",
    "AppState",
    "RecoveryGuard",
    "Session",
    "SessionStateMachine",
    "SessionStatus",
]
