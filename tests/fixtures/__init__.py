"""
Test fixtures for deterministic testing.

This module provides:
- constraint(): terse AllocationConstraint builder
- persisted_state(): raw JSON-ready snapshot as a previous process saved it
"""

from .factories import constraint, persisted_state

__all__ = ["constraint", "persisted_state"]
