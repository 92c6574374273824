"""
Observability module: structured logging and session-scoped log context.

Usage:
    import logging

    from timebox.observability import SessionContext

    logger = logging.getLogger(__name__)

    with SessionContext(session.id):
        logger.info("Category switched", extra={"category_id": "deep"})
"""

from .context import SessionContext, get_session_id, set_session_id
from .logging import HumanFormatter, JSONFormatter, configure_logging

__all__ = [
    # Logging
    "configure_logging",
    "JSONFormatter",
    "HumanFormatter",
    # Context
    "SessionContext",
    "get_session_id",
    "set_session_id",
]
