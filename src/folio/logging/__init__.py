"""
Structured logging for Folio.

``get_logger`` is safe to call at import time; it falls back to WARNING
records on stderr until the CLI configures logging from its options and
settings.
"""

from folio.logging.setup import (
    bound_post,
    get_logger,
    get_session_id,
    log_error,
    log_execution_context,
    log_execution_end,
    log_execution_start,
    setup_logging,
)

__all__ = [
    "bound_post",
    "get_logger",
    "get_session_id",
    "log_error",
    "log_execution_context",
    "log_execution_end",
    "log_execution_start",
    "setup_logging",
]
