"""
Observability Module.

Structured logging with JSON or console output and scoped log context.
"""

from src.observability.logging import (
    LogContext,
    censor_sensitive_data,
    configure_logging,
    configure_logging_from_settings,
    get_log_context,
)

__all__ = [
    "censor_sensitive_data",
    "configure_logging",
    "configure_logging_from_settings",
    "get_log_context",
    "LogContext",
]
