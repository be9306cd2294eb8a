"""
Core Infrastructure Module.

Provides foundational patterns and utilities:
- Cooperative cancellation contexts for long-running checks
- Shared error types
"""

from src.core.context import (
    CheckCancelledError,
    CheckContext,
    CheckDeadlineExceededError,
)
from src.core.errors import (
    EntityNotFoundError,
    IntegrityCheckError,
    InvalidIDError,
    StoreError,
)

__all__ = [
    # Context
    "CheckContext",
    "CheckCancelledError",
    "CheckDeadlineExceededError",
    # Errors
    "EntityNotFoundError",
    "InvalidIDError",
    "StoreError",
    "IntegrityCheckError",
]
