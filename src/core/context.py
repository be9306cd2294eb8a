"""
Check Context.

Cooperative cancellation for long-running scans:
- Explicit cancellation via cancel()
- Optional deadline (timeout in seconds)
- Parent/child propagation

Work is never interrupted mid-step; callers poll raise_if_done() at their
checkpoints.
"""

import time

import structlog

logger = structlog.get_logger(__name__)


class CheckCancelledError(Exception):
    """Raised when a check observes a cancelled context."""

    def __init__(self, message: str = "context canceled"):
        super().__init__(message)


class CheckDeadlineExceededError(CheckCancelledError):
    """Raised when a check observes a context past its deadline."""

    def __init__(self, message: str = "context deadline exceeded"):
        super().__init__(message)


class CheckContext:
    """
    Cancellation and deadline carrier passed through check phases.

    Usage:
        ```python
        ctx = CheckContext(timeout=5.0)
        result = await checker.check_all(ctx)

        # From another coroutine
        ctx.cancel()
        ```
    """

    def __init__(
        self,
        timeout: float | None = None,
        parent: "CheckContext | None" = None,
    ) -> None:
        self._parent = parent
        self._cancelled = False
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @classmethod
    def background(cls) -> "CheckContext":
        """Context that is never cancelled and has no deadline."""
        return cls()

    def with_timeout(self, timeout: float) -> "CheckContext":
        """Derive a child context that also expires after timeout seconds."""
        return CheckContext(timeout=timeout, parent=self)

    def cancel(self) -> None:
        """Cancel this context and every context derived from it."""
        if not self._cancelled:
            logger.debug("Check context cancelled")
        self._cancelled = True

    @property
    def deadline(self) -> float | None:
        """Earliest monotonic deadline along the parent chain."""
        deadlines = [
            d for d in (self._deadline, self._parent.deadline if self._parent else None)
            if d is not None
        ]
        return min(deadlines) if deadlines else None

    def err(self) -> CheckCancelledError | None:
        """Return the reason this context is done, or None while it is live."""
        if self._cancelled:
            return CheckCancelledError()
        if self._parent is not None:
            parent_err = self._parent.err()
            if parent_err is not None:
                return parent_err
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return CheckDeadlineExceededError()
        return None

    @property
    def done(self) -> bool:
        return self.err() is not None

    def raise_if_done(self) -> None:
        """Raise the context's error if it has been cancelled or timed out."""
        err = self.err()
        if err is not None:
            raise err
