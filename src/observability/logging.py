"""
Structured Logging Configuration.

structlog setup for integrity runs:
- Scoped fields (check run, phase) attached through LogContext
- Store file paths rendered relative to the data directory
- Values under sensitive keys redacted
- JSON lines or console output, always on stderr
"""

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from src.config.settings import Settings, get_settings

LogFormat = Literal["json", "console"]

# Fields scoped by LogContext
_log_scope: ContextVar[dict[str, Any]] = ContextVar("log_scope", default={})


class LogContext:
    """
    Attach fields to every event logged inside a with-block.

    Scopes nest; leaving one restores the fields of the enclosing scope.

    Usage:
        with LogContext(check_run="a1b2c3d4"):
            with LogContext(phase="reference"):
                logger.info("Scanning references")
    """

    def __init__(self, **fields: Any):
        self._fields = fields
        self._token = None

    def __enter__(self) -> "LogContext":
        self._token = _log_scope.set({**_log_scope.get(), **self._fields})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self._token is not None:
            _log_scope.reset(self._token)
            self._token = None
        return False


def get_log_context() -> dict[str, Any]:
    """Fields of the innermost active LogContext."""
    return dict(_log_scope.get())


def merge_log_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Copy scoped fields into the event. Keyword arguments of the call win."""
    for key, value in _log_scope.get().items():
        event_dict.setdefault(key, value)
    return event_dict


class StorePathRelativizer:
    """
    Processor rendering path fields relative to the store directory.

    Paths outside the store are left untouched.
    """

    def __init__(self, base_dir: Path, keys: tuple[str, ...] = ("path",)):
        self._base_dir = base_dir.resolve()
        self._keys = keys

    def __call__(
        self,
        logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        for key in self._keys:
            value = event_dict.get(key)
            if not isinstance(value, str):
                continue
            path = Path(value).resolve()
            if path.is_relative_to(self._base_dir):
                event_dict[key] = path.relative_to(self._base_dir).as_posix()
        return event_dict


SENSITIVE_KEYS = frozenset({
    "password", "secret", "token", "api_key", "apikey", "authorization",
    "credential", "private_key",
})

REDACTED = "***REDACTED***"


def censor_sensitive_data(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Redact string values under sensitive keys, including inside nested mappings."""

    def censor(key: str, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: censor(str(k), v) for k, v in value.items()}
        if isinstance(value, str) and any(s in key.lower() for s in SENSITIVE_KEYS):
            return REDACTED
        return value

    for key in list(event_dict):
        event_dict[key] = censor(key, event_dict[key])
    return event_dict


def service_name_adder(service_name: str) -> Processor:
    """Build a processor stamping the service name on each event."""

    def add_service_name(
        logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict["service"] = service_name
        return event_dict

    return add_service_name


def configure_logging(
    level: str = "INFO",
    format: LogFormat = "console",
    service_name: str = "zeus-integrity",
    store_dir: Path | None = None,
) -> None:
    """
    Configure structlog for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: "json" for log collectors, "console" for terminals
        service_name: Value of the "service" field
        store_dir: Data directory that path fields are made relative to
    """
    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        service_name_adder(service_name),
        merge_log_context,
        censor_sensitive_data,
    ]
    if store_dir is not None:
        processors.append(StorePathRelativizer(store_dir))

    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdout is reserved for check reports
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )


def configure_logging_from_settings(settings: Settings | None = None) -> None:
    """Configure logging from application settings."""
    settings = settings or get_settings()
    configure_logging(
        level=settings.log_level,
        format=settings.observability.log_format,
        service_name=settings.app_name.lower().replace(" ", "-"),
        store_dir=settings.store.base_dir,
    )
