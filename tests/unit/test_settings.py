"""
Unit Tests for Settings and Logging Configuration.
"""

from pathlib import Path

import pytest
import structlog

from src.config.settings import IntegritySettings, get_settings
from src.observability.logging import (
    LogContext,
    StorePathRelativizer,
    censor_sensitive_data,
    configure_logging,
    configure_logging_from_settings,
    get_log_context,
    merge_log_context,
    service_name_adder,
)


class TestSettings:
    """Test cases for environment-driven settings."""

    def test_defaults(self) -> None:
        settings = get_settings()

        assert settings.store.base_dir == Path(".zeus")
        assert settings.integrity.fold_parent_into_dependencies is True
        assert settings.integrity.log_findings is False
        assert settings.observability.log_format == "console"

    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORE_BASE_DIR", "/srv/project/.zeus")
        monkeypatch.setenv("INTEGRITY_FOLD_PARENT_INTO_DEPENDENCIES", "false")
        monkeypatch.setenv("OBSERVABILITY_LOG_FORMAT", "json")

        settings = get_settings()

        assert settings.store.base_dir == Path("/srv/project/.zeus")
        assert settings.integrity.fold_parent_into_dependencies is False
        assert settings.observability.log_format == "json"

    def test_log_level_normalized(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert get_settings().log_level == "DEBUG"

    def test_integrity_settings_direct(self) -> None:
        settings = IntegritySettings(log_findings=True)

        assert settings.log_findings is True


class TestLogging:
    """Test cases for the structlog processor chain."""

    def test_log_context_scoped(self) -> None:
        with LogContext(check_run="abc12345"):
            with LogContext(phase="reference"):
                assert get_log_context() == {"check_run": "abc12345", "phase": "reference"}
            assert get_log_context() == {"check_run": "abc12345"}

        assert get_log_context() == {}

    def test_merge_log_context(self) -> None:
        with LogContext(check_run="abc12345", phase="cycle"):
            event = merge_log_context(None, "info", {"event": "Scanning references", "phase": "warning"})

        assert event["check_run"] == "abc12345"
        assert event["phase"] == "warning"

    def test_store_paths_relativized(self, tmp_path: Path) -> None:
        relativize = StorePathRelativizer(tmp_path)
        inside = str(tmp_path / "objectives" / "obj-001.yaml")

        event = relativize(None, "debug", {"event": "Skipping empty entity file", "path": inside})
        outside = relativize(None, "debug", {"event": "x", "path": "/etc/hosts"})

        assert event["path"] == "objectives/obj-001.yaml"
        assert outside["path"] == "/etc/hosts"

    def test_service_name_adder(self) -> None:
        event = service_name_adder("zeus-test")(None, "info", {"event": "x"})

        assert event["service"] == "zeus-test"

    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_configure_logging(self, log_format: str, tmp_path: Path) -> None:
        try:
            configure_logging(level="DEBUG", format=log_format, store_dir=tmp_path)

            processors = structlog.get_config()["processors"]
            assert structlog.is_configured()
            assert any(isinstance(p, StorePathRelativizer) for p in processors)
            if log_format == "json":
                assert isinstance(processors[-1], structlog.processors.JSONRenderer)
            else:
                assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        finally:
            structlog.reset_defaults()

    def test_configure_logging_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OBSERVABILITY_LOG_FORMAT", "json")
        try:
            configure_logging_from_settings()

            assert isinstance(structlog.get_config()["processors"][-1], structlog.processors.JSONRenderer)
        finally:
            structlog.reset_defaults()

    def test_censor_sensitive_data(self) -> None:
        event = censor_sensitive_data(None, "info", {
            "event": "Loaded store",
            "api_key": "sk-123",
            "store": {"password": "hunter2", "base_dir": ".zeus"},
            "entities": 3,
        })

        assert event["api_key"] == "***REDACTED***"
        assert event["store"] == {"password": "***REDACTED***", "base_dir": ".zeus"}
        assert event["entities"] == 3

    def test_censoring_in_chain(self) -> None:
        try:
            configure_logging(format="json")

            assert censor_sensitive_data in structlog.get_config()["processors"]
        finally:
            structlog.reset_defaults()
