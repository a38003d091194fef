"""Tests for Settings and logging setup."""

import logging

import pytest
from pydantic import ValidationError

from volume_agent.config import Settings
from volume_agent.logging_config import setup_logging
from volume_agent.utils.redaction import SecretRedactionFilter


def test_defaults():
    settings = Settings()

    assert settings.operation_timeout_seconds == 5.0
    assert settings.health_check_interval_seconds == 30
    assert settings.auto_remount is True
    assert settings.secret_key is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("VOLUME_MOUNT_BASE", "/srv/volumes")
    monkeypatch.setenv("OPERATION_TIMEOUT_SECONDS", "12.5")

    settings = Settings()

    assert settings.volume_mount_base == "/srv/volumes"
    assert str(settings.mount_base_path) == "/srv/volumes"
    assert settings.operation_timeout_seconds == 12.5


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(operation_timeout_seconds=0)


def test_setup_logging_installs_redacting_handlers(tmp_path):
    settings = Settings(log_file_path=str(tmp_path / "logs" / "agent.log"), log_level="DEBUG")
    root_logger = logging.getLogger()
    previous_handlers = list(root_logger.handlers)
    previous_level = root_logger.level

    try:
        setup_logging(settings)

        assert (tmp_path / "logs").is_dir()
        assert len(root_logger.handlers) == 2
        for handler in root_logger.handlers:
            assert any(isinstance(f, SecretRedactionFilter) for f in handler.filters)

        logging.info("mount -o user=bob,pass=s3cret")
        for handler in root_logger.handlers:
            handler.flush()
        log_content = (tmp_path / "logs" / "agent.log").read_text()
        assert "pass=******" in log_content
        assert "s3cret" not in log_content
    finally:
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers[:] = previous_handlers
        root_logger.setLevel(previous_level)
