"""Tests for structured logging."""

from __future__ import annotations

import json
import logging
from unittest.mock import patch

from starlane_operator.logging import log_resource_event, sanitize_secrets, setup_structured_logging


class TestLogResourceEvent:
    """Test cases for log_resource_event."""

    def test_json_fields(self, caplog):
        logger = logging.getLogger("test.structured")

        with caplog.at_level(logging.INFO, logger="test.structured"):
            log_resource_event(
                logger,
                controller="starlane-operator",
                resource_kind="Starlane",
                resource_name="demo",
                namespace="default",
                uid="uid-1",
                event="create",
                reason="ChildCreating",
                message="Creating Deployment demo",
                tier="starlane",
            )

        data = json.loads(caplog.records[-1].getMessage())
        assert data["resource"] == "Starlane"
        assert data["name"] == "demo"
        assert data["reason"] == "ChildCreating"
        assert data["tier"] == "starlane"

    def test_level(self, caplog):
        logger = logging.getLogger("test.structured")

        with caplog.at_level(logging.WARNING, logger="test.structured"):
            log_resource_event(
                logger, "c", "Postgres", "db", "default", "u", "warning", "Warn", "careful", level=logging.WARNING
            )

        assert caplog.records[-1].levelno == logging.WARNING

    def test_message_is_scrubbed(self, caplog):
        """Free-text messages never carry a generated password."""
        logger = logging.getLogger("test.structured")

        with caplog.at_level(logging.INFO, logger="test.structured"):
            log_resource_event(logger, "c", "Starlane", "demo", "default", "u", "error", "Failed", "password=hunter2")

        data = json.loads(caplog.records[-1].getMessage())
        assert "hunter2" not in data["message"]


class TestSanitizeSecrets:
    """Test cases for sanitize_secrets."""

    def test_redacts_known_fields(self):
        result = sanitize_secrets({"password": "x", "stringData": {"password": "y"}, "tier": "credential"})

        assert result["password"] == "***REDACTED***"
        assert result["stringData"] == "***REDACTED***"
        assert result["tier"] == "credential"

    def test_input_not_modified(self):
        data = {"token": "abc"}

        sanitize_secrets(data)

        assert data == {"token": "abc"}

    def test_nested_secret_body_is_redacted(self):
        """A Secret manifest logged as an extra keeps its shape but loses its credentials."""
        secret = {"kind": "Secret", "metadata": {"name": "demo"}, "stringData": {"password": "hunter2"}}

        result = sanitize_secrets({"child": secret, "children": [secret]})

        assert result["child"]["metadata"] == {"name": "demo"}
        assert result["child"]["stringData"] == "***REDACTED***"
        assert result["children"][0]["stringData"] == "***REDACTED***"

    def test_string_values_are_scrubbed(self):
        result = sanitize_secrets({"detail": "env POSTGRES_PASSWORD=hunter2 rejected"})

        assert "hunter2" not in result["detail"]


class TestSetupStructuredLogging:
    """Test cases for setup_structured_logging."""

    @patch("starlane_operator.logging.logging.basicConfig")
    def test_level_from_environment(self, mock_basic_config, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        setup_structured_logging()

        assert mock_basic_config.call_args[1]["level"] == logging.DEBUG

    @patch("starlane_operator.logging.logging.basicConfig")
    def test_unknown_level_falls_back_to_info(self, mock_basic_config):
        setup_structured_logging("chatty")

        assert mock_basic_config.call_args[1]["level"] == logging.INFO

    @patch("starlane_operator.logging.logging.basicConfig")
    def test_client_libraries_are_quieted(self, mock_basic_config):
        setup_structured_logging("DEBUG")

        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("kubernetes.client.rest").level == logging.WARNING
