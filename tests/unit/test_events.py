"""Tests for Kubernetes event utilities."""

from __future__ import annotations

from unittest.mock import patch

from starlane_operator.utils.events import (
    emit_child_created,
    emit_child_updated,
    emit_descriptor_invalid,
    emit_event,
    emit_labeled,
    emit_provisioning_failed,
    emit_provisioning_started,
    emit_provisioning_succeeded,
    emit_reconcile_failed,
)


class TestEmitEvent:
    """Test cases for emit_event function."""

    @patch("starlane_operator.utils.events.kopf.event")
    def test_emit_event_normal(self, mock_event):
        """Test emitting normal event."""
        body = {"metadata": {"name": "test-resource", "namespace": "default"}}

        emit_event(body, "TestReason", "Test message")

        mock_event.assert_called_once_with(
            body,
            reason="TestReason",
            message="Test message",
            type="Normal",
        )

    @patch("starlane_operator.utils.events.kopf.event")
    def test_emit_event_warning(self, mock_event):
        """Test emitting warning event."""
        body = {"metadata": {"name": "test-resource", "namespace": "default"}}

        emit_event(body, "ErrorReason", "Error occurred", type_="Warning")

        mock_event.assert_called_once_with(
            body,
            reason="ErrorReason",
            message="Error occurred",
            type="Warning",
        )


class TestReconcileEvents:
    """Test cases for reconciliation events."""

    @patch("starlane_operator.utils.events.kopf.event")
    def test_emit_reconcile_failed(self, mock_event):
        body = {"metadata": {"name": "demo"}}

        emit_reconcile_failed(body, "API server unavailable")

        assert "API server unavailable" in mock_event.call_args[1]["message"]
        assert mock_event.call_args[1]["type"] == "Warning"


class TestChildEvents:
    """Test cases for child object events."""

    @patch("starlane_operator.utils.events.kopf.event")
    def test_emit_child_created(self, mock_event):
        body = {"metadata": {"name": "demo"}}

        emit_child_created(body, "Deployment", "demo-keycloak")

        message = mock_event.call_args[1]["message"]
        assert "Deployment demo-keycloak" in message
        assert "created" in message
        assert mock_event.call_args[1]["reason"] == "ChildCreated"

    @patch("starlane_operator.utils.events.kopf.event")
    def test_emit_child_updated(self, mock_event):
        body = {"metadata": {"name": "demo"}}

        emit_child_updated(body, "Service", "demo-web")

        assert "Service demo-web" in mock_event.call_args[1]["message"]
        assert mock_event.call_args[1]["reason"] == "ChildUpdated"


class TestProvisionerEvents:
    """Test cases for provisioner labeling events."""

    @patch("starlane_operator.utils.events.kopf.event")
    def test_emit_labeled(self, mock_event):
        emit_labeled({"metadata": {"name": "pg"}}, "<Database<SQL<acme:pg:ha:14>>>")

        assert "<Database<SQL<acme:pg:ha:14>>>" in mock_event.call_args[1]["message"]
        assert mock_event.call_args[1]["type"] == "Normal"

    @patch("starlane_operator.utils.events.kopf.event")
    def test_emit_descriptor_invalid(self, mock_event):
        emit_descriptor_invalid({"metadata": {"name": "pg"}}, "type descriptor is empty")

        assert mock_event.call_args[1]["type"] == "Warning"


class TestProvisioningEvents:
    """Test cases for provisioning lifecycle events."""

    @patch("starlane_operator.utils.events.kopf.event")
    def test_emit_provisioning_started(self, mock_event):
        emit_provisioning_started({"metadata": {"name": "db1"}}, "db1")

        assert "db1" in mock_event.call_args[1]["message"]
        assert mock_event.call_args[1]["reason"] == "ProvisioningStarted"

    @patch("starlane_operator.utils.events.kopf.event")
    def test_emit_provisioning_succeeded(self, mock_event):
        emit_provisioning_succeeded({"metadata": {"name": "db1"}}, "db1")

        assert "completed" in mock_event.call_args[1]["message"]
        assert mock_event.call_args[1]["type"] == "Normal"

    @patch("starlane_operator.utils.events.kopf.event")
    def test_emit_provisioning_failed(self, mock_event):
        emit_provisioning_failed({"metadata": {"name": "db1"}}, "Provisioning job db1 failed")

        assert mock_event.call_args[1]["message"] == "Provisioning job db1 failed"
        assert mock_event.call_args[1]["type"] == "Warning"
