"""Tests for health check endpoints."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from starlane_operator import health
from starlane_operator.health import create_combined_wsgi_app, mark_not_ready, mark_ready


def environ_for(path: str) -> dict:
    return {
        "REQUEST_METHOD": "GET",
        "PATH_INFO": path,
        "SCRIPT_NAME": "",
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "8080",
        "wsgi.url_scheme": "http",
    }


@pytest.fixture
def ready():
    mark_ready()
    yield
    mark_not_ready()


class TestCombinedWsgiApp:
    """Test cases for combined WSGI application."""

    def test_combined_app_healthz(self):
        app = create_combined_wsgi_app()
        start_response = MagicMock()

        result = app(environ_for("/healthz"), start_response)

        assert b'"status":"ok"' in b"".join(result)
        assert "200" in start_response.call_args[0][0]

    def test_combined_app_readyz(self, ready):
        app = create_combined_wsgi_app()
        start_response = MagicMock()

        result = app(environ_for("/readyz"), start_response)

        assert b'"status":"ready"' in b"".join(result)
        assert "200" in start_response.call_args[0][0]

    def test_readyz_before_startup(self):
        """Readiness fails until startup has completed."""
        mark_not_ready()
        app = create_combined_wsgi_app()
        start_response = MagicMock()

        result = app(environ_for("/readyz"), start_response)

        assert b'"status":"starting"' in b"".join(result)
        assert "503" in start_response.call_args[0][0]

    def test_content_type_is_json(self):
        app = create_combined_wsgi_app()
        start_response = MagicMock()

        app(environ_for("/healthz"), start_response)

        headers = start_response.call_args[0][1]
        content_type_header = [h for h in headers if h[0].lower() == "content-type"]
        assert "application/json" in content_type_header[0][1]

    @patch("starlane_operator.health.make_wsgi_app")
    def test_combined_app_delegates_to_metrics(self, mock_make_wsgi):
        """Test combined app delegates /metrics to prometheus."""
        mock_metrics_app = MagicMock(return_value=[b"metrics data"])
        mock_make_wsgi.return_value = mock_metrics_app
        app = create_combined_wsgi_app()

        result = app(environ_for("/metrics"), MagicMock())

        assert mock_metrics_app.called
        assert result == [b"metrics data"]


class TestHealthServer:
    """Tests for starting the health and metrics server."""

    @patch("starlane_operator.health.make_server")
    @patch("starlane_operator.health.threading.Thread")
    def test_start_http_server(self, mock_thread, mock_make_server):
        mock_server = MagicMock()
        mock_make_server.return_value = mock_server

        health.start_http_server(8080)

        mock_make_server.assert_called_once()
        assert mock_make_server.call_args[0][1] == 8080
        mock_thread.assert_called_once()
        assert mock_thread.call_args[1]["target"] == mock_server.serve_forever
        assert mock_thread.call_args[1]["daemon"] is True
        mock_thread.return_value.start.assert_called_once()
