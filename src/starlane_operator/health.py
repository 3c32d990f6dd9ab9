"""Health check and metrics HTTP endpoints for the operator."""

from __future__ import annotations

import threading
from typing import Any

from prometheus_client import make_wsgi_app
from werkzeug.serving import make_server
from werkzeug.wrappers import Response

_ready = threading.Event()


def mark_ready() -> None:
    """Report ready on /readyz once the operator finished starting up."""
    _ready.set()


def mark_not_ready() -> None:
    _ready.clear()


def _readiness_response() -> Response:
    if _ready.is_set():
        return Response('{"status":"ready"}', mimetype="application/json", status=200)
    return Response('{"status":"starting"}', mimetype="application/json", status=503)


def create_combined_wsgi_app() -> Any:
    """Create a WSGI app that combines metrics and health check endpoints.

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> list[bytes]:
        """Route /healthz and /readyz, delegate everything else to prometheus."""
        path = environ.get("PATH_INFO", "")
        if path == "/healthz":
            response = Response('{"status":"ok"}', mimetype="application/json", status=200)
            return response(environ, start_response)
        if path == "/readyz":
            return _readiness_response()(environ, start_response)
        return metrics_app(environ, start_response)

    return combined_app


def start_http_server(port: int) -> threading.Thread:
    """Serve metrics and health endpoints on ``port`` from a daemon thread."""
    server = make_server("", port, create_combined_wsgi_app(), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return thread
