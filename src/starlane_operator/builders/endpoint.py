"""Builder for network endpoints (Services)."""

from __future__ import annotations

from typing import Any

from ..constants import KIND_SERVICE
from .common import object_meta

DEFAULT_SERVICE_TYPE = "ClusterIP"


def build_endpoint(
    parent: dict[str, Any],
    name: str,
    service_type: str | None,
    port_name: str,
    port: int,
    target_port: int,
    selector: dict[str, str],
) -> dict[str, Any]:
    """Create a Service manifest exposing one TCP port."""
    return {
        "apiVersion": "v1",
        "kind": KIND_SERVICE,
        "metadata": object_meta(parent, name),
        "spec": {
            "type": service_type or DEFAULT_SERVICE_TYPE,
            "ports": [
                {
                    "name": port_name,
                    "port": port,
                    "targetPort": target_port,
                    "protocol": "TCP",
                }
            ],
            "selector": dict(selector),
        },
    }


def exposure_drift(existing: dict[str, Any], desired: dict[str, Any]) -> dict[str, Any]:
    """Return the spec fields of ``existing`` that must change to match ``desired``.

    Only the exposure mode is compared; everything else on a Service is either
    immutable or defaulted by the API server.
    """
    current = (existing.get("spec") or {}).get("type")
    wanted = desired["spec"]["type"]
    if current != wanted:
        return {"type": wanted}
    return {}
