"""Builder for single-replica deployments."""

from __future__ import annotations

from typing import Any

from ..constants import KIND_DEPLOYMENT
from .common import object_meta


def container_port(name: str, port: int) -> dict[str, Any]:
    return {"name": name, "containerPort": port}


def build_deployment(
    parent: dict[str, Any],
    name: str,
    labels: dict[str, str],
    container_name: str,
    image: str,
    args: list[str] | None = None,
    env: list[dict[str, Any]] | None = None,
    ports: list[dict[str, Any]] | None = None,
    data_claim: str | None = None,
    data_path: str | None = None,
) -> dict[str, Any]:
    """Create a Deployment manifest running one container.

    Args:
        parent: Owning custom resource
        name: Deployment name
        labels: Pod labels, also used as the selector
        container_name: Name of the single container
        image: Container image
        args: Container arguments
        env: Container environment
        ports: Container ports
        data_claim: PersistentVolumeClaim mounted as "data", if any
        data_path: Mount path for ``data_claim``

    Returns:
        Deployment manifest
    """
    container: dict[str, Any] = {
        "name": container_name,
        "image": image,
        "args": list(args or []),
        "env": list(env or []),
        "ports": list(ports or []),
    }
    pod_spec: dict[str, Any] = {"containers": [container]}

    if data_claim:
        container["volumeMounts"] = [{"name": "data", "mountPath": data_path, "readOnly": False}]
        pod_spec["volumes"] = [{"name": "data", "persistentVolumeClaim": {"claimName": data_claim}}]

    return {
        "apiVersion": "apps/v1",
        "kind": KIND_DEPLOYMENT,
        "metadata": object_meta(parent, name),
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": dict(labels)},
            "template": {
                "metadata": {"labels": dict(labels)},
                "spec": pod_spec,
            },
        },
    }
