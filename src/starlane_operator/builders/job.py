"""Builder for delegated provisioning jobs."""

from __future__ import annotations

from typing import Any

from ..constants import KIND_JOB
from .common import object_meta, spec_of


def provisioning_args(request: dict[str, Any]) -> list[str]:
    """Arguments handed to the provisioner image: ``create <address> <name> <init args...>``."""
    spec = spec_of(request)
    return [
        "create",
        spec.get("starlaneResourceAddress", ""),
        spec.get("resourceName", ""),
        *(spec.get("initArgs") or []),
    ]


def build_provisioning_job(request: dict[str, Any], provisioner: dict[str, Any]) -> dict[str, Any]:
    """Create the batch Job manifest that performs one provisioning attempt.

    The job is named after the request so it can be found again by the
    request's own identity. It never retries on its own: a failed pod fails
    the job, and the job failure is terminal for the request.

    Args:
        request: StarlaneResource or StarlaneProvisioningJob
        provisioner: StarlaneProvisioner supplying image and environment

    Returns:
        Job manifest
    """
    provisioner_spec = spec_of(provisioner)
    return {
        "apiVersion": "batch/v1",
        "kind": KIND_JOB,
        "metadata": object_meta(request, request["metadata"]["name"]),
        "spec": {
            "backoffLimit": 0,
            "template": {
                "spec": {
                    "restartPolicy": "Never",
                    "containers": [
                        {
                            "name": "starlane",
                            "image": provisioner_spec.get("image"),
                            "args": provisioning_args(request),
                            "env": list(provisioner_spec.get("env") or []),
                        }
                    ],
                },
            },
        },
    }
