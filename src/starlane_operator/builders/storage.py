"""Builder for persistent volume claims."""

from __future__ import annotations

from typing import Any

from ..constants import KIND_PVC
from .common import object_meta


def build_storage_claim(
    parent: dict[str, Any],
    name: str,
    size: str,
    storage_class: str | None = None,
    bind_owner: bool = True,
) -> dict[str, Any]:
    """Create a PersistentVolumeClaim manifest.

    Args:
        parent: Owning custom resource
        name: Claim name
        size: Storage request (e.g. "5Gi")
        storage_class: Storage class name; the cluster default when None
        bind_owner: Whether the claim is deleted together with ``parent``

    Returns:
        PersistentVolumeClaim manifest
    """
    spec: dict[str, Any] = {
        "accessModes": ["ReadWriteOnce"],
        "resources": {"requests": {"storage": size}},
    }
    if storage_class:
        spec["storageClassName"] = storage_class

    return {
        "apiVersion": "v1",
        "kind": KIND_PVC,
        "metadata": object_meta(parent, name, owned=bind_owner),
        "spec": spec,
    }
