"""Builder for generated credential secrets."""

from __future__ import annotations

from typing import Any

from ..constants import KIND_SECRET, PASSWORD_KEY
from .common import object_meta


def credential_name(parent: dict[str, Any]) -> str:
    """Credentials are looked up by the parent's own name."""
    return parent["metadata"]["name"]


def build_credential(parent: dict[str, Any], password: str) -> dict[str, Any]:
    """Create the Secret manifest holding a service's generated password.

    Args:
        parent: Owning custom resource
        password: Generated password value

    Returns:
        Secret manifest
    """
    return {
        "apiVersion": "v1",
        "kind": KIND_SECRET,
        "metadata": object_meta(parent, credential_name(parent)),
        "type": "Opaque",
        "stringData": {PASSWORD_KEY: password},
    }
