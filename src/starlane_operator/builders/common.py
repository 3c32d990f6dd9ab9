"""Helpers shared by the desired-state builders."""

from __future__ import annotations

from typing import Any

from ..constants import LABEL_MANAGED_BY, PASSWORD_KEY


def owner_reference(parent: dict[str, Any]) -> dict[str, Any]:
    """Build a controller owner reference pointing at ``parent``.

    The API server garbage collects children carrying this reference once the
    parent is deleted.
    """
    meta = parent.get("metadata", {})
    return {
        "apiVersion": parent["apiVersion"],
        "kind": parent["kind"],
        "name": meta["name"],
        "uid": meta.get("uid"),
        "controller": True,
        "blockOwnerDeletion": True,
    }


def object_meta(
    parent: dict[str, Any],
    name: str,
    labels: dict[str, str] | None = None,
    owned: bool = True,
) -> dict[str, Any]:
    """Metadata for a child object living next to ``parent``."""
    meta: dict[str, Any] = {
        "name": name,
        "namespace": parent["metadata"].get("namespace", "default"),
        "labels": {LABEL_MANAGED_BY: "starlane-operator", **(labels or {})},
    }
    if owned:
        meta["ownerReferences"] = [owner_reference(parent)]
    return meta


def secret_env(name: str, secret_name: str, key: str = PASSWORD_KEY) -> dict[str, Any]:
    """Environment variable sourced from a secret key."""
    return {
        "name": name,
        "valueFrom": {"secretKeyRef": {"name": secret_name, "key": key}},
    }


def env(name: str, value: str) -> dict[str, str]:
    return {"name": name, "value": value}


def spec_of(parent: dict[str, Any]) -> dict[str, Any]:
    return parent.get("spec") or {}
