"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_CHILD_CREATED,
    EVENT_REASON_CHILD_UPDATED,
    EVENT_REASON_DESCRIPTOR_INVALID,
    EVENT_REASON_LABELED,
    EVENT_REASON_PROVISIONING_FAILED,
    EVENT_REASON_PROVISIONING_STARTED,
    EVENT_REASON_PROVISIONING_SUCCEEDED,
    EVENT_REASON_RECONCILE_FAILED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource the event is about (apiVersion, kind and metadata)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_child_created(body: dict[str, Any], kind: str, name: str) -> None:
    """Emit child created event."""
    emit_event(body, EVENT_REASON_CHILD_CREATED, f"{kind} {name} created")


def emit_child_updated(body: dict[str, Any], kind: str, name: str) -> None:
    """Emit child updated event."""
    emit_event(body, EVENT_REASON_CHILD_UPDATED, f"{kind} {name} updated to match spec")


def emit_labeled(body: dict[str, Any], descriptor: str) -> None:
    """Emit provisioner labeled event."""
    emit_event(body, EVENT_REASON_LABELED, f"Labeled from descriptor {descriptor}")


def emit_descriptor_invalid(body: dict[str, Any], message: str) -> None:
    """Emit descriptor invalid event."""
    emit_event(body, EVENT_REASON_DESCRIPTOR_INVALID, message, type_="Warning")


def emit_provisioning_started(body: dict[str, Any], job_name: str) -> None:
    """Emit provisioning started event."""
    emit_event(body, EVENT_REASON_PROVISIONING_STARTED, f"Provisioning job {job_name} created")


def emit_provisioning_succeeded(body: dict[str, Any], job_name: str) -> None:
    """Emit provisioning succeeded event."""
    emit_event(body, EVENT_REASON_PROVISIONING_SUCCEEDED, f"Provisioning job {job_name} completed")


def emit_provisioning_failed(body: dict[str, Any], message: str) -> None:
    """Emit provisioning failed event."""
    emit_event(body, EVENT_REASON_PROVISIONING_FAILED, message, type_="Warning")
