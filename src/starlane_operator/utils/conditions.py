"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import COND_JOB_FAILED, COND_PROVISIONER_NOT_FOUND, COND_READY


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).isoformat()

    existing_idx = None
    for idx, cond in enumerate(conditions):
        if cond.get("type") == condition_type:
            existing_idx = idx
            break

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    if existing_idx is not None:
        existing = conditions[existing_idx]
        # Only update lastTransitionTime if status changed
        if existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        conditions[existing_idx] = new_condition
    else:
        conditions.append(new_condition)

    return conditions


def has_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    message: str | None = None,
) -> bool:
    """Check whether a condition is already recorded with the given status (and message)."""
    for cond in conditions:
        if cond.get("type") == condition_type and cond.get("status") == status:
            return message is None or cond.get("message") == message
    return False


def set_ready_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Ready condition."""
    return update_condition(
        conditions,
        COND_READY,
        "True" if status else "False",
        "Ready" if status else "NotReady",
        message,
        observed_generation,
    )


def set_provisioner_not_found_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the ProvisionerNotFound condition."""
    return update_condition(
        conditions,
        COND_PROVISIONER_NOT_FOUND,
        "True",
        "ProvisionerNotFound",
        message,
        observed_generation,
    )


def clear_provisioner_not_found_condition(
    conditions: list[dict[str, Any]],
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Mark the ProvisionerNotFound condition as resolved, if it was ever set."""
    if not any(c.get("type") == COND_PROVISIONER_NOT_FOUND for c in conditions):
        return conditions
    return update_condition(
        conditions,
        COND_PROVISIONER_NOT_FOUND,
        "False",
        "ProvisionerFound",
        "Provisioner is available",
        observed_generation,
    )


def set_job_failed_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the JobFailed condition."""
    return update_condition(
        conditions,
        COND_JOB_FAILED,
        "True",
        "JobFailed",
        message,
        observed_generation,
    )
