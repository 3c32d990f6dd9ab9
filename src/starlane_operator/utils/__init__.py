"""Utility functions for the Starlane Operator."""

from .conditions import (
    has_condition,
    set_job_failed_condition,
    set_provisioner_not_found_condition,
    set_ready_condition,
    update_condition,
)
from .errors import sanitize_error_message, sanitize_exception
from .events import emit_event
from .passwords import generate_password
from .rate_limit import is_rate_limit_error, rate_limit_k8s

__all__ = [
    "update_condition",
    "has_condition",
    "set_ready_condition",
    "set_provisioner_not_found_condition",
    "set_job_failed_condition",
    "emit_event",
    "generate_password",
    "sanitize_error_message",
    "sanitize_exception",
    "rate_limit_k8s",
    "is_rate_limit_error",
]
