"""Error taxonomy for the Starlane Operator.

Store errors are raised by :mod:`starlane_operator.store` and translated from
Kubernetes API status codes. The remaining errors are raised by the handlers
and turned into directives before they reach the scheduling layer.
"""

from __future__ import annotations


class OperatorError(Exception):
    """Base class for all errors the operator reports as directives."""


class StoreError(OperatorError):
    """A resource store call failed for a reason other than not-found or conflict."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class NotFoundError(StoreError):
    """The requested object does not exist. Drives creation, never a failure."""

    def __init__(self, kind: str, namespace: str, name: str):
        super().__init__(f"{kind} {namespace}/{name} not found", status=404)
        self.kind = kind
        self.namespace = namespace
        self.name = name


class ConflictError(StoreError):
    """An update was made against a stale resourceVersion."""

    def __init__(self, message: str):
        super().__init__(message, status=409)


class AlreadyExistsError(ConflictError):
    """A concurrent creator won the race for this object name."""


class BuildError(OperatorError):
    """A desired-state builder could not derive its output (e.g. bad descriptor)."""


class DependencyMissingError(OperatorError):
    """A referenced object the resource depends on does not exist yet."""

    def __init__(self, kind: str, namespace: str, name: str):
        super().__init__(f"{kind} {namespace}/{name} does not exist")
        self.kind = kind
        self.namespace = namespace
        self.name = name


class DelegatedJobFailedError(OperatorError):
    """The batch job doing the provisioning work reported failure."""

    def __init__(self, job_name: str, reason: str | None = None):
        message = f"Provisioning job {job_name} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.job_name = job_name
        self.reason = reason
