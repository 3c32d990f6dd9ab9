"""Provisioning lifecycle for StarlaneResource and StarlaneProvisioningJob CRDs.

The actual provisioning work runs in a one-shot batch Job built from the
referenced StarlaneProvisioner. This handler only starts that job and
advances ``status.lifecycleStage`` from what it observes:

    Unset -> Creating -> Ready | Failed

Stages never move backwards, and Ready/Failed are final; re-provisioning
means creating a new resource.
"""

from __future__ import annotations

import os
from typing import Any

from .. import metrics
from ..builders.job import build_provisioning_job
from ..constants import COND_PROVISIONER_NOT_FOUND, KIND_JOB, KIND_PROVISIONER
from ..errors import AlreadyExistsError, BuildError, DelegatedJobFailedError, DependencyMissingError, NotFoundError
from ..models import Directive, JobOutcome, LifecycleStage, ResourceIdentity
from ..store import ResourceStore
from ..utils.conditions import (
    clear_provisioner_not_found_condition,
    has_condition,
    set_job_failed_condition,
    set_provisioner_not_found_condition,
    set_ready_condition,
)
from ..utils.events import emit_provisioning_failed, emit_provisioning_started, emit_provisioning_succeeded
from .base import BaseHandler

PROVISIONING_POLL_SECONDS = float(os.getenv("PROVISIONING_POLL_SECONDS", "10"))


class ProvisioningHandler(BaseHandler):
    """Drives one provisioning request through its lifecycle stages."""

    def __init__(self, kind: str, store: ResourceStore):
        super().__init__(kind, store)

    def converge(self, identity: ResourceIdentity) -> Directive:
        request = self.store.get(self.kind, identity.namespace, identity.name)
        meta = request.get("metadata", {})

        try:
            stage = LifecycleStage.from_status(request.get("status"))
        except ValueError:
            self.log_warning(
                meta,
                f"Unknown lifecycle stage {request['status'].get('lifecycleStage')!r}, leaving it alone",
                reason="UnknownStage",
            )
            return Directive.done()

        if stage.is_terminal:
            return Directive.done()
        if stage is LifecycleStage.UNSET:
            return self._start(request)
        return self._observe(request)

    def _start(self, request: dict[str, Any]) -> Directive:
        try:
            provisioner = self._get_provisioner(request)
        except DependencyMissingError as e:
            self._record_missing_provisioner(request, e)
            return Directive.failed(e)

        conditions = clear_provisioner_not_found_condition(_conditions(request))
        self._advance(request, LifecycleStage.CREATING, conditions)
        return self._create_job(request, provisioner)

    def _observe(self, request: dict[str, Any]) -> Directive:
        meta = request["metadata"]
        try:
            job = self.store.get(KIND_JOB, meta.get("namespace", "default"), meta["name"])
        except NotFoundError:
            # The stage was recorded but the job never landed; start it again
            self.log_warning(meta, "Provisioning job missing while Creating, recreating it", reason="JobMissing")
            try:
                provisioner = self._get_provisioner(request)
            except DependencyMissingError as e:
                self._record_missing_provisioner(request, e)
                return Directive.failed(e)
            return self._create_job(request, provisioner)

        outcome = JobOutcome.from_job(job)
        if outcome is JobOutcome.RUNNING:
            return Directive.requeue_after(PROVISIONING_POLL_SECONDS)

        conditions = _conditions(request)
        if outcome is JobOutcome.FAILED:
            error = DelegatedJobFailedError(meta["name"], _failure_reason(job))
            conditions = set_job_failed_condition(conditions, str(error))
            conditions = set_ready_condition(conditions, False, str(error))
            self._advance(request, outcome.stage, conditions)
            self.log_error(meta, "Provisioning failed", error=error, reason="ProvisioningFailed")
            emit_provisioning_failed(request, str(error))
        else:
            conditions = set_ready_condition(conditions, True, "Provisioning job completed")
            self._advance(request, outcome.stage, conditions)
            self.log_info(meta, "Provisioning completed", reason="ProvisioningSucceeded")
            emit_provisioning_succeeded(request, meta["name"])
        return Directive.done()

    def _get_provisioner(self, request: dict[str, Any]) -> dict[str, Any]:
        namespace = request["metadata"].get("namespace", "default")
        provisioner_name = (request.get("spec") or {}).get("provisioner")
        if not provisioner_name:
            raise BuildError("spec.provisioner is required")
        try:
            return self.store.get(KIND_PROVISIONER, namespace, provisioner_name)
        except NotFoundError as e:
            raise DependencyMissingError(KIND_PROVISIONER, namespace, provisioner_name) from e

    def _create_job(self, request: dict[str, Any], provisioner: dict[str, Any]) -> Directive:
        meta = request["metadata"]
        job = build_provisioning_job(request, provisioner)
        try:
            self.store.create(job)
        except AlreadyExistsError:
            metrics.child_operations_total.labels(kind=KIND_JOB, operation="create", result="exists").inc()
            return Directive.requeue_now()
        metrics.child_operations_total.labels(kind=KIND_JOB, operation="create", result="success").inc()
        self.log_info(
            meta,
            f"Created provisioning job {job['metadata']['name']}",
            event="create",
            reason="ProvisioningStarted",
            image=job["spec"]["template"]["spec"]["containers"][0]["image"],
        )
        emit_provisioning_started(request, job["metadata"]["name"])
        return Directive.requeue_now()

    def _record_missing_provisioner(self, request: dict[str, Any], error: DependencyMissingError) -> None:
        """Surface a waiting condition; writes only when the condition changes."""
        conditions = _conditions(request)
        message = f"Waiting for provisioner {error.name}"
        self.log_warning(request["metadata"], message, reason="ProvisionerNotFound")
        if has_condition(conditions, COND_PROVISIONER_NOT_FOUND, "True", message):
            return
        request["status"] = {
            **(request.get("status") or {}),
            "conditions": set_provisioner_not_found_condition(conditions, message),
        }
        self.store.update_status(request)

    def _advance(
        self,
        request: dict[str, Any],
        target: LifecycleStage,
        conditions: list[dict[str, Any]],
    ) -> None:
        """Persist a forward stage transition through the status subresource."""
        current = LifecycleStage.from_status(request.get("status"))
        if not current.can_advance_to(target):
            raise ValueError(f"illegal lifecycle transition {current.value!r} -> {target.value!r}")

        request["status"] = {
            **(request.get("status") or {}),
            "lifecycleStage": target.value,
            "conditions": conditions,
            "observedGeneration": request["metadata"].get("generation", 0),
        }
        self.store.update_status(request)
        metrics.lifecycle_transitions_total.labels(kind=self.kind, stage=target.value).inc()
        self.log_info(
            request["metadata"],
            f"Lifecycle stage {current.value or 'Unset'} -> {target.value}",
            event="transition",
            reason="StageChanged",
        )


def _conditions(request: dict[str, Any]) -> list[dict[str, Any]]:
    return [dict(c) for c in (request.get("status") or {}).get("conditions") or []]


def _failure_reason(job: dict[str, Any]) -> str | None:
    for cond in (job.get("status") or {}).get("conditions") or []:
        if cond.get("type") == "Failed":
            return cond.get("message") or cond.get("reason")
    return None
