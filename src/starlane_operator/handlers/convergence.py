"""Dependency-ordered convergence of a parent resource's children."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable

from .. import metrics
from ..errors import AlreadyExistsError, ConflictError, NotFoundError
from ..models import Directive, ResourceIdentity
from ..tracing import add_span_attribute
from ..utils.events import emit_child_created, emit_child_updated
from .base import BaseHandler

DRIFT_COOLDOWN_SECONDS = float(os.getenv("DRIFT_COOLDOWN_SECONDS", "60"))


def no_drift(existing: dict[str, Any], desired: dict[str, Any]) -> dict[str, Any]:
    return {}


@dataclass(frozen=True)
class Tier:
    """One step of the dependency chain.

    ``build`` returns the desired manifest for the parent; ``drift`` compares
    an existing child with it and returns the ``spec`` fields to overwrite.
    """

    name: str
    kind: str
    child_name: str
    build: Callable[[], dict[str, Any]]
    drift: Callable[[dict[str, Any], dict[str, Any]], dict[str, Any]] = no_drift


class ConvergenceHandler(BaseHandler):
    """Materializes children tier by tier with at most one write per pass."""

    def tiers(self, parent: dict[str, Any]) -> list[Tier]:
        raise NotImplementedError

    def converge(self, identity: ResourceIdentity) -> Directive:
        parent = self.store.get(self.kind, identity.namespace, identity.name)
        meta = parent.get("metadata", {})

        for tier in self.tiers(parent):
            try:
                existing = self.store.get(tier.kind, identity.namespace, tier.child_name)
            except NotFoundError:
                return self._create(parent, tier)

            if tier.drift is no_drift:
                continue
            changes = tier.drift(existing, tier.build())
            if changes:
                return self._patch(parent, tier, existing, changes)

        self.log_info(meta, f"All children of {self.kind} {identity} are in sync", reason="InSync")
        return Directive.done()

    def _create(self, parent: dict[str, Any], tier: Tier) -> Directive:
        meta = parent.get("metadata", {})
        add_span_attribute("convergence.tier", tier.name)
        manifest = tier.build()
        self.log_info(
            meta,
            f"Creating {tier.kind} {tier.child_name}",
            event="create",
            reason="ChildCreating",
            tier=tier.name,
        )
        try:
            self.store.create(manifest)
        except AlreadyExistsError:
            # Someone else created it between our read and write
            metrics.child_operations_total.labels(kind=tier.kind, operation="create", result="exists").inc()
            return Directive.requeue_now()
        except Exception:
            metrics.child_operations_total.labels(kind=tier.kind, operation="create", result="failed").inc()
            raise
        metrics.child_operations_total.labels(kind=tier.kind, operation="create", result="success").inc()
        emit_child_created(parent, tier.kind, tier.child_name)
        return Directive.requeue_now()

    def _patch(
        self,
        parent: dict[str, Any],
        tier: Tier,
        existing: dict[str, Any],
        changes: dict[str, Any],
    ) -> Directive:
        add_span_attribute("convergence.tier", tier.name)
        meta = parent.get("metadata", {})
        metrics.drift_detected_total.labels(kind=self.kind, resource_type=tier.kind).inc()
        self.log_info(
            meta,
            f"{tier.kind} {tier.child_name} drifted from spec, updating {sorted(changes)}",
            event="update",
            reason="DriftDetected",
            tier=tier.name,
            changes=changes,
        )
        existing.setdefault("spec", {}).update(changes)
        try:
            self.store.update(existing)
        except ConflictError:
            metrics.child_operations_total.labels(kind=tier.kind, operation="update", result="conflict").inc()
            return Directive.requeue_now()
        except Exception:
            metrics.child_operations_total.labels(kind=tier.kind, operation="update", result="failed").inc()
            raise
        metrics.child_operations_total.labels(kind=tier.kind, operation="update", result="success").inc()
        emit_child_updated(parent, tier.kind, tier.child_name)
        return Directive.requeue_after(DRIFT_COOLDOWN_SECONDS)
