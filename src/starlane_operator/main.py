"""Main entry point for the Starlane Operator.

kopf is the scheduling layer: it calls the handlers below for every
create/update/resume of a watched resource and on a drift-check timer. A
changed child only annotates its owner, which kopf sees as an update of the
owner. Each call runs exactly one convergence pass; the resulting directive
is turned into kopf's retry semantics.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Any

import kopf

from . import health
from . import logging as structured_logging
from .constants import (
    ANNOTATION_CHILD_CHANGED,
    API_GROUP_VERSION,
    KIND_POSTGRES,
    KIND_PROVISIONER,
    KIND_PROVISIONING_JOB,
    KIND_RESOURCE,
    KIND_STARLANE,
    KOPF_ANNOTATION_PREFIX,
    LABEL_MANAGED_BY,
)
from .errors import DependencyMissingError, NotFoundError, StoreError
from .handlers import (
    BaseHandler,
    PostgresHandler,
    ProvisionerHandler,
    ProvisioningHandler,
    StarlaneHandler,
)
from .models import Action, Directive, ResourceIdentity
from .store import KubernetesStore, ResourceStore
from .tracing import initialize_tracing
from .utils.errors import sanitize_exception

logger = logging.getLogger(__name__)

DRIFT_CHECK_INTERVAL_SECONDS = int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300"))

# Exponential backoff for failed passes: 1s, 2s, 4s, ... capped at 60s
MIN_RETRY_DELAY_SECONDS = float(os.getenv("MIN_RETRY_DELAY_SECONDS", "1.0"))
MAX_RETRY_DELAY_SECONDS = float(os.getenv("MAX_RETRY_DELAY_SECONDS", "60.0"))
RETRY_BACKOFF = 2.0
BACKOFF_JITTER = 0.1

_store: ResourceStore | None = None
_handlers: dict[str, BaseHandler] = {}


def get_store() -> ResourceStore:
    global _store
    if _store is None:
        _store = KubernetesStore()
    return _store


def build_handlers(store: ResourceStore) -> dict[str, BaseHandler]:
    """Create one handler per watched kind, all sharing ``store``."""
    return {
        KIND_STARLANE: StarlaneHandler(store),
        KIND_POSTGRES: PostgresHandler(store),
        KIND_PROVISIONER: ProvisionerHandler(store),
        KIND_RESOURCE: ProvisioningHandler(KIND_RESOURCE, store),
        KIND_PROVISIONING_JOB: ProvisioningHandler(KIND_PROVISIONING_JOB, store),
    }


def get_handler(kind: str) -> BaseHandler:
    if not _handlers:
        _handlers.update(build_handlers(get_store()))
    return _handlers[kind]


def backoff_delay(retry: int) -> float:
    """Delay before retrying a failed pass, with jitter against thundering herds."""
    delay = min(MIN_RETRY_DELAY_SECONDS * RETRY_BACKOFF ** max(retry, 0), MAX_RETRY_DELAY_SECONDS)
    return delay + random.uniform(0, delay * BACKOFF_JITTER)


def apply_directive(directive: Directive, retry: int = 0) -> None:
    """Translate a directive into kopf's handler outcome.

    Returns normally for Done; raises kopf.TemporaryError otherwise so kopf
    calls the handler again after the requested delay.
    """
    if directive.is_done:
        return
    if directive.action is Action.REQUEUE_NOW:
        raise kopf.TemporaryError("Converging, requeued", delay=0)
    if directive.action is Action.REQUEUE_AFTER:
        raise kopf.TemporaryError(f"Waiting {directive.delay:g}s before next check", delay=directive.delay)

    error = directive.error or RuntimeError("reconciliation failed")
    raise kopf.TemporaryError(sanitize_exception(error), delay=backoff_delay(retry)) from error


def reconcile(kind: str, body: kopf.Body | dict[str, Any], retry: int = 0) -> None:
    """Run one pass for the resource in ``body`` and hand the outcome to kopf."""
    handler = get_handler(kind)
    identity = ResourceIdentity.from_meta(body["metadata"])
    directive = handler.reconcile(identity)
    error = directive.error
    # A missing dependency is a waiting condition on the resource, not a failure event
    if directive.action is Action.ERROR and error is not None and not isinstance(error, DependencyMissingError):
        handler.report_failure(dict(body), error)
    apply_directive(directive, retry)


def owning_resource(body: dict[str, Any], kinds: tuple[str, ...]) -> tuple[str, ResourceIdentity] | None:
    """Find the controlling owner of a child object among ``kinds``."""
    meta = body.get("metadata", {})
    for ref in meta.get("ownerReferences") or []:
        if not ref.get("controller"):
            continue
        if ref.get("apiVersion") == API_GROUP_VERSION and ref.get("kind") in kinds:
            return ref["kind"], ResourceIdentity(meta.get("namespace", "default"), ref["name"])
    return None


def nudge_owner(body: dict[str, Any], kinds: tuple[str, ...]) -> ResourceIdentity | None:
    """Mark the owner of a changed child so kopf runs the owner's update handler.

    The owner is never reconciled from here: kopf serializes handlers per
    object, and a child event belongs to a different object than its owner.

    Returns:
        Identity of the annotated owner, or None if nothing was annotated
    """
    owner = owning_resource(body, kinds)
    if owner is None:
        return None
    kind, identity = owner
    meta = body["metadata"]
    marker = f"{body.get('kind', 'Object')}/{meta['name']}@{meta.get('resourceVersion', '')}"
    try:
        get_store().annotate(kind, identity.namespace, identity.name, {ANNOTATION_CHILD_CHANGED: marker})
    except NotFoundError:
        logger.debug(f"Owner {kind} {identity} of {marker} is gone")
        return None
    except StoreError as e:
        # The drift-check timer picks the change up later
        logger.warning(f"Could not annotate {kind} {identity} after {marker} changed: {sanitize_exception(e)}")
        return None
    return identity


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # Keep kopf's own bookkeeping out of status, which the handlers own
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(prefix=KOPF_ANNOTATION_PREFIX)
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(prefix=KOPF_ANNOTATION_PREFIX)

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    # Metrics and health check endpoints
    health.start_http_server(int(os.getenv("METRICS_PORT", "8080")))
    health.mark_ready()


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Stop reporting ready while the operator shuts down."""
    health.mark_not_ready()


@kopf.on.create(API_GROUP_VERSION, KIND_STARLANE)
@kopf.on.update(API_GROUP_VERSION, KIND_STARLANE)
@kopf.on.resume(API_GROUP_VERSION, KIND_STARLANE)
@kopf.timer(API_GROUP_VERSION, KIND_STARLANE, interval=DRIFT_CHECK_INTERVAL_SECONDS)
def handle_starlane(body: kopf.Body, retry: int = 0, **_: Any) -> None:
    """Handle Starlane resource reconciliation."""
    reconcile(KIND_STARLANE, body, retry)


@kopf.on.create(API_GROUP_VERSION, KIND_POSTGRES)
@kopf.on.update(API_GROUP_VERSION, KIND_POSTGRES)
@kopf.on.resume(API_GROUP_VERSION, KIND_POSTGRES)
@kopf.timer(API_GROUP_VERSION, KIND_POSTGRES, interval=DRIFT_CHECK_INTERVAL_SECONDS)
def handle_postgres(body: kopf.Body, retry: int = 0, **_: Any) -> None:
    """Handle Postgres resource reconciliation."""
    reconcile(KIND_POSTGRES, body, retry)


@kopf.on.create(API_GROUP_VERSION, KIND_PROVISIONER)
@kopf.on.update(API_GROUP_VERSION, KIND_PROVISIONER)
@kopf.on.resume(API_GROUP_VERSION, KIND_PROVISIONER)
def handle_provisioner(body: kopf.Body, retry: int = 0, **_: Any) -> None:
    """Handle StarlaneProvisioner labeling."""
    reconcile(KIND_PROVISIONER, body, retry)


@kopf.on.create(API_GROUP_VERSION, KIND_RESOURCE)
@kopf.on.resume(API_GROUP_VERSION, KIND_RESOURCE)
def handle_resource(body: kopf.Body, retry: int = 0, **_: Any) -> None:
    """Handle StarlaneResource provisioning."""
    reconcile(KIND_RESOURCE, body, retry)


@kopf.on.create(API_GROUP_VERSION, KIND_PROVISIONING_JOB)
@kopf.on.resume(API_GROUP_VERSION, KIND_PROVISIONING_JOB)
def handle_provisioning_job(body: kopf.Body, retry: int = 0, **_: Any) -> None:
    """Handle StarlaneProvisioningJob provisioning."""
    reconcile(KIND_PROVISIONING_JOB, body, retry)


@kopf.on.event("v1", "services", labels={LABEL_MANAGED_BY: "starlane-operator"})
@kopf.on.event("apps", "v1", "deployments", labels={LABEL_MANAGED_BY: "starlane-operator"})
def handle_child_event(body: kopf.Body, **kwargs: Any) -> None:
    """Wake the owning service when one of its children is modified or deleted."""
    if kwargs.get("type") not in ("MODIFIED", "DELETED"):
        # Initial listing and our own creations, the owner's handlers cover them
        return
    nudge_owner(dict(body), (KIND_STARLANE, KIND_POSTGRES))
