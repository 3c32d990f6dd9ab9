"""Base handler class with common functionality for all CRD handlers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from .. import metrics
from ..errors import ConflictError, DependencyMissingError, NotFoundError, OperatorError
from ..logging import log_resource_event
from ..models import Action, Directive, ResourceIdentity
from ..store import ResourceStore
from ..tracing import trace_span
from ..utils.errors import sanitize_exception
from ..utils.events import emit_reconcile_failed


class BaseHandler:
    """Base class for all CRD handlers with common functionality."""

    def __init__(self, kind: str, store: ResourceStore):
        """Initialize base handler.

        Args:
            kind: The custom resource kind handled (e.g. "Starlane")
            store: Resource store used for every read and write
        """
        self.kind = kind
        self.store = store
        self.logger = logging.getLogger(__name__)

    def _get_resource_context(self, meta: dict[str, Any]) -> dict[str, Any]:
        """Extract common resource context from metadata."""
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", "default"),
            "uid": meta.get("uid", "unknown"),
        }

    def _log(
        self,
        level: int,
        meta: dict[str, Any],
        message: str,
        event: str,
        reason: str,
        **kwargs: Any,
    ) -> None:
        ctx = self._get_resource_context(meta)
        log_resource_event(
            self.logger,
            controller="starlane-operator",
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message."""
        self._log(logging.INFO, meta, message, event, reason, **kwargs)

    def log_warning(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message."""
        self._log(logging.WARNING, meta, message, event, reason, **kwargs)

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: BaseException | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()
        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__
        self._log(logging.ERROR, meta, message, event, reason, **log_data)

    def reconcile(self, identity: ResourceIdentity) -> Directive:
        """Run one convergence pass for ``identity``.

        Nothing escapes: not-found of the resource itself ends the pass,
        conflicts ask for an immediate retry, and every other exception is
        handed back as an error directive.
        """
        return self.reconcile_with_metrics(identity, lambda: self.converge(identity))

    def converge(self, identity: ResourceIdentity) -> Directive:
        raise NotImplementedError

    def reconcile_with_metrics(
        self,
        identity: ResourceIdentity,
        reconcile_fn: Callable[[], Directive],
    ) -> Directive:
        """Execute a pass with tracing, metrics and error translation.

        Args:
            identity: Resource being reconciled
            reconcile_fn: Function performing the pass

        Returns:
            Directive for the scheduling layer
        """
        meta = {"name": identity.name, "namespace": identity.namespace}
        start_time = time.time()
        try:
            with trace_span(
                f"reconcile_{self.kind.lower()}",
                kind=self.kind,
                attributes={"resource.name": identity.name, "resource.namespace": identity.namespace},
            ):
                directive = reconcile_fn()
        except NotFoundError as e:
            if (e.kind, e.namespace, e.name) != (self.kind, identity.namespace, identity.name):
                return self._failed(meta, e)
            # Owned objects are garbage collected by the API server
            self.log_info(meta, f"{self.kind} not found, assuming it was deleted", reason="NotFound")
            directive = Directive.done()
        except ConflictError as e:
            self.log_info(meta, f"Conflict, re-reading: {sanitize_exception(e)}", reason="Conflict")
            metrics.reconcile_total.labels(kind=self.kind, result="conflict").inc()
            return Directive.requeue_now()
        except OperatorError as e:
            return self._failed(meta, e)
        except Exception as e:
            # Malformed objects and bugs fail the pass with backoff like any other error
            return self._failed(meta, e)
        finally:
            duration = time.time() - start_time
            metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)

        if directive.action is Action.ERROR and directive.error is not None:
            return self._failed(meta, directive.error)

        metrics.reconcile_total.labels(kind=self.kind, result=_result_label(directive)).inc()
        return directive

    def _failed(self, meta: dict[str, Any], error: Exception) -> Directive:
        error_type = type(error).__name__
        if isinstance(error, DependencyMissingError):
            self.log_warning(
                meta, f"Waiting on missing dependency: {sanitize_exception(error)}", reason="DependencyMissing"
            )
        else:
            self.log_error(meta, "Reconciliation failed", error=error, reason="ReconciliationFailed")
        metrics.error_total.labels(kind=self.kind, error_type=error_type).inc()
        metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
        return Directive.failed(error)

    def report_failure(self, body: dict[str, Any], error: Exception) -> None:
        """Emit a Warning event on the resource for a failed pass."""
        emit_reconcile_failed(body, f"Reconciliation failed: {sanitize_exception(error)}")


def _result_label(directive: Directive) -> str:
    return {
        Action.DONE: "success",
        Action.REQUEUE_NOW: "requeue",
        Action.REQUEUE_AFTER: "requeue_after",
        Action.ERROR: "error",
    }[directive.action]
