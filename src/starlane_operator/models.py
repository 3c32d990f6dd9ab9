"""Value types shared by the handlers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .constants import STAGE_CREATING, STAGE_FAILED, STAGE_READY, STAGE_UNSET


@dataclass(frozen=True)
class ResourceIdentity:
    """Namespaced name of a watched resource."""

    namespace: str
    name: str

    @classmethod
    def from_meta(cls, meta: dict[str, Any]) -> ResourceIdentity:
        return cls(namespace=meta.get("namespace", "default"), name=meta["name"])

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class Action(str, Enum):
    """What the scheduling layer should do after a convergence pass."""

    DONE = "Done"
    REQUEUE_NOW = "RequeueNow"
    REQUEUE_AFTER = "RequeueAfter"
    ERROR = "Error"


@dataclass(frozen=True)
class Directive:
    """Result of one convergence pass.

    ``delay`` is only meaningful for ``REQUEUE_AFTER`` and ``error`` only for
    ``ERROR``; use the constructors rather than building instances by hand.
    """

    action: Action
    delay: float = 0.0
    error: Exception | None = None

    @classmethod
    def done(cls) -> Directive:
        return cls(Action.DONE)

    @classmethod
    def requeue_now(cls) -> Directive:
        return cls(Action.REQUEUE_NOW)

    @classmethod
    def requeue_after(cls, seconds: float) -> Directive:
        if seconds <= 0:
            raise ValueError("requeue delay must be positive")
        return cls(Action.REQUEUE_AFTER, delay=float(seconds))

    @classmethod
    def failed(cls, error: Exception) -> Directive:
        return cls(Action.ERROR, error=error)

    @property
    def is_done(self) -> bool:
        return self.action is Action.DONE


class LifecycleStage(str, Enum):
    """Provisioning lifecycle stage stored in ``status.lifecycleStage``."""

    UNSET = STAGE_UNSET
    CREATING = STAGE_CREATING
    READY = STAGE_READY
    FAILED = STAGE_FAILED

    @classmethod
    def from_status(cls, status: dict[str, Any] | None) -> LifecycleStage:
        """Read the stage from a status dict; raises ValueError for unknown values."""
        return cls((status or {}).get("lifecycleStage") or STAGE_UNSET)

    @property
    def is_terminal(self) -> bool:
        return self in (LifecycleStage.READY, LifecycleStage.FAILED)

    def can_advance_to(self, target: LifecycleStage) -> bool:
        """Only forward moves are legal: Unset -> Creating -> Ready | Failed."""
        if target is self:
            return True
        return target in _FORWARD[self]


_FORWARD: dict[LifecycleStage, frozenset[LifecycleStage]] = {
    LifecycleStage.UNSET: frozenset({LifecycleStage.CREATING}),
    LifecycleStage.CREATING: frozenset({LifecycleStage.READY, LifecycleStage.FAILED}),
    LifecycleStage.READY: frozenset(),
    LifecycleStage.FAILED: frozenset(),
}


class JobOutcome(str, Enum):
    """Observed condition of a delegated batch job."""

    RUNNING = "Running"
    COMPLETE = "Complete"
    FAILED = "Failed"

    @classmethod
    def from_job(cls, job: dict[str, Any]) -> JobOutcome:
        conditions = (job.get("status") or {}).get("conditions") or []
        active = {c.get("type") for c in conditions if c.get("status", "True") == "True"}
        if "Failed" in active:
            return cls.FAILED
        if "Complete" in active:
            return cls.COMPLETE
        return cls.RUNNING

    @property
    def stage(self) -> LifecycleStage:
        return {
            JobOutcome.RUNNING: LifecycleStage.CREATING,
            JobOutcome.COMPLETE: LifecycleStage.READY,
            JobOutcome.FAILED: LifecycleStage.FAILED,
        }[self]
