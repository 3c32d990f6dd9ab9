"""Shared fixtures for unit tests."""

from __future__ import annotations

import copy
import itertools
from typing import Any
from unittest.mock import MagicMock

import pytest

from starlane_operator.constants import API_GROUP_VERSION
from starlane_operator.errors import AlreadyExistsError, ConflictError, NotFoundError


class FakeStore:
    """In-memory ResourceStore with resourceVersion checks.

    Every successful write is appended to ``writes`` as ``(operation, kind, name)``.
    ``fail_next`` maps ``(operation, kind)`` to an exception raised once by the
    next matching call.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.writes: list[tuple[str, str, str]] = []
        self.fail_next: dict[tuple[str, str], Exception] = {}
        self._versions = itertools.count(1)

    def _key(self, obj: dict[str, Any]) -> tuple[str, str, str]:
        meta = obj["metadata"]
        return obj["kind"], meta.get("namespace", "default"), meta["name"]

    def _maybe_fail(self, operation: str, kind: str) -> None:
        error = self.fail_next.pop((operation, kind), None)
        if error is not None:
            raise error

    def _current(self, key: tuple[str, str, str], obj: dict[str, Any]) -> dict[str, Any]:
        if key not in self.objects:
            raise NotFoundError(*key)
        stored = self.objects[key]
        sent = obj["metadata"].get("resourceVersion")
        if sent is not None and sent != stored["metadata"]["resourceVersion"]:
            raise ConflictError(f"{key[0]} {key[1]}/{key[2]} was modified concurrently")
        return stored

    def put(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Seed an object without recording a write."""
        stored = copy.deepcopy(obj)
        meta = stored.setdefault("metadata", {})
        meta.setdefault("namespace", "default")
        meta.setdefault("uid", f"uid-{meta['name']}")
        meta["resourceVersion"] = str(next(self._versions))
        self.objects[self._key(stored)] = stored
        return copy.deepcopy(stored)

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        self._maybe_fail("get", kind)
        key = (kind, namespace, name)
        if key not in self.objects:
            raise NotFoundError(kind, namespace, name)
        return copy.deepcopy(self.objects[key])

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail("create", obj["kind"])
        key = self._key(obj)
        if key in self.objects:
            raise AlreadyExistsError(f"{key[0]} {key[1]}/{key[2]} already exists")
        stored = self.put(obj)
        self.writes.append(("create", key[0], key[2]))
        return stored

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail("update", obj["kind"])
        key = self._key(obj)
        stored = self._current(key, obj)
        replaced = copy.deepcopy(obj)
        replaced["status"] = copy.deepcopy(stored.get("status"))
        replaced["metadata"]["resourceVersion"] = str(next(self._versions))
        self.objects[key] = replaced
        self.writes.append(("update", key[0], key[2]))
        return copy.deepcopy(replaced)

    def update_status(self, obj: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail("update_status", obj["kind"])
        key = self._key(obj)
        stored = self._current(key, obj)
        stored["status"] = copy.deepcopy(obj.get("status"))
        stored["metadata"]["resourceVersion"] = str(next(self._versions))
        self.writes.append(("update_status", key[0], key[2]))
        return copy.deepcopy(stored)

    def annotate(self, kind: str, namespace: str, name: str, annotations: dict[str, str]) -> dict[str, Any]:
        self._maybe_fail("annotate", kind)
        key = (kind, namespace, name)
        if key not in self.objects:
            raise NotFoundError(kind, namespace, name)
        stored = self.objects[key]
        stored["metadata"].setdefault("annotations", {}).update(annotations)
        stored["metadata"]["resourceVersion"] = str(next(self._versions))
        self.writes.append(("annotate", kind, name))
        return copy.deepcopy(stored)

    def kinds_written(self) -> list[str]:
        return [kind for _, kind, _ in self.writes]


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture(autouse=True)
def events(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Capture Kubernetes events instead of posting them."""
    mock_event = MagicMock()
    monkeypatch.setattr("starlane_operator.utils.events.kopf.event", mock_event)
    return mock_event


def make_resource(kind: str, name: str, spec: dict[str, Any] | None = None, **extra: Any) -> dict[str, Any]:
    """Build a custom resource body in the operator's API group."""
    body = {
        "apiVersion": API_GROUP_VERSION,
        "kind": kind,
        "metadata": {"name": name, "namespace": "default", "uid": f"uid-{name}", "generation": 1},
        "spec": spec or {},
    }
    body.update(extra)
    return body


@pytest.fixture
def resource() -> Any:
    return make_resource
