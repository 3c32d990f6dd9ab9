"""Tests for StarlaneProvisioner labeling."""

from __future__ import annotations

import pytest

from starlane_operator.constants import KIND_PROVISIONER
from starlane_operator.errors import BuildError, ConflictError
from starlane_operator.handlers.provisioner import ProvisionerHandler
from starlane_operator.models import Action, ResourceIdentity

IDENTITY = ResourceIdentity("default", "pg")


def labels_of(store) -> dict[str, str]:
    return store.objects[(KIND_PROVISIONER, "default", "pg")]["metadata"].get("labels") or {}


class TestProvisionerHandler:
    """Test cases for ProvisionerHandler."""

    def test_labels_from_descriptor(self, store, resource):
        """Discovery labels are derived from spec.typeKindSpecific."""
        store.put(
            resource(
                KIND_PROVISIONER,
                "pg",
                {"typeKindSpecific": "<Database<SQL<acme:pg:ha:14>>>"},
                metadata={"name": "pg", "namespace": "default", "labels": {"team": "data"}},
            )
        )
        handler = ProvisionerHandler(store)

        directive = handler.reconcile(IDENTITY)

        assert directive.action is Action.DONE
        assert labels_of(store) == {
            "team": "data",
            "type": "Database",
            "kind": "SQL",
            "vendor": "acme",
            "product": "pg",
            "variant": "ha",
            "version": "14",
        }
        assert store.writes == [("update", KIND_PROVISIONER, "pg")]

    def test_labeled_provisioner_is_left_alone(self, store, resource):
        """Existing labels are stable, even if the descriptor changes."""
        store.put(
            resource(
                KIND_PROVISIONER,
                "pg",
                {"typeKindSpecific": "<Cache<KV<acme:redis:single:7>>>"},
                metadata={"name": "pg", "namespace": "default", "labels": {"type": "Database"}},
            )
        )
        handler = ProvisionerHandler(store)

        assert handler.reconcile(IDENTITY).action is Action.DONE
        assert store.writes == []
        assert labels_of(store) == {"type": "Database"}

    def test_second_pass_is_noop(self, store, resource):
        """Labeling happens once."""
        store.put(resource(KIND_PROVISIONER, "pg", {"typeKindSpecific": "<Database<SQL<acme:pg:ha:14>>>"}))
        handler = ProvisionerHandler(store)

        handler.reconcile(IDENTITY)
        handler.reconcile(IDENTITY)

        assert len(store.writes) == 1

    @pytest.mark.parametrize("descriptor", [None, "", "Database:SQL", "<Database<SQL<acme:pg:ha>>>"])
    def test_invalid_descriptor_is_error(self, store, resource, events, descriptor):
        """An unparseable descriptor is reported and nothing is written."""
        store.put(resource(KIND_PROVISIONER, "pg", {"typeKindSpecific": descriptor}))
        handler = ProvisionerHandler(store)

        directive = handler.reconcile(IDENTITY)

        assert directive.action is Action.ERROR
        assert isinstance(directive.error, BuildError)
        assert store.writes == []
        assert events.call_args[1]["reason"] == "DescriptorInvalid"
        assert events.call_args[1]["type"] == "Warning"

    def test_missing_provisioner_is_done(self, store):
        """A deleted provisioner ends the pass."""
        handler = ProvisionerHandler(store)

        assert handler.reconcile(IDENTITY).action is Action.DONE

    def test_conflicting_label_write_requeues(self, store, resource):
        """A concurrent edit of the provisioner asks for an immediate re-read."""
        store.put(resource(KIND_PROVISIONER, "pg", {"typeKindSpecific": "<Database<SQL<acme:pg:ha:14>>>"}))
        store.fail_next[("update", KIND_PROVISIONER)] = ConflictError("stale")
        handler = ProvisionerHandler(store)

        assert handler.reconcile(IDENTITY).action is Action.REQUEUE_NOW
        assert store.writes == []
