"""Handler for StarlaneProvisioner CRD."""

from __future__ import annotations

from ..constants import KIND_PROVISIONER
from ..descriptor import parse_descriptor
from ..errors import BuildError
from ..models import Directive, ResourceIdentity
from ..store import ResourceStore
from ..utils.errors import sanitize_exception
from ..utils.events import emit_descriptor_invalid, emit_labeled
from .base import BaseHandler


class ProvisionerHandler(BaseHandler):
    """Tags provisioners with discovery labels derived from their type descriptor."""

    def __init__(self, store: ResourceStore):
        super().__init__(KIND_PROVISIONER, store)

    def converge(self, identity: ResourceIdentity) -> Directive:
        provisioner = self.store.get(self.kind, identity.namespace, identity.name)
        meta = provisioner.setdefault("metadata", {})
        labels = meta.get("labels") or {}

        if "type" in labels:
            # Labels are derived once and then treated as stable
            return Directive.done()

        descriptor = (provisioner.get("spec") or {}).get("typeKindSpecific")
        try:
            tks = parse_descriptor(descriptor)
        except BuildError as e:
            self.log_warning(
                meta,
                f"Cannot label provisioner: {sanitize_exception(e)}",
                reason="DescriptorInvalid",
                descriptor=descriptor,
            )
            emit_descriptor_invalid(provisioner, str(e))
            return Directive.failed(e)

        meta["labels"] = {**labels, **tks.labels()}
        self.store.update(provisioner)
        self.log_info(meta, "Provisioner labels updated", reason="Labeled", labels=tks.labels())
        emit_labeled(provisioner, descriptor)
        return Directive.done()
