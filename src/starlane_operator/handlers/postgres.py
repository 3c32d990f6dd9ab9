"""Handler for Postgres CRD."""

from __future__ import annotations

from typing import Any

from ..builders import postgres as children
from ..builders.credentials import build_credential, credential_name
from ..builders.endpoint import exposure_drift
from ..constants import KIND_DEPLOYMENT, KIND_POSTGRES, KIND_PVC, KIND_SECRET, KIND_SERVICE
from ..store import ResourceStore
from ..utils.passwords import generate_password
from .convergence import ConvergenceHandler, Tier


class PostgresHandler(ConvergenceHandler):
    """Handler for standalone Postgres resources."""

    def __init__(self, store: ResourceStore):
        super().__init__(KIND_POSTGRES, store)

    def tiers(self, parent: dict[str, Any]) -> list[Tier]:
        name = parent["metadata"]["name"]
        return [
            Tier("storage", KIND_PVC, name, lambda: children.postgres_storage(parent)),
            Tier(
                "credential",
                KIND_SECRET,
                credential_name(parent),
                lambda: build_credential(parent, generate_password()),
            ),
            Tier("postgres", KIND_DEPLOYMENT, name, lambda: children.postgres_deployment(parent)),
            Tier("endpoint", KIND_SERVICE, name, lambda: children.postgres_service(parent), exposure_drift),
        ]
