"""Handler for Starlane CRD."""

from __future__ import annotations

from typing import Any

from ..builders import starlane as children
from ..builders.credentials import build_credential, credential_name
from ..builders.endpoint import exposure_drift
from ..constants import KIND_DEPLOYMENT, KIND_PVC, KIND_SECRET, KIND_SERVICE, KIND_STARLANE
from ..store import ResourceStore
from ..utils.passwords import generate_password
from .convergence import ConvergenceHandler, Tier


class StarlaneHandler(ConvergenceHandler):
    """Handler for Starlane resources."""

    def __init__(self, store: ResourceStore):
        super().__init__(KIND_STARLANE, store)

    def tiers(self, parent: dict[str, Any]) -> list[Tier]:
        name = parent["metadata"]["name"]
        keycloak_db = children.keycloak_db_name(parent)
        keycloak = children.keycloak_name(parent)
        return [
            # Keycloak's database: storage -> credential -> workload -> endpoint
            Tier("keycloak-db-storage", KIND_PVC, keycloak_db, lambda: children.keycloak_db_storage(parent)),
            Tier(
                "credential",
                KIND_SECRET,
                credential_name(parent),
                lambda: build_credential(parent, generate_password()),
            ),
            Tier("keycloak-db", KIND_DEPLOYMENT, keycloak_db, lambda: children.keycloak_db_deployment(parent)),
            Tier(
                "keycloak-db-endpoint",
                KIND_SERVICE,
                keycloak_db,
                lambda: children.keycloak_db_service(parent),
                exposure_drift,
            ),
            # Identity service
            Tier("keycloak", KIND_DEPLOYMENT, keycloak, lambda: children.keycloak_deployment(parent)),
            Tier(
                "keycloak-endpoint",
                KIND_SERVICE,
                keycloak,
                lambda: children.keycloak_service(parent),
                exposure_drift,
            ),
            # Primary workload and its endpoints
            Tier("starlane", KIND_DEPLOYMENT, name, lambda: children.starlane_deployment(parent)),
            Tier(
                "web-endpoint",
                KIND_SERVICE,
                children.web_name(parent),
                lambda: children.web_service(parent),
                exposure_drift,
            ),
            Tier(
                "gateway-endpoint",
                KIND_SERVICE,
                children.gateway_name(parent),
                lambda: children.gateway_service(parent),
                exposure_drift,
            ),
        ]
