"""Builders for the children of a standalone Postgres resource."""

from __future__ import annotations

import os
from typing import Any

from .common import env, secret_env, spec_of
from .credentials import credential_name
from .endpoint import build_endpoint
from .storage import build_storage_claim
from .workload import build_deployment, container_port

POSTGRES_IMAGE = os.getenv("POSTGRES_IMAGE", "postgres:14.2-alpine")
POSTGRES_STORAGE_SIZE = "10Gi"
POSTGRES_PORT = 5432
PGDATA = "/var/lib/postgresql/data"


def postgres_storage(postgres: dict[str, Any]) -> dict[str, Any]:
    spec = spec_of(postgres)
    return build_storage_claim(
        postgres,
        postgres["metadata"]["name"],
        POSTGRES_STORAGE_SIZE,
        storage_class=spec.get("storageClass"),
        bind_owner=spec.get("managePvc", True),
    )


def postgres_deployment(postgres: dict[str, Any]) -> dict[str, Any]:
    name = postgres["metadata"]["name"]
    return build_deployment(
        postgres,
        name,
        labels={"name": name},
        container_name="postgres",
        image=POSTGRES_IMAGE,
        env=[
            env("PGDATA", PGDATA),
            secret_env("POSTGRES_PASSWORD", credential_name(postgres)),
        ],
        ports=[container_port("postgres", POSTGRES_PORT)],
        data_claim=name,
        data_path=PGDATA,
    )


def postgres_service(postgres: dict[str, Any]) -> dict[str, Any]:
    name = postgres["metadata"]["name"]
    return build_endpoint(
        postgres,
        name,
        spec_of(postgres).get("serviceType"),
        "postgres",
        POSTGRES_PORT,
        POSTGRES_PORT,
        {"name": name},
    )
