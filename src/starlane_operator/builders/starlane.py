"""Builders for the children of a Starlane resource.

A Starlane instance runs the starlane server, a Keycloak identity service,
and a Postgres database backing Keycloak. All three read the same generated
password from the secret named after the Starlane resource.
"""

from __future__ import annotations

import os
from typing import Any

from .common import env, secret_env, spec_of
from .credentials import credential_name
from .endpoint import build_endpoint
from .postgres import PGDATA, POSTGRES_IMAGE, POSTGRES_PORT
from .storage import build_storage_claim
from .workload import build_deployment, container_port

STARLANE_IMAGE = os.getenv("STARLANE_IMAGE", "starlane/starlane:latest")
KEYCLOAK_IMAGE = os.getenv("KEYCLOAK_IMAGE", "jboss/keycloak:13.0.1")

KEYCLOAK_DB_STORAGE_SIZE = "5Gi"

GATEWAY_PORT = 4343
HTTP_PORT = 8080
WEB_PORT = 80


def keycloak_db_name(starlane: dict[str, Any]) -> str:
    return f"{starlane['metadata']['name']}-postgres-4-keycloak"


def keycloak_name(starlane: dict[str, Any]) -> str:
    return f"{starlane['metadata']['name']}-keycloak"


def web_name(starlane: dict[str, Any]) -> str:
    return f"{starlane['metadata']['name']}-web"


def gateway_name(starlane: dict[str, Any]) -> str:
    return f"{starlane['metadata']['name']}-gateway"


def labels_for_standalone(galaxy: str) -> dict[str, str]:
    return {"app": "starlane", "galaxy": galaxy, "web": "true", "gateway": "true"}


def labels_for_web(galaxy: str) -> dict[str, str]:
    return {"app": "starlane", "galaxy": galaxy, "web": "true"}


def labels_for_gateway(galaxy: str) -> dict[str, str]:
    return {"app": "starlane", "galaxy": galaxy, "gateway": "true"}


def keycloak_db_storage(starlane: dict[str, Any]) -> dict[str, Any]:
    spec = spec_of(starlane)
    return build_storage_claim(
        starlane,
        keycloak_db_name(starlane),
        KEYCLOAK_DB_STORAGE_SIZE,
        storage_class=spec.get("storageClass"),
        bind_owner=spec.get("managePvc", True),
    )


def keycloak_db_deployment(starlane: dict[str, Any]) -> dict[str, Any]:
    name = keycloak_db_name(starlane)
    return build_deployment(
        starlane,
        name,
        labels={"name": name},
        container_name="postgres",
        image=POSTGRES_IMAGE,
        env=[
            env("PGDATA", PGDATA),
            secret_env("POSTGRES_PASSWORD", credential_name(starlane)),
        ],
        ports=[container_port("postgres", POSTGRES_PORT)],
        data_claim=name,
        data_path=PGDATA,
    )


def keycloak_db_service(starlane: dict[str, Any]) -> dict[str, Any]:
    name = keycloak_db_name(starlane)
    return build_endpoint(
        starlane, name, "ClusterIP", "postgres", POSTGRES_PORT, POSTGRES_PORT, {"name": name}
    )


def keycloak_deployment(starlane: dict[str, Any]) -> dict[str, Any]:
    name = keycloak_name(starlane)
    secret = credential_name(starlane)
    return build_deployment(
        starlane,
        name,
        labels={"name": name},
        container_name="keycloak",
        image=KEYCLOAK_IMAGE,
        env=[
            env("DB_VENDOR", "postgres"),
            env("DB_ADDR", keycloak_db_name(starlane)),
            env("DB_PORT", str(POSTGRES_PORT)),
            env("DB_USER", "postgres"),
            env("DB_DATABASE", "postgres"),
            env("KEYCLOAK_USER", "hyperuser"),
            env("KEYCLOAK_CORS", "true"),
            env("KEYCLOAK_ALWAYS_HTTPS", "false"),
            env("PROTOCOL", "http"),
            env("PROXY_ADDRESS_FORWARDING", "true"),
            secret_env("KEYCLOAK_PASSWORD", secret),
            secret_env("DB_PASSWORD", secret),
        ],
        ports=[container_port("keycloak", HTTP_PORT)],
    )


def keycloak_service(starlane: dict[str, Any]) -> dict[str, Any]:
    name = keycloak_name(starlane)
    return build_endpoint(starlane, name, "LoadBalancer", "keycloak", HTTP_PORT, HTTP_PORT, {"name": name})


def starlane_deployment(starlane: dict[str, Any]) -> dict[str, Any]:
    meta = starlane["metadata"]
    name = meta["name"]
    return build_deployment(
        starlane,
        name,
        labels=labels_for_standalone(name),
        container_name="starlane",
        image=STARLANE_IMAGE,
        args=["serve", "--with-external"],
        env=[
            env("STARLANE_KUBERNETES_INSTANCE_NAME", name),
            env("STARLANE_KEYCLOAK_URL", f"{keycloak_name(starlane)}:{HTTP_PORT}"),
            env("NAMESPACE", meta.get("namespace", "default")),
            secret_env("STARLANE_PASSWORD", credential_name(starlane)),
        ],
        ports=[container_port("gateway", GATEWAY_PORT), container_port("http", HTTP_PORT)],
    )


def web_service(starlane: dict[str, Any]) -> dict[str, Any]:
    return build_endpoint(
        starlane,
        web_name(starlane),
        spec_of(starlane).get("webServiceType"),
        "http",
        WEB_PORT,
        HTTP_PORT,
        labels_for_web(starlane["metadata"]["name"]),
    )


def gateway_service(starlane: dict[str, Any]) -> dict[str, Any]:
    return build_endpoint(
        starlane,
        gateway_name(starlane),
        spec_of(starlane).get("gatewayServiceType"),
        "gateway",
        GATEWAY_PORT,
        GATEWAY_PORT,
        labels_for_gateway(starlane["metadata"]["name"]),
    )
