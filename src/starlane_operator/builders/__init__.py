"""Desired-state builders: pure functions from a parent resource to child manifests."""

from .credentials import build_credential
from .endpoint import build_endpoint
from .job import build_provisioning_job
from .storage import build_storage_claim
from .workload import build_deployment

__all__ = [
    "build_credential",
    "build_deployment",
    "build_endpoint",
    "build_provisioning_job",
    "build_storage_claim",
]
