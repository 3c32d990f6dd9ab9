"""Handlers for the Starlane CRDs. Each one runs a single convergence pass per call."""

from .base import BaseHandler
from .convergence import ConvergenceHandler, Tier
from .lifecycle import ProvisioningHandler
from .postgres import PostgresHandler
from .provisioner import ProvisionerHandler
from .starlane import StarlaneHandler

__all__ = [
    "BaseHandler",
    "ConvergenceHandler",
    "PostgresHandler",
    "ProvisionerHandler",
    "ProvisioningHandler",
    "StarlaneHandler",
    "Tier",
]
