"""Starlane Operator: converges Starlane custom resources onto a Kubernetes cluster."""

__version__ = "0.1.0"
