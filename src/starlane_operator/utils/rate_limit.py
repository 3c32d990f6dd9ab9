"""Rate limiting utilities for API calls."""

from __future__ import annotations

import os
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from kubernetes.client.exceptions import ApiException

_F = TypeVar("_F", bound=Callable[..., Any])

# Rate limit configuration
_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))

# Track last call time
_k8s_last_call_time: float = 0.0


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls.

    Spaces calls at least ``1 / K8S_RATE_LIMIT_PER_SECOND`` seconds apart so a
    burst of convergence passes does not overwhelm the API server.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        current_time = time.time()
        min_interval = 1.0 / _K8S_RATE_LIMIT_PER_SECOND

        time_since_last_call = current_time - _k8s_last_call_time
        if time_since_last_call < min_interval:
            time.sleep(min_interval - time_since_last_call)

        _k8s_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def is_rate_limit_error(e: ApiException) -> bool:
    """Check whether an API exception means the server is throttling us."""
    # Kubernetes API rate limit errors typically return 429 or 503
    return e.status == 429 or (e.status == 503 and "rate limit" in str(e).lower())
