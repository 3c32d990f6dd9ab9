"""Resource store used by the handlers.

Handlers only see the :class:`ResourceStore` protocol. The production
implementation, :class:`KubernetesStore`, talks to the API server through the
official client and hands objects around as plain camelCase dicts.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from kubernetes import client
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from . import metrics
from .constants import (
    API_GROUP,
    API_VERSION,
    FIELD_MANAGER,
    KIND_DEPLOYMENT,
    KIND_JOB,
    KIND_POSTGRES,
    KIND_PROVISIONER,
    KIND_PROVISIONING_JOB,
    KIND_PVC,
    KIND_RESOURCE,
    KIND_SECRET,
    KIND_SERVICE,
    KIND_STARLANE,
)
from .errors import AlreadyExistsError, ConflictError, NotFoundError, StoreError
from .utils.errors import sanitize_exception
from .utils.rate_limit import is_rate_limit_error, rate_limit_k8s


class ResourceStore(Protocol):
    """Protocol defining the object store operations the handlers depend on."""

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        """Fetch an object.

        Raises:
            NotFoundError: If the object does not exist
        """
        ...

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Create an object.

        Raises:
            AlreadyExistsError: If an object with the same name exists
        """
        ...

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace an object's metadata and spec.

        Raises:
            ConflictError: If ``metadata.resourceVersion`` is stale
        """
        ...

    def update_status(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace an object's status through the status subresource.

        Raises:
            ConflictError: If ``metadata.resourceVersion`` is stale
        """
        ...

    def annotate(self, kind: str, namespace: str, name: str, annotations: dict[str, str]) -> dict[str, Any]:
        """Merge ``annotations`` into an object without a resourceVersion check.

        Raises:
            NotFoundError: If the object does not exist
        """
        ...


@dataclass(frozen=True)
class CoreKind:
    """A built-in kind served by one of the typed API classes."""

    api: str
    resource: str


@dataclass(frozen=True)
class CustomKind:
    """A custom resource kind served by CustomObjectsApi."""

    plural: str
    group: str = API_GROUP
    version: str = API_VERSION


CORE_KINDS: dict[str, CoreKind] = {
    KIND_PVC: CoreKind("core", "persistent_volume_claim"),
    KIND_SECRET: CoreKind("core", "secret"),
    KIND_SERVICE: CoreKind("core", "service"),
    KIND_DEPLOYMENT: CoreKind("apps", "deployment"),
    KIND_JOB: CoreKind("batch", "job"),
}

CUSTOM_KINDS: dict[str, CustomKind] = {
    KIND_STARLANE: CustomKind("starlanes"),
    KIND_POSTGRES: CustomKind("postgres"),
    KIND_PROVISIONER: CustomKind("starlaneprovisioners"),
    KIND_RESOURCE: CustomKind("starlaneresources"),
    KIND_PROVISIONING_JOB: CustomKind("starlaneprovisioningjobs"),
}


def get_api_client() -> client.ApiClient:
    """Load cluster credentials and return an API client.

    Returns:
        ApiClient configured in-cluster, or from kubeconfig outside a cluster
    """
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return client.ApiClient()


class KubernetesStore:
    """ResourceStore backed by the Kubernetes API server."""

    def __init__(self, api_client: client.ApiClient | None = None, max_rate_limit_retries: int = 3):
        self.api_client = api_client or get_api_client()
        self.max_rate_limit_retries = max_rate_limit_retries
        self._apis = {
            "core": client.CoreV1Api(self.api_client),
            "apps": client.AppsV1Api(self.api_client),
            "batch": client.BatchV1Api(self.api_client),
        }
        self._custom = client.CustomObjectsApi(self.api_client)

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        if kind in CUSTOM_KINDS:
            crd = CUSTOM_KINDS[kind]
            return self._call(
                "get", kind, namespace, name,
                lambda: self._custom.get_namespaced_custom_object(
                    group=crd.group,
                    version=crd.version,
                    namespace=namespace,
                    plural=crd.plural,
                    name=name,
                ),
            )
        core = self._core_kind(kind)
        read = getattr(self._apis[core.api], f"read_namespaced_{core.resource}")
        return self._call("get", kind, namespace, name, lambda: read(name=name, namespace=namespace))

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        kind, namespace, name = _address(obj)
        if kind in CUSTOM_KINDS:
            crd = CUSTOM_KINDS[kind]
            return self._call(
                "create", kind, namespace, name,
                lambda: self._custom.create_namespaced_custom_object(
                    group=crd.group,
                    version=crd.version,
                    namespace=namespace,
                    plural=crd.plural,
                    body=obj,
                    field_manager=FIELD_MANAGER,
                ),
            )
        core = self._core_kind(kind)
        create = getattr(self._apis[core.api], f"create_namespaced_{core.resource}")
        return self._call(
            "create", kind, namespace, name,
            lambda: create(namespace=namespace, body=obj, field_manager=FIELD_MANAGER),
        )

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        return self._replace(obj, status=False)

    def update_status(self, obj: dict[str, Any]) -> dict[str, Any]:
        return self._replace(obj, status=True)

    def annotate(self, kind: str, namespace: str, name: str, annotations: dict[str, str]) -> dict[str, Any]:
        body = {"metadata": {"annotations": annotations}}
        if kind in CUSTOM_KINDS:
            crd = CUSTOM_KINDS[kind]
            return self._call(
                "annotate", kind, namespace, name,
                lambda: self._custom.patch_namespaced_custom_object(
                    group=crd.group,
                    version=crd.version,
                    namespace=namespace,
                    plural=crd.plural,
                    name=name,
                    body=body,
                    field_manager=FIELD_MANAGER,
                ),
            )
        core = self._core_kind(kind)
        patch = getattr(self._apis[core.api], f"patch_namespaced_{core.resource}")
        return self._call(
            "annotate", kind, namespace, name,
            lambda: patch(name=name, namespace=namespace, body=body, field_manager=FIELD_MANAGER),
        )

    def _replace(self, obj: dict[str, Any], status: bool) -> dict[str, Any]:
        kind, namespace, name = _address(obj)
        operation = "update_status" if status else "update"
        suffix = "_status" if status else ""
        if kind in CUSTOM_KINDS:
            crd = CUSTOM_KINDS[kind]
            replace = getattr(self._custom, f"replace_namespaced_custom_object{suffix}")
            return self._call(
                operation, kind, namespace, name,
                lambda: replace(
                    group=crd.group,
                    version=crd.version,
                    namespace=namespace,
                    plural=crd.plural,
                    name=name,
                    body=obj,
                    field_manager=FIELD_MANAGER,
                ),
            )
        core = self._core_kind(kind)
        replace = getattr(self._apis[core.api], f"replace_namespaced_{core.resource}{suffix}")
        return self._call(
            operation, kind, namespace, name,
            lambda: replace(name=name, namespace=namespace, body=obj, field_manager=FIELD_MANAGER),
        )

    def _core_kind(self, kind: str) -> CoreKind:
        try:
            return CORE_KINDS[kind]
        except KeyError:
            raise StoreError(f"unsupported kind {kind}") from None

    def _call(
        self,
        operation: str,
        kind: str,
        namespace: str,
        name: str,
        fn: Callable[[], Any],
    ) -> dict[str, Any]:
        """Run one API call with rate limiting, metrics and error translation."""
        metric_op = f"{operation}_{kind.lower()}"
        start_time = time.time()
        attempt = 0
        try:
            while True:
                try:
                    result = rate_limit_k8s(fn)()
                    metrics.api_call_total.labels(api_type="k8s", operation=metric_op, result="success").inc()
                    return self._to_dict(result)
                except ApiException as e:
                    if is_rate_limit_error(e) and attempt < self.max_rate_limit_retries:
                        metrics.api_call_total.labels(api_type="k8s", operation=metric_op, result="throttled").inc()
                        # Exponential backoff: 1s, 2s, 4s
                        time.sleep(2 ** attempt)
                        attempt += 1
                        continue
                    raise self._translate(e, operation, kind, namespace, name) from e
                except (HTTPError, OSError) as e:
                    # API server unreachable or the connection dropped mid-call
                    metrics.api_call_total.labels(api_type="k8s", operation=metric_op, result="error").inc()
                    raise StoreError(
                        f"{operation} {kind} {namespace}/{name} failed: {sanitize_exception(e)}"
                    ) from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=metric_op).observe(duration)

    def _translate(
        self,
        e: ApiException,
        operation: str,
        kind: str,
        namespace: str,
        name: str,
    ) -> StoreError:
        metric_op = f"{operation}_{kind.lower()}"
        if e.status == 404:
            metrics.api_call_total.labels(api_type="k8s", operation=metric_op, result="not_found").inc()
            return NotFoundError(kind, namespace, name)
        if e.status == 409:
            metrics.api_call_total.labels(api_type="k8s", operation=metric_op, result="conflict").inc()
            if operation == "create":
                return AlreadyExistsError(f"{kind} {namespace}/{name} already exists")
            return ConflictError(f"{kind} {namespace}/{name} was modified concurrently")
        metrics.api_call_total.labels(api_type="k8s", operation=metric_op, result="error").inc()
        return StoreError(
            f"{operation} {kind} {namespace}/{name} failed: {sanitize_exception(e)}",
            status=e.status,
        )

    def _to_dict(self, result: Any) -> dict[str, Any]:
        if isinstance(result, dict):
            return result
        # Typed models serialize to the camelCase wire shape
        return self.api_client.sanitize_for_serialization(result)


def _address(obj: dict[str, Any]) -> tuple[str, str, str]:
    meta = obj.get("metadata", {})
    return obj["kind"], meta.get("namespace", "default"), meta["name"]
