"""kopf handlers feeding ingress changes to the reconciler."""

import asyncio
import contextvars
import threading
from typing import Optional

import kopf
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from .errors import IngressMonitorError
from .logging_config import bind_controller_context, get_logger, log_function_entry, log_function_exit
from .reconciler import IngressReconciler

logger = get_logger(__name__)

INGRESS_RESOURCE = ("networking.k8s.io", "v1", "ingresses")

# kopf keeps handler progress and the last handled state in annotations
# under this prefix.
KOPF_ANNOTATION_PREFIX = "kopf.ingress-monitor.bonial.com"

# Server side timeout of a single watch request in seconds.
WATCH_TIMEOUT = 300

# Bounds of the exponential retry delay of failed reconciliations in seconds.
RETRY_BASE_DELAY = 1.0
RETRY_MAX_DELAY = 300.0

# Seconds to wait for the operator thread on shutdown.
STOP_TIMEOUT = 10.0

registry = kopf.OperatorRegistry()


def load_kubernetes_config(kubeconfig_path: Optional[str] = None, context: Optional[str] = None) -> client.NetworkingV1Api:
    """Load the cluster configuration and return a networking API client.

    Uses the given kubeconfig file if set, in-cluster configuration otherwise.
    """
    log_function_entry(logger, "load_kubernetes_config", kubeconfig_path=kubeconfig_path, context=context)

    try:
        if kubeconfig_path:
            logger.debug("Loading kubeconfig from file", kubeconfig_path=kubeconfig_path, context=context)
            config.load_kube_config(config_file=kubeconfig_path, context=context)
        else:
            logger.debug("Loading in-cluster config")
            config.load_incluster_config()
    except Exception as e:
        logger.error("Failed to load cluster config", error=str(e), kubeconfig_path=kubeconfig_path, context=context)
        raise

    api = client.NetworkingV1Api(client.ApiClient())
    log_function_exit(logger, "load_kubernetes_config", status="success")
    return api


def retry_delay(retry: int) -> float:
    """Exponential backoff for the given number of previous attempts."""
    return min(RETRY_BASE_DELAY * 2 ** retry, RETRY_MAX_DELAY)


def build_settings() -> kopf.OperatorSettings:
    settings = kopf.OperatorSettings()
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(prefix=KOPF_ANNOTATION_PREFIX)
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(prefix=KOPF_ANNOTATION_PREFIX)
    settings.watching.server_timeout = WATCH_TIMEOUT
    return settings


@kopf.on.login(registry=registry)
def login(**_) -> kopf.ConnectionInfo:
    """Reuse the configuration loaded by :func:`load_kubernetes_config`."""
    configuration = client.Configuration.get_default_copy()

    header = configuration.get_api_key_with_prefix("authorization")
    parts = header.split(" ", 1) if header else []
    if len(parts) == 2:
        scheme, token = parts
    else:
        scheme, token = None, (parts[0] if parts else None)

    return kopf.ConnectionInfo(
        server=configuration.host,
        ca_path=configuration.ssl_ca_cert,
        insecure=not configuration.verify_ssl,
        username=configuration.username or None,
        password=configuration.password or None,
        scheme=scheme,
        token=token,
        certificate_path=configuration.cert_file,
        private_key_path=configuration.key_file,
    )


@kopf.on.resume(*INGRESS_RESOURCE, registry=registry)
@kopf.on.create(*INGRESS_RESOURCE, registry=registry)
@kopf.on.update(*INGRESS_RESOURCE, registry=registry)
def reconcile_ingress(name: str, namespace: str, memo: kopf.Memo, retry: int = 0, **_) -> None:
    """Reconcile the monitor of a created, changed or (on startup) existing ingress.

    Failures and delayed monitor creation are retried by kopf.
    """
    try:
        result = memo.reconciler.reconcile(namespace, name)
    except (ApiException, IngressMonitorError) as e:
        delay = retry_delay(retry)
        logger.error("Reconciliation failed, retrying", namespace=namespace, name=name, error=str(e), retry_in=delay)
        raise kopf.TemporaryError(f"reconciliation of {namespace}/{name} failed: {e}", delay=delay) from e

    if result.requeue_after:
        raise kopf.TemporaryError("monitor creation is delayed", delay=result.requeue_after)


@kopf.on.event(*INGRESS_RESOURCE, registry=registry)
def ingress_event(event: kopf.RawEvent, name: str, namespace: str, memo: kopf.Memo, **_) -> None:
    """Delete the monitor of a deleted ingress.

    Ingresses get no finalizers, so deletion is only observed as a watch event.
    """
    if event["type"] != "DELETED":
        return

    logger.debug("Ingress deleted", namespace=namespace, name=name)
    try:
        memo.reconciler.reconcile(namespace, name)
    except (ApiException, IngressMonitorError) as e:
        logger.error("Failed to delete monitor of deleted ingress", namespace=namespace, name=name, error=str(e))


class IngressController:
    """Runs the kopf operator for ingresses in a background thread.

    The operator gets its own event loop, so it neither competes with the
    HTTP server for signal handlers nor blocks its shutdown.
    """

    def __init__(self, reconciler: IngressReconciler, namespace: Optional[str] = None):
        self.reconciler = reconciler
        self.namespace = namespace
        self._ready_flag = threading.Event()
        self._stop_flag = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def ready(self) -> bool:
        return self._ready_flag.is_set()

    def start(self) -> None:
        logger.info("Starting ingress controller", namespace=self.namespace or "all")
        self._stop_flag.clear()
        # the operator thread inherits the log context of the caller
        context = contextvars.copy_context()
        self._thread = threading.Thread(target=context.run, args=(self._run,), name="ingress-controller", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = STOP_TIMEOUT) -> None:
        logger.info("Stopping ingress controller")
        self._stop_flag.set()

        if self._thread is None:
            return

        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Ingress controller did not stop in time", timeout=timeout)

    def _run(self) -> None:
        bind_controller_context(namespace=self.namespace or "all")
        try:
            asyncio.run(self.operator())
        except Exception:
            logger.exception("Ingress controller failed")
        finally:
            self._ready_flag.clear()

    async def operator(self) -> None:
        """Run the kopf operator until the stop flag is set."""
        await kopf.operator(
            registry=registry,
            settings=build_settings(),
            standalone=True,
            clusterwide=self.namespace is None,
            namespaces=[self.namespace] if self.namespace else [],
            memo=kopf.Memo(reconciler=self.reconciler),
            ready_flag=self._ready_flag,
            stop_flag=self._stop_flag,
        )
