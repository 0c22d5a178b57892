"""Reconciliation of single ingresses to their desired monitor state."""

import copy
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException
from pydantic import BaseModel, Field

from .annotations import ANNOTATION_ENABLED
from .config import Options
from .logging_config import get_logger, log_function_entry, log_function_exit, log_k8s_operation
from .service import MonitorService

logger = get_logger(__name__)


class ReconcileResult(BaseModel):
    """Outcome of a reconciliation."""

    requeue_after: Optional[float] = Field(None, description="Seconds after which to reconcile the ingress again")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IngressReconciler:
    """Creates, updates or deletes monitors whenever an ingress changes."""

    def __init__(
        self,
        networking_api: client.NetworkingV1Api,
        monitor_service: MonitorService,
        options: Optional[Options] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        options = options or Options()
        self.networking_api = networking_api
        self.monitor_service = monitor_service
        self.creation_delay = timedelta(seconds=options.creation_delay)
        self.clock = clock

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Reconcile the monitor of the ingress namespace/name.

        Raises:
            ApiException: if reading or updating the ingress fails
            IngressMonitorError: if a monitor operation fails
        """
        log_function_entry(logger, "reconcile", namespace=namespace, name=name)
        log_k8s_operation(logger, "read_ingress", namespace, name)

        try:
            ingress = self.networking_api.read_namespaced_ingress(name=name, namespace=namespace)
        except ApiException as e:
            if e.status != 404:
                raise

            # The ingress was deleted, a metadata-only object is enough to
            # derive the monitor name.
            logger.debug("Ingress not found, deleting monitor", namespace=namespace, name=name)
            ingress = client.V1Ingress(metadata=client.V1ObjectMeta(name=name, namespace=namespace))
            self.monitor_service.delete_monitor(ingress)
            return ReconcileResult()

        annotations = ingress.metadata.annotations or {}
        if annotations.get(ANNOTATION_ENABLED) != "true":
            self.monitor_service.delete_monitor(ingress)
            return ReconcileResult()

        create_after = self._create_after(ingress)
        if create_after > 0:
            logger.debug("Delaying monitor creation", namespace=namespace, name=name, seconds=create_after)
            return ReconcileResult(requeue_after=create_after)

        self._handle_create_or_update(ingress)

        log_function_exit(logger, "reconcile", namespace=namespace, name=name)
        return ReconcileResult()

    def _create_after(self, ingress: client.V1Ingress) -> float:
        created = ingress.metadata.creation_timestamp
        if not self.creation_delay or created is None:
            return 0.0

        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)

        return ((created + self.creation_delay) - self.clock()).total_seconds()

    def _handle_create_or_update(self, ingress: client.V1Ingress) -> None:
        # An updated ingress produces a new update event which is reconciled
        # separately, so the monitor is not ensured twice.
        if self._reconcile_annotations(ingress):
            return

        self.monitor_service.ensure_monitor(ingress)

    def _reconcile_annotations(self, ingress: client.V1Ingress) -> bool:
        """Patch the source range whitelist and persist the ingress if it changed."""
        ingress_copy = copy.deepcopy(ingress)

        if not self.monitor_service.annotate_ingress(ingress_copy):
            return False

        namespace, name = ingress.metadata.namespace, ingress.metadata.name
        log_k8s_operation(logger, "replace_ingress", namespace, name)
        self.networking_api.replace_namespaced_ingress(name=name, namespace=namespace, body=ingress_copy)

        return True
