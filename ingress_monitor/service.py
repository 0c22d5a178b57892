"""Monitor service: keeps provider monitors in sync with ingresses."""

from typing import List, Optional, Tuple

from kubernetes.client import V1Ingress

from . import metrics
from .annotations import ANNOTATION_ENABLED, NGINX_WHITELIST_SOURCE_RANGE, Annotations
from .config import Options
from .errors import IngressValidationError, MonitorNotFoundError
from .ingress import build_monitor_url, validate
from .logging_config import get_logger, log_function_entry, log_function_exit, log_monitor_event
from .models import Monitor
from .namer import Namer
from .providers import Provider, new_provider

logger = get_logger(__name__)


class MonitorService:
    """Creates, updates and deletes monitors for ingresses.

    Ingresses that do not qualify for monitoring are skipped silently: they
    only show up in the validation error metric and debug logs. Provider
    and configuration errors are always raised to the caller, which owns
    retries.
    """

    def __init__(self, provider: Provider, namer: Namer, options: Optional[Options] = None):
        self.provider = provider
        self.namer = namer
        self.options = options or Options()

    @classmethod
    def from_options(cls, options: Options) -> "MonitorService":
        """Create a MonitorService with the provider selected by the options."""
        provider = new_provider(options.provider_name, options.provider_config)
        namer = Namer(options.name_template)
        return cls(provider, namer, options)

    def ensure_monitor(self, ingress: V1Ingress) -> None:
        """Ensure that the monitor of an ingress matches its current state.

        The monitor is created if it does not exist yet.
        """
        log_function_entry(logger, "ensure_monitor",
                           namespace=ingress.metadata.namespace,
                           name=ingress.metadata.name)

        if not self._is_supported(ingress):
            log_function_exit(logger, "ensure_monitor", status="skipped")
            return

        new_monitor = self._build_monitor_model(ingress)

        try:
            old_monitor = self.provider.get(new_monitor.name)
        except MonitorNotFoundError:
            self._create_monitor(new_monitor)
            log_function_exit(logger, "ensure_monitor", monitor=new_monitor.name, status="created")
            return

        self._update_monitor(old_monitor, new_monitor)
        log_function_exit(logger, "ensure_monitor", monitor=new_monitor.name, status="updated")

    def delete_monitor(self, ingress: V1Ingress) -> None:
        """Delete the monitor of an ingress.

        A monitor that does not exist (anymore) is not an error.
        """
        name = self.namer.name(ingress)

        if self.options.no_delete:
            logger.debug("Monitor deletion is disabled, not deleting", monitor=name)
            return

        try:
            self.provider.delete(name)
        except MonitorNotFoundError:
            logger.debug("Monitor is not present", monitor=name)
            return

        metrics.MONITORS_DELETED_TOTAL.labels(monitor=name).inc()
        log_monitor_event(logger, "deleted", name)

    def get_provider_ip_source_ranges(self, ingress: V1Ingress) -> List[str]:
        """Return the CIDR blocks the provider checks the ingress' monitor from.

        Unsupported ingresses produce an empty list.
        """
        if not self._is_supported(ingress):
            return []

        monitor = self._build_monitor_model(ingress)

        return self.provider.get_ip_source_ranges(monitor)

    def annotate_ingress(self, ingress: V1Ingress) -> bool:
        """Patch the source range whitelist of an ingress in place if needed.

        Returns:
            True if annotations were changed, False otherwise
        """
        namespace, name = ingress.metadata.namespace, ingress.metadata.name

        if not should_patch_source_range_whitelist(ingress):
            logger.debug("Ingress does not require patching of source range whitelist",
                         namespace=namespace, name=name)
            return False

        provider_source_ranges = self.get_provider_ip_source_ranges(ingress)
        if not provider_source_ranges:
            logger.debug("No provider source ranges available for ingress", namespace=namespace, name=name)
            return False

        annotations = ingress.metadata.annotations
        source_ranges = annotations[NGINX_WHITELIST_SOURCE_RANGE].split(",")

        source_ranges, updated = merge_provider_source_ranges(source_ranges, provider_source_ranges)
        if not updated:
            logger.debug("No source range update needed for ingress", namespace=namespace, name=name)
            return False

        logger.info("Patching ingress source range whitelist", namespace=namespace, name=name)
        annotations[NGINX_WHITELIST_SOURCE_RANGE] = ",".join(source_ranges)

        return True

    def _is_supported(self, ingress: V1Ingress) -> bool:
        namespace, name = ingress.metadata.namespace, ingress.metadata.name

        try:
            validate(ingress)
        except IngressValidationError as e:
            metrics.INGRESS_VALIDATION_ERRORS_TOTAL.labels(namespace=namespace, name=name).inc()
            logger.debug("Ignoring unsupported ingress", namespace=namespace, name=name, error=str(e))
            return False

        return True

    def _build_monitor_model(self, ingress: V1Ingress) -> Monitor:
        return Monitor(
            name=self.namer.name(ingress),
            url=build_monitor_url(ingress),
            annotations=dict(ingress.metadata.annotations or {}),
        )

    def _create_monitor(self, monitor: Monitor) -> None:
        self.provider.create(monitor)

        metrics.MONITORS_CREATED_TOTAL.labels(monitor=monitor.name).inc()
        log_monitor_event(logger, "created", monitor.name, url=monitor.url)

    def _update_monitor(self, old_monitor: Monitor, new_monitor: Monitor) -> None:
        new_monitor.id = old_monitor.id

        self.provider.update(new_monitor)

        metrics.MONITORS_UPDATED_TOTAL.labels(monitor=new_monitor.name).inc()
        log_monitor_event(logger, "updated", new_monitor.name, url=new_monitor.url)


def should_patch_source_range_whitelist(ingress: V1Ingress) -> bool:
    """Return True if the ingress has a monitor and restricts source ranges.

    A whitelist annotation is only ever extended, never created.
    """
    annotations = Annotations(ingress.metadata.annotations)

    if not annotations.bool_value(ANNOTATION_ENABLED):
        return False

    return bool(annotations.string_value(NGINX_WHITELIST_SOURCE_RANGE))


def merge_provider_source_ranges(source_ranges: List[str], provider_source_ranges: List[str]) -> Tuple[List[str], bool]:
    """Merge provider source ranges into a whitelist.

    Ranges that are already present are not added again. Existing entries
    keep their order, missing ones are appended in provider order.

    Returns:
        The merged whitelist and whether it changed
    """
    missing = difference(provider_source_ranges, source_ranges)
    if not missing:
        return list(source_ranges), False

    logger.info("Missing source ranges", cidr_blocks=missing)

    return list(source_ranges) + missing, True


def difference(a: List[str], b: List[str]) -> List[str]:
    """Return the elements of a that are not in b, keeping the order of a."""
    seen = set(b)
    return [el for el in a if el not in seen]
