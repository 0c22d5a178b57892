"""Prometheus metrics for monitor operations."""

from prometheus_client import Counter

INGRESS_VALIDATION_ERRORS_TOTAL = Counter(
    "ingress_monitor_ingress_validation_errors_total",
    "Total number of ingresses that did not qualify for a monitor",
    ["namespace", "name"],
)

MONITORS_CREATED_TOTAL = Counter(
    "ingress_monitor_monitors_created_total",
    "Total number of monitors created",
    ["monitor"],
)

MONITORS_UPDATED_TOTAL = Counter(
    "ingress_monitor_monitors_updated_total",
    "Total number of monitors updated",
    ["monitor"],
)

MONITORS_DELETED_TOTAL = Counter(
    "ingress_monitor_monitors_deleted_total",
    "Total number of monitors deleted",
    ["monitor"],
)
