"""Provider that performs no monitor actions."""

from typing import List

from ..errors import MonitorNotFoundError
from ..logging_config import get_logger
from ..models import Monitor
from . import Provider

logger = get_logger(__name__)


class NullProvider(Provider):
    """Logs monitor events without talking to any monitoring service."""

    def create(self, monitor: Monitor) -> None:
        logger.info("Null provider create", monitor=monitor.name, url=monitor.url)

    def get(self, name: str) -> Monitor:
        raise MonitorNotFoundError(name)

    def update(self, monitor: Monitor) -> None:
        logger.info("Null provider update", monitor=monitor.name, url=monitor.url)

    def delete(self, name: str) -> None:
        logger.info("Null provider delete", monitor=name)

    def get_ip_source_ranges(self, monitor: Monitor) -> List[str]:
        # Only localhost is whitelisted.
        return ["127.0.0.1/32"]
