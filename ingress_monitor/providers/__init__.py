"""Monitor provider interface and provider selection."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

from ..errors import UnsupportedProviderError
from ..models import Monitor

if TYPE_CHECKING:
    from ..config import ProviderConfig


class Provider(ABC):
    """Abstract base class for monitor providers."""

    @abstractmethod
    def create(self, monitor: Monitor) -> None:
        """Create a monitor from the given model."""

    @abstractmethod
    def get(self, name: str) -> Monitor:
        """Retrieve a monitor by name.

        Raises:
            MonitorNotFoundError: if no monitor with that name exists
        """

    @abstractmethod
    def update(self, monitor: Monitor) -> None:
        """Update the monitor identified by ``monitor.id``."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Delete a monitor by name.

        Raises:
            MonitorNotFoundError: if no monitor with that name exists
        """

    @abstractmethod
    def get_ip_source_ranges(self, monitor: Monitor) -> List[str]:
        """Return the CIDR blocks the provider performs checks for the monitor from.

        These are added to the source range whitelist of ingresses that
        restrict inbound traffic.
        """


def new_provider(name: str, provider_config: "ProviderConfig") -> Provider:
    """Create a monitor provider by name.

    Raises:
        UnsupportedProviderError: if the named provider is not supported
    """
    from ..config import PROVIDER_NULL, PROVIDER_SITE24X7

    if name == PROVIDER_SITE24X7:
        from .site24x7.provider import Site24x7Provider
        return Site24x7Provider.from_config(provider_config.site24x7)
    elif name == PROVIDER_NULL:
        from .null import NullProvider
        return NullProvider()

    raise UnsupportedProviderError(name)
