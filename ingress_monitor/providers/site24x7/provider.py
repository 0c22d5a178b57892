"""Site24x7 website monitor provider."""

from typing import List, Optional

from cachetools import TTLCache

from ...config import Site24x7Config
from ...errors import MonitorNotFoundError
from ...logging_config import get_logger
from ...models import Monitor
from .. import Provider
from .builder import MonitorBuilder
from .client import Site24x7Client
from .location import IPSource, ProfileIPProvider, StaticIPSource, TemplateIPSource

logger = get_logger(__name__)

# Location profiles rarely change, so their IP source ranges are cached for a day.
SOURCE_RANGE_CACHE_TTL = 24 * 60 * 60

SOURCE_RANGE_CACHE_SIZE = 1024


class Site24x7Provider(Provider):
    """Manages Site24x7 website monitors."""

    def __init__(
        self,
        client: Site24x7Client,
        config: Site24x7Config,
        ip_provider: Optional[ProfileIPProvider] = None,
        source_range_cache: Optional[TTLCache] = None,
    ):
        self.client = client
        self.config = config
        self.builder = MonitorBuilder(client, config.monitor_defaults)
        self._ip_provider = ip_provider
        if source_range_cache is None:
            source_range_cache = TTLCache(maxsize=SOURCE_RANGE_CACHE_SIZE, ttl=SOURCE_RANGE_CACHE_TTL)
        self._source_range_cache = source_range_cache

    @classmethod
    def from_config(cls, config: Site24x7Config) -> "Site24x7Provider":
        client = Site24x7Client(
            client_id=config.client_id,
            client_secret=config.client_secret,
            refresh_token=config.refresh_token,
        )
        return cls(client, config)

    def create(self, monitor: Monitor) -> None:
        site24x7_monitor = self.builder.from_model(monitor)

        logger.debug("Creating site24x7 monitor", monitor=monitor.name, website=site24x7_monitor.website)
        self.client.create_monitor(site24x7_monitor)

    def get(self, name: str) -> Monitor:
        for site24x7_monitor in self.client.list_monitors():
            if site24x7_monitor.display_name != name:
                continue

            return Monitor(
                id=site24x7_monitor.monitor_id,
                name=site24x7_monitor.display_name,
                url=site24x7_monitor.website,
            )

        raise MonitorNotFoundError(name)

    def update(self, monitor: Monitor) -> None:
        site24x7_monitor = self.builder.from_model(monitor)

        logger.debug("Updating site24x7 monitor", monitor=monitor.name, monitor_id=monitor.id)
        self.client.update_monitor(site24x7_monitor)

    def delete(self, name: str) -> None:
        monitor = self.get(name)

        logger.debug("Deleting site24x7 monitor", monitor=name, monitor_id=monitor.id)
        self.client.delete_monitor(monitor.id)

    def _get_profile_ip_provider(self) -> ProfileIPProvider:
        """Lazily create the ProfileIPProvider to avoid API calls when not needed."""
        if self._ip_provider is None:
            ip_source: IPSource
            if self.config.location_ips:
                ip_source = StaticIPSource(self.config.location_ips)
                locations = []
            else:
                ip_source = TemplateIPSource()
                locations = self.client.get_location_template()
            self._ip_provider = ProfileIPProvider(ip_source, locations)

        return self._ip_provider

    def get_ip_source_ranges(self, monitor: Monitor) -> List[str]:
        site24x7_monitor = self.builder.from_model(monitor)
        profile_id = site24x7_monitor.location_profile_id

        cached = self._source_range_cache.get(profile_id)
        if cached is not None:
            return list(cached)

        ip_provider = self._get_profile_ip_provider()
        location_profile = self.client.get_location_profile(profile_id)
        location_ips = ip_provider.get_location_ips(location_profile)

        logger.debug(
            "Found ip addresses for location profile",
            count=len(location_ips),
            profile_id=location_profile.profile_id,
            ips=location_ips,
        )

        source_ranges = [f"{ip}/32" for ip in location_ips]
        self._source_range_cache[profile_id] = source_ranges

        return list(source_ranges)
