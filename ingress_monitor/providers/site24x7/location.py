"""Resolution of Site24x7 location profiles to check IP addresses."""

from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional

from ...logging_config import get_logger
from .models import Location, LocationProfile

logger = get_logger(__name__)


class IPSource(ABC):
    """Source of the IP addresses a check location performs checks from."""

    @abstractmethod
    def get_ips(self, location: Location) -> List[str]:
        """Return the IPs of a location, or an empty list if none are known."""


class StaticIPSource(IPSource):
    """IP addresses configured per location ID."""

    def __init__(self, location_ips: Mapping[str, List[str]]):
        self.location_ips: Dict[str, List[str]] = {key: list(ips) for key, ips in location_ips.items()}

    def get_ips(self, location: Location) -> List[str]:
        return list(self.location_ips.get(location.location_id, []))


class TemplateIPSource(IPSource):
    """IP addresses advertised in the Site24x7 location template."""

    def get_ips(self, location: Location) -> List[str]:
        if not location.ip_address:
            return []
        return [ip.strip() for ip in location.ip_address.split(",") if ip.strip()]


class ProfileIPProvider:
    """Resolves the locations of a location profile to IP addresses."""

    def __init__(self, ip_source: IPSource, locations: List[Location]):
        self.ip_source = ip_source
        self.locations = list(locations)
        self._by_id = {location.location_id: location for location in self.locations}

    def get_location(self, location_id: str) -> Optional[Location]:
        return self._by_id.get(location_id)

    def get_location_ips(self, profile: LocationProfile) -> List[str]:
        """Return the IPs of the primary location followed by the secondary locations.

        Locations without known IPs are skipped.
        """
        location_ids = [profile.primary_location] + list(profile.secondary_locations)

        ips: List[str] = []
        for location_id in location_ids:
            if not location_id:
                continue

            location = self.get_location(location_id) or Location(location_id=location_id)
            location_ips = self.ip_source.get_ips(location)
            if not location_ips:
                logger.debug("No IP addresses known for location", profile_id=profile.profile_id, location_id=location_id)
                continue

            ips.extend(location_ips)

        return ips
