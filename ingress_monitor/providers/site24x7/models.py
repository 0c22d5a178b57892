"""Site24x7 API resource models."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Header(BaseModel):
    """Custom HTTP header sent with each check."""

    name: str = Field(..., description="Header name")
    value: str = Field(..., description="Header value")


class ActionRef(BaseModel):
    """Reference to an IT automation action triggered on a given alert type."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    action_id: str = Field(..., alias="actionID", description="ID of the IT automation action")
    alert_type: int = Field(..., alias="alertType", description="Site24x7 action rule constant")


class Site24x7Monitor(BaseModel):
    """A Site24x7 website ("URL") monitor."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    monitor_id: str = Field("", description="Site24x7 monitor ID")
    display_name: str = Field(..., description="Display name of the monitor")
    type: str = Field("URL", description="Monitor type")
    website: str = Field("", description="Monitored URL")
    check_frequency: str = Field("", description="Check interval constant")
    http_method: str = Field("", description="HTTP method constant")
    auth_user: str = Field("", description="Basic auth user")
    auth_pass: str = Field("", description="Basic auth password")
    match_case: bool = Field(False, description="Case sensitive keyword search")
    user_agent: str = Field("", description="User agent used for checks")
    timeout: int = Field(0, description="Connection timeout in seconds")
    use_name_server: bool = Field(False, description="Whether to resolve DNS")
    custom_headers: List[Header] = Field(default_factory=list, description="Additional HTTP headers")
    action_ids: List[ActionRef] = Field(default_factory=list, description="Alert actions")
    location_profile_id: str = Field("", description="Location profile ID")
    notification_profile_id: str = Field("", description="Notification profile ID")
    threshold_profile_id: str = Field("", description="Threshold profile ID")
    monitor_groups: List[str] = Field(default_factory=list, description="Monitor group IDs")
    user_group_ids: List[str] = Field(default_factory=list, description="User group IDs")

    def to_api(self) -> dict:
        """Serialize to the request body expected by the Site24x7 API."""
        data = self.model_dump(exclude={"monitor_id"})
        return {key: value for key, value in data.items() if value not in ("", [])}


class LocationProfile(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    profile_id: str = Field(..., description="Location profile ID")
    profile_name: str = Field("", description="Location profile name")
    primary_location: str = Field("", description="ID of the primary check location")
    secondary_locations: List[str] = Field(default_factory=list, description="IDs of secondary check locations")


class NotificationProfile(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    profile_id: str = Field(..., description="Notification profile ID")
    profile_name: str = Field("", description="Notification profile name")


class ThresholdProfile(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    profile_id: str = Field(..., description="Threshold profile ID")
    profile_name: str = Field("", description="Threshold profile name")
    type: str = Field("", description="Monitor type the profile applies to")


class MonitorGroup(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    group_id: str = Field(..., description="Monitor group ID")
    display_name: str = Field("", description="Monitor group name")


class UserGroup(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    user_group_id: str = Field(..., description="User group ID")
    display_name: str = Field("", description="User group name")


class Location(BaseModel):
    """A Site24x7 check location from the location template."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    location_id: str = Field(..., description="Location ID")
    display_name: str = Field("", description="Location name")
    city: str = Field("", description="City of the location")
    country: str = Field("", description="Country of the location")
    ip_address: Optional[str] = Field(None, description="Comma separated check IPs, if advertised")
