"""Controller options and monitor provider configuration."""

import os
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from .errors import ConfigError
from .providers.site24x7.models import ActionRef, Header

PROVIDER_SITE24X7 = "site24x7"

# Does nothing but log create/update/delete events. Intended for testing only.
PROVIDER_NULL = "null"

SUPPORTED_PROVIDERS = (PROVIDER_SITE24X7, PROVIDER_NULL)

DEFAULT_NAME_TEMPLATE = "{namespace}-{ingress_name}"

CREDENTIAL_ENV_VARS = {
    "client_id": "SITE24X7_CLIENT_ID",
    "client_secret": "SITE24X7_CLIENT_SECRET",
    "refresh_token": "SITE24X7_REFRESH_TOKEN",
}


class Site24x7MonitorDefaults(BaseModel):
    """Monitor defaults used unless overridden via ingress annotations."""

    model_config = ConfigDict(populate_by_name=True)

    actions: List[ActionRef] = Field(default_factory=list, description="Default alert actions")
    auth_pass: str = Field("", alias="authPass", description="Default basic auth password")
    auth_user: str = Field("", alias="authUser", description="Default basic auth user")
    auto_location_profile: bool = Field(
        True, alias="autoLocationProfile",
        description="Use the first location profile of the account if none is set",
    )
    auto_notification_profile: bool = Field(
        True, alias="autoNotificationProfile",
        description="Use the first notification profile of the account if none is set",
    )
    auto_threshold_profile: bool = Field(
        True, alias="autoThresholdProfile",
        description="Use the first threshold profile of the account if none is set",
    )
    auto_monitor_group: bool = Field(
        True, alias="autoMonitorGroup",
        description="Use the first monitor group of the account if none is set",
    )
    auto_user_group: bool = Field(
        True, alias="autoUserGroup",
        description="Use the first user group of the account if none is set",
    )
    check_frequency: str = Field("1", alias="checkFrequency", description="Default check interval")
    custom_headers: List[Header] = Field(default_factory=list, alias="customHeaders", description="Default custom headers")
    http_method: str = Field("G", alias="httpMethod", description="Default HTTP method")
    location_profile_id: str = Field("", alias="locationProfileID", description="Default location profile")
    match_case: bool = Field(False, alias="matchCase", description="Case sensitive keyword search")
    monitor_group_ids: List[str] = Field(default_factory=list, alias="monitorGroupIDs", description="Default monitor groups")
    notification_profile_id: str = Field("", alias="notificationProfileID", description="Default notification profile")
    threshold_profile_id: str = Field("", alias="thresholdProfileID", description="Default threshold profile")
    timeout: int = Field(10, ge=1, le=45, description="Default connection timeout in seconds")
    use_name_server: bool = Field(True, alias="useNameServer", description="Whether to resolve DNS")
    user_agent: str = Field("", alias="userAgent", description="Default user agent")
    user_group_ids: List[str] = Field(default_factory=list, alias="userGroupIDs", description="Default user groups")


class Site24x7Config(BaseModel):
    """Configuration for the Site24x7 website monitor provider."""

    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(
        default_factory=lambda: os.getenv(CREDENTIAL_ENV_VARS["client_id"], ""),
        alias="clientID",
        description="OAuth2 client ID",
    )
    client_secret: str = Field(
        default_factory=lambda: os.getenv(CREDENTIAL_ENV_VARS["client_secret"], ""),
        alias="clientSecret",
        description="OAuth2 client secret",
    )
    refresh_token: str = Field(
        default_factory=lambda: os.getenv(CREDENTIAL_ENV_VARS["refresh_token"], ""),
        alias="refreshToken",
        description="OAuth2 refresh token",
    )
    location_ips: Dict[str, List[str]] = Field(
        default_factory=dict,
        alias="locationIPs",
        description="Static check IPs per location ID, takes precedence over the location template",
    )
    monitor_defaults: Site24x7MonitorDefaults = Field(
        default_factory=Site24x7MonitorDefaults,
        alias="monitorDefaults",
        description="Monitor defaults",
    )

    @field_validator("client_id", "client_secret", "refresh_token", mode="before")
    @classmethod
    def _credential_from_env(cls, value, info: ValidationInfo):
        # Empty values in the config file do not override the environment.
        if not value:
            return os.getenv(CREDENTIAL_ENV_VARS[info.field_name], "")
        return value


class ProviderConfig(BaseModel):
    """Configuration for all supported monitor providers."""

    site24x7: Site24x7Config = Field(default_factory=Site24x7Config, description="Site24x7 provider config")


class Options(BaseModel):
    """Options of the ingress monitor controller."""

    provider_name: str = Field(PROVIDER_SITE24X7, description="Name of the monitor provider")
    provider_config_file: Optional[str] = Field(None, description="Path to the provider config file")
    provider_config: ProviderConfig = Field(default_factory=ProviderConfig, description="Provider configuration")
    name_template: str = Field(DEFAULT_NAME_TEMPLATE, description="Template for monitor names")
    no_delete: bool = Field(False, description="Never delete monitors")
    creation_delay: float = Field(0.0, description="Seconds to wait after ingress creation before creating monitors")

    def validate_options(self) -> None:
        """Raise ConfigError if the options are not usable."""
        if self.provider_name not in SUPPORTED_PROVIDERS:
            raise ConfigError(
                f"unsupported provider {self.provider_name!r}, must be one of {', '.join(SUPPORTED_PROVIDERS)}"
            )

        if self.creation_delay < 0:
            raise ConfigError(f"creation delay must be >= 0, got {self.creation_delay}")


def read_provider_config(filename: Union[str, Path]) -> ProviderConfig:
    """Read the provider configuration from a YAML file.

    Values missing from the file keep their defaults.

    Raises:
        OSError: if the file cannot be read
        ConfigError: if the file content is not a valid provider config
    """
    with open(filename) as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError(f"provider config {filename} must be a mapping")

    try:
        return ProviderConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid provider config {filename}: {e}") from e
