"""Minimal Site24x7 REST API client."""

import time
from typing import Any, Dict, List, Optional

import httpx

from ...errors import Site24x7APIError
from ...logging_config import get_logger, log_api_request, log_api_response
from .models import (
    Location,
    LocationProfile,
    MonitorGroup,
    NotificationProfile,
    Site24x7Monitor,
    ThresholdProfile,
    UserGroup,
)

logger = get_logger(__name__)

API_BASE_URL = "https://www.site24x7.com/api"
TOKEN_URL = "https://accounts.zoho.com/oauth/v2/token"

# Refresh access tokens this many seconds before they expire.
TOKEN_EXPIRY_MARGIN = 60


class Site24x7Client:
    """Client for the parts of the Site24x7 API used by the monitor provider.

    Authentication uses the OAuth2 refresh token grant. Access tokens are
    cached until shortly before they expire.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        base_url: str = API_BASE_URL,
        token_url: str = TOKEN_URL,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.base_url = base_url.rstrip("/")
        self.token_url = token_url
        self._http = http_client or httpx.Client(timeout=timeout)
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    def close(self) -> None:
        self._http.close()

    def _get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        logger.debug("Refreshing site24x7 access token", token_url=self.token_url)

        try:
            response = self._http.post(
                self.token_url,
                params={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "refresh_token": self.refresh_token,
                    "grant_type": "refresh_token",
                },
            )
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise Site24x7APIError(f"failed to refresh access token: {e}") from e

        if response.status_code >= 400 or "access_token" not in payload:
            message = payload.get("error", "no access token in response") if isinstance(payload, dict) else str(payload)
            raise Site24x7APIError(f"failed to refresh access token: {message}", status_code=response.status_code)

        self._access_token = payload["access_token"]
        expires_in = int(payload.get("expires_in", 3600))
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)

        return self._access_token

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None, params: Optional[Dict[str, Any]] = None) -> Any:
        """Perform an API request and return the ``data`` part of the response envelope."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {
            "Authorization": f"Zoho-oauthtoken {self._get_access_token()}",
            "Accept": "application/json; version=2.0",
        }

        log_api_request(logger, method, url)

        try:
            response = self._http.request(method, url, headers=headers, json=json, params=params)
        except httpx.HTTPError as e:
            raise Site24x7APIError(f"{method} {path} failed: {e}") from e

        log_api_response(logger, method, url, response.status_code)

        try:
            payload = response.json()
        except ValueError:
            raise Site24x7APIError(
                f"{method} {path} returned invalid json: {response.text[:200]}",
                status_code=response.status_code,
            ) from None

        code = payload.get("code", 0) if isinstance(payload, dict) else 0
        if response.status_code >= 400 or code != 0:
            message = payload.get("message", response.reason_phrase) if isinstance(payload, dict) else response.reason_phrase
            raise Site24x7APIError(f"{method} {path}: {message}", status_code=response.status_code, code=code)

        return payload.get("data") if isinstance(payload, dict) else payload

    def list_monitors(self) -> List[Site24x7Monitor]:
        return [Site24x7Monitor.model_validate(item) for item in self._request("GET", "monitors") or []]

    def create_monitor(self, monitor: Site24x7Monitor) -> Site24x7Monitor:
        data = self._request("POST", "monitors", json=monitor.to_api())
        return Site24x7Monitor.model_validate(data)

    def update_monitor(self, monitor: Site24x7Monitor) -> Site24x7Monitor:
        data = self._request("PUT", f"monitors/{monitor.monitor_id}", json=monitor.to_api())
        return Site24x7Monitor.model_validate(data)

    def delete_monitor(self, monitor_id: str) -> None:
        self._request("DELETE", f"monitors/{monitor_id}")

    def list_location_profiles(self) -> List[LocationProfile]:
        return [LocationProfile.model_validate(item) for item in self._request("GET", "location_profiles") or []]

    def get_location_profile(self, profile_id: str) -> LocationProfile:
        return LocationProfile.model_validate(self._request("GET", f"location_profiles/{profile_id}"))

    def list_notification_profiles(self) -> List[NotificationProfile]:
        return [NotificationProfile.model_validate(item) for item in self._request("GET", "notification_profiles") or []]

    def list_threshold_profiles(self) -> List[ThresholdProfile]:
        return [ThresholdProfile.model_validate(item) for item in self._request("GET", "threshold_profiles") or []]

    def list_monitor_groups(self) -> List[MonitorGroup]:
        return [MonitorGroup.model_validate(item) for item in self._request("GET", "monitor_groups") or []]

    def list_user_groups(self) -> List[UserGroup]:
        return [UserGroup.model_validate(item) for item in self._request("GET", "user_groups") or []]

    def get_location_template(self) -> List[Location]:
        """Return all check locations available for website monitors."""
        data = self._request("GET", "location_template", params={"type": "URL"}) or {}
        return [Location.model_validate(item) for item in data.get("locations", [])]
