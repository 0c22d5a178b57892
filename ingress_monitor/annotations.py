"""Annotation keys and typed access to ingress annotations."""

import json
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .errors import InvalidAnnotationJSONError, InvalidAnnotationValueError

ANNOTATION_PREFIX = "ingress-monitor.bonial.com/"
SITE24X7_ANNOTATION_PREFIX = "site24x7.ingress-monitor.bonial.com/"

ANNOTATION_ENABLED = ANNOTATION_PREFIX + "enabled"
ANNOTATION_FORCE_HTTPS = ANNOTATION_PREFIX + "force-https"
ANNOTATION_PATH_OVERRIDE = ANNOTATION_PREFIX + "path-override"

NGINX_FORCE_SSL_REDIRECT = "nginx.ingress.kubernetes.io/force-ssl-redirect"
NGINX_WHITELIST_SOURCE_RANGE = "nginx.ingress.kubernetes.io/whitelist-source-range"

ANNOTATION_SITE24X7_ACTIONS = SITE24X7_ANNOTATION_PREFIX + "actions"
ANNOTATION_SITE24X7_AUTH_PASS = SITE24X7_ANNOTATION_PREFIX + "auth-pass"
ANNOTATION_SITE24X7_AUTH_USER = SITE24X7_ANNOTATION_PREFIX + "auth-user"
ANNOTATION_SITE24X7_CHECK_FREQUENCY = SITE24X7_ANNOTATION_PREFIX + "check-frequency"
ANNOTATION_SITE24X7_CUSTOM_HEADERS = SITE24X7_ANNOTATION_PREFIX + "custom-headers"
ANNOTATION_SITE24X7_HTTP_METHOD = SITE24X7_ANNOTATION_PREFIX + "http-method"
ANNOTATION_SITE24X7_LOCATION_PROFILE_ID = SITE24X7_ANNOTATION_PREFIX + "location-profile-id"
ANNOTATION_SITE24X7_MATCH_CASE = SITE24X7_ANNOTATION_PREFIX + "match-case"
ANNOTATION_SITE24X7_MONITOR_GROUP_IDS = SITE24X7_ANNOTATION_PREFIX + "monitor-group-ids"
ANNOTATION_SITE24X7_NOTIFICATION_PROFILE_ID = SITE24X7_ANNOTATION_PREFIX + "notification-profile-id"
ANNOTATION_SITE24X7_THRESHOLD_PROFILE_ID = SITE24X7_ANNOTATION_PREFIX + "threshold-profile-id"
ANNOTATION_SITE24X7_TIMEOUT = SITE24X7_ANNOTATION_PREFIX + "timeout"
ANNOTATION_SITE24X7_USE_NAME_SERVER = SITE24X7_ANNOTATION_PREFIX + "use-name-server"
ANNOTATION_SITE24X7_USER_AGENT = SITE24X7_ANNOTATION_PREFIX + "user-agent"
ANNOTATION_SITE24X7_USER_GROUP_IDS = SITE24X7_ANNOTATION_PREFIX + "user-group-ids"

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


class Annotations(Mapping[str, str]):
    """Read-only view over ingress annotations with typed accessors.

    Every accessor returns the supplied default when the key is absent. A key
    that is present with a value that cannot be interpreted raises an
    :class:`~ingress_monitor.errors.AnnotationError` instead of falling back.
    """

    def __init__(self, annotations: Optional[Mapping[str, str]] = None):
        self._data: Dict[str, str] = dict(annotations or {})

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Annotations({self._data!r})"

    def string_value(self, key: str, default: str = "") -> str:
        if key not in self._data:
            return default
        return self._data[key]

    def bool_value(self, key: str, default: bool = False) -> bool:
        if key not in self._data:
            return default

        value = self._data[key]
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False

        raise InvalidAnnotationValueError(key, value, "bool")

    def int_value(self, key: str, default: int = 0) -> int:
        if key not in self._data:
            return default

        value = self._data[key]
        try:
            return int(value.strip())
        except ValueError:
            raise InvalidAnnotationValueError(key, value, "int") from None

    def string_list_value(self, key: str, default: Optional[List[str]] = None) -> List[str]:
        """Return a comma-separated annotation as list, dropping empty items."""
        if key not in self._data:
            return list(default or [])

        return [item.strip() for item in self._data[key].split(",") if item.strip()]

    def json_value(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default

        value = self._data[key]
        try:
            return json.loads(value)
        except ValueError as e:
            raise InvalidAnnotationJSONError(key, value, e) from e
