"""Exception types raised by ingress-monitor-controller."""

from typing import Optional


class IngressMonitorError(Exception):
    """Base class for all ingress-monitor-controller errors."""


class IngressValidationError(IngressMonitorError):
    """The ingress does not qualify for monitoring."""


class InvalidWildcardHostError(IngressValidationError):
    """The ingress host (or TLS host) contains wildcards."""

    def __init__(self, host: str, tls: bool = False):
        self.host = host
        self.tls = tls
        kind = "ingress TLS host" if tls else "ingress host"
        super().__init__(f"{kind} {host!r} contains wildcards")


class NoRulesDefinedError(IngressValidationError):
    """The ingress does not define any rules."""

    def __init__(self):
        super().__init__("ingress does not have any rules")


class UrlParseError(IngressMonitorError):
    """The monitor URL built from an ingress is not a valid URL."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"invalid monitor url {url!r}: {reason}")


class AnnotationError(IngressMonitorError):
    """An annotation is present but its value cannot be interpreted."""


class InvalidAnnotationValueError(AnnotationError):
    def __init__(self, key: str, value: str, expected: str):
        self.key = key
        self.value = value
        super().__init__(f"invalid {expected} value in annotation {key!r}: {value!r}")


class InvalidAnnotationJSONError(AnnotationError):
    def __init__(self, key: str, value: str, cause: Exception):
        self.key = key
        self.value = value
        self.cause = cause
        super().__init__(f"invalid json in annotation {key!r}: {value}: {cause}")


class NoProfilesConfiguredError(IngressMonitorError):
    """Auto-discovery found no candidates of the given kind in the provider account."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"no {kind} configured")


class MonitorNotFoundError(IngressMonitorError):
    """Raised by providers if a monitor with the given name does not exist."""

    def __init__(self, name: Optional[str] = None):
        self.name = name
        super().__init__("monitor not found" if name is None else f"monitor {name!r} not found")


class ProviderError(IngressMonitorError):
    """A monitor provider operation failed."""


class Site24x7APIError(ProviderError):
    """The Site24x7 API returned an error response."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(f"site24x7 api error (status={status_code}, code={code}): {message}")


class UnsupportedProviderError(IngressMonitorError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unsupported provider {name!r}")


class NameTemplateError(IngressMonitorError):
    """The monitor name template is invalid."""


class ConfigError(IngressMonitorError):
    """The controller configuration is invalid."""
