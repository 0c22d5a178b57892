"""Validation of ingresses and derivation of the monitored URL."""

import re
from urllib.parse import quote, urlsplit, urlunsplit

from kubernetes.client import V1Ingress

from .annotations import (
    ANNOTATION_FORCE_HTTPS,
    ANNOTATION_PATH_OVERRIDE,
    NGINX_FORCE_SSL_REDIRECT,
    Annotations,
)
from .errors import InvalidWildcardHostError, NoRulesDefinedError, UrlParseError

_HOST_RE = re.compile(r"^[A-Za-z0-9\-._~!$&'()*+,;=%]+$")

# Reserved characters that stay unescaped in path overrides.
_PATH_SAFE = "/$&+,:;=@"


def validate(ingress: V1Ingress) -> None:
    """Check that an ingress qualifies for a monitor.

    If the ingress supports TLS the first TLS host must not contain
    wildcards. The ingress must have at least one rule and the host of the
    first rule must not contain wildcards either. Only the first host is
    ever monitored.

    Raises:
        InvalidWildcardHostError: if the relevant host contains wildcards
        NoRulesDefinedError: if the ingress has no rules
    """
    if _supports_tls(ingress):
        tls_host = ingress.spec.tls[0].hosts[0]
        if _contains_wildcard(tls_host):
            raise InvalidWildcardHostError(tls_host, tls=True)

    rules = ingress.spec.rules if ingress.spec else None
    if not rules:
        raise NoRulesDefinedError()

    host = rules[0].host or ""
    if _contains_wildcard(host):
        raise InvalidWildcardHostError(host)


def build_monitor_url(ingress: V1Ingress) -> str:
    """Build the URL that should be monitored for a validated ingress.

    Raises:
        UrlParseError: if the result is not a valid URL
    """
    url = _build_host_url(ingress)

    try:
        parts = urlsplit(url)
        # raises ValueError for malformed ports
        parts.port
    except ValueError as e:
        raise UrlParseError(url, str(e)) from e

    host = parts.hostname or ""
    if not host or not (_HOST_RE.match(host) or ":" in host):
        raise UrlParseError(url, f"invalid host {host!r}")

    annotations = Annotations(ingress.metadata.annotations)
    if ANNOTATION_PATH_OVERRIDE in annotations:
        path = annotations[ANNOTATION_PATH_OVERRIDE]
        if path and not path.startswith("/"):
            path = "/" + path
        url = urlunsplit((parts.scheme, parts.netloc, quote(path, safe=_PATH_SAFE), parts.query, parts.fragment))

    return url


def _build_host_url(ingress: V1Ingress) -> str:
    if _supports_tls(ingress):
        return f"https://{ingress.spec.tls[0].hosts[0]}"

    host = ingress.spec.rules[0].host or ""
    if _force_https(ingress):
        return f"https://{host}"

    return f"http://{host}"


def _supports_tls(ingress: V1Ingress) -> bool:
    tls = ingress.spec.tls if ingress.spec else None
    return bool(tls) and bool(tls[0].hosts) and bool(tls[0].hosts[0])


def _force_https(ingress: V1Ingress) -> bool:
    annotations = Annotations(ingress.metadata.annotations)
    return annotations.bool_value(ANNOTATION_FORCE_HTTPS) or annotations.bool_value(NGINX_FORCE_SSL_REDIRECT)


def _contains_wildcard(host: str) -> bool:
    return "*" in host
