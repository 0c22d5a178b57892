"""Shared fixtures for ingress-monitor-controller tests."""

from datetime import datetime
from typing import Dict, List, Optional

import pytest
from kubernetes.client import V1Ingress, V1IngressRule, V1IngressSpec, V1IngressTLS, V1ObjectMeta


def build_ingress(
    namespace: str = "kube-system",
    name: str = "foo",
    annotations: Optional[Dict[str, str]] = None,
    hosts: Optional[List[str]] = None,
    tls_hosts: Optional[List[str]] = None,
    creation_timestamp: Optional[datetime] = None,
) -> V1Ingress:
    if hosts is None:
        hosts = ["foo.bar.baz"]

    spec = V1IngressSpec(rules=[V1IngressRule(host=host) for host in hosts])
    if tls_hosts is not None:
        spec.tls = [V1IngressTLS(hosts=tls_hosts)]

    return V1Ingress(
        metadata=V1ObjectMeta(
            namespace=namespace,
            name=name,
            annotations=annotations,
            creation_timestamp=creation_timestamp,
        ),
        spec=spec,
    )


@pytest.fixture
def make_ingress():
    """Factory for ingress objects, defaults to kube-system/foo with host foo.bar.baz."""
    return build_ingress
