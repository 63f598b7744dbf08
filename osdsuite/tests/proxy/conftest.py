"""Conftest for cluster-wide proxy tests"""

import pytest
from dynaconf import ValidationError

from osdsuite.health import ClusterHealth
from osdsuite.openshift.proxy import ProxyDesiredState


@pytest.fixture(scope="module")
def cluster_id(testconfig, skip_or_fail):
    """Identifier of the cluster under test"""
    try:
        testconfig.validators.validate(only="cluster")
    except (KeyError, ValidationError) as exc:
        skip_or_fail(f"Cluster configuration item is missing: {exc}")
    return testconfig["cluster"]["id"]


@pytest.fixture(scope="module")
def desired_proxy(testconfig, skip_or_fail):
    """Proxy configuration to apply to the cluster"""
    section = testconfig["proxy"]
    desired = ProxyDesiredState(
        https_proxy=section["https_proxy"],
        http_proxy=section["http_proxy"],
        user_ca_bundle=section["user_ca_bundle"],
    )
    if desired.empty:
        skip_or_fail("Proxy configuration is empty, set at least one of proxy.https_proxy, proxy.http_proxy")
    return desired


@pytest.fixture(scope="module")
def cluster_health(cluster):
    """Aggregate health of the cluster under test"""
    return ClusterHealth(cluster)
