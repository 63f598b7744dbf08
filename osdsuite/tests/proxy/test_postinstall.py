"""Tests that cluster-wide proxy added after installation propagates and leaves the cluster healthy"""

import pytest

from osdsuite.scenarios.proxy import ProxyPropagation, ProxyTimings

pytestmark = [pytest.mark.proxy, pytest.mark.disruptive]


@pytest.mark.timeout(ProxyTimings().total)
def test_add_proxy(cluster, cluster_id, desired_proxy, cluster_health):
    """Tests that proxy can be added to the cluster successfully"""
    propagation = ProxyPropagation(cluster, cluster_id, desired_proxy, health=cluster_health)
    propagation.mutate()

    outcome = propagation.wait_for_config()
    assert outcome, outcome.describe("Proxy configuration")

    outcome = propagation.wait_for_health()
    assert outcome, outcome.describe("Cluster health after proxy addition")
