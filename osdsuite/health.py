"""Aggregate health of the whole cluster, used to verify that cluster-wide changes did not break it"""

import logging
from typing import Callable

from osdsuite.kubernetes.client import KubernetesClient
from osdsuite.utils import check_condition

logger = logging.getLogger(__name__)

# Returns names of unhealthy objects, empty list means the check passed
HealthCheck = Callable[[KubernetesClient], list[str]]

UNHEALTHY_POD_PHASES = {"Pending", "Failed", "Unknown"}


def _conditions(obj) -> list:
    return obj.model.status.conditions or []


def unready_nodes(cluster: KubernetesClient) -> list[str]:
    """Nodes which do not report Ready condition"""
    return [
        node.name()
        for node in cluster.select("nodes")
        if not any(check_condition(c, "Ready", "True") for c in _conditions(node))
    ]


def unhealthy_operators(cluster: KubernetesClient) -> list[str]:
    """ClusterOperators which are unavailable or degraded"""
    failing = []
    for operator in cluster.select("clusteroperators"):
        conditions = _conditions(operator)
        available = any(check_condition(c, "Available", "True") for c in conditions)
        degraded = any(check_condition(c, "Degraded", "True") for c in conditions)
        if not available or degraded:
            failing.append(operator.name())
    return failing


def unhealthy_pods(cluster: KubernetesClient) -> list[str]:
    """Pods of the platform (openshift-* namespaces) which are not running"""
    return [
        f"{pod.namespace()}/{pod.name()}"
        for pod in cluster.select("pods", all_namespaces=True)
        if pod.namespace().startswith("openshift-") and (pod.model.status.phase or "") in UNHEALTHY_POD_PHASES
    ]


DEFAULT_CHECKS: dict[str, HealthCheck] = {
    "nodes": unready_nodes,
    "operators": unhealthy_operators,
    "pods": unhealthy_pods,
}


class ClusterHealth:
    """Runs named health checks against the cluster"""

    def __init__(self, cluster: KubernetesClient, checks: dict[str, HealthCheck] = None):
        self.cluster = cluster
        self.checks = dict(DEFAULT_CHECKS if checks is None else checks)

    def check(self, cluster_id: str) -> tuple[bool, list[str]]:
        """
        Returns whether the cluster is healthy together with names of failing checks.
        Errors while querying the cluster are raised, they are not considered as unhealthy cluster.
        """
        failing = []
        for name, health_check in self.checks.items():
            unhealthy = health_check(self.cluster)
            if unhealthy:
                logger.info("Health check %s failed on cluster %s: %s", name, cluster_id, ", ".join(unhealthy))
                failing.append(name)
        return not failing, failing
