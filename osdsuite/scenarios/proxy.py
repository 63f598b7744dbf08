"""
Configures cluster-wide egress proxy, waits until the cluster reflects it and verifies
the cluster stays healthy afterwards.
"""

import enum
import logging
from dataclasses import dataclass

from openshift_client import OpenShiftPythonException

from osdsuite.health import ClusterHealth
from osdsuite.kubernetes.client import KubernetesClient
from osdsuite.openshift.proxy import (
    TRUSTED_CA_NAME,
    ProxyDesiredState,
    ProxyObservedState,
    configure_cluster_proxy,
    observe,
)
from osdsuite.poller import PollSpec, PollOutcome, poll_until

logger = logging.getLogger(__name__)


class ProxyState(enum.Enum):
    """Progress of the proxy propagation"""

    UNSET = "unset"
    MUTATED = "mutated"
    CONFIG_PROPAGATED = "config propagated"
    CONFIG_TIMED_OUT = "config timed out"
    HEALTH_VERIFIED = "health verified"
    HEALTH_TIMED_OUT = "health timed out"


@dataclass(frozen=True)
class ProxyTimings:
    """How long to wait for proxy changes to be reflected and for the cluster to return to health"""

    config: PollSpec = PollSpec(30, 15 * 60, immediate=False)
    health: PollSpec = PollSpec(30, 45 * 60)

    @property
    def total(self) -> float:
        """Upper bound of the whole scenario in seconds"""
        return self.config.timeout + self.config.interval + self.health.timeout


def propagation_gaps(desired: ProxyDesiredState, observed: ProxyObservedState) -> list[str]:
    """Returns descriptions of the desired values not yet reflected on the cluster, empty desired values are skipped"""
    gaps = []
    if desired.user_ca_bundle:
        if observed.trusted_ca_name != TRUSTED_CA_NAME:
            gaps.append(f"trustedCA references '{observed.trusted_ca_name}' instead of '{TRUSTED_CA_NAME}'")
        elif observed.ca_bundle is None or observed.ca_bundle.strip() != desired.user_ca_bundle.strip():
            gaps.append("user CA bundle")
    if desired.https_proxy and observed.https_proxy != desired.https_proxy:
        gaps.append("HTTPS proxy")
    if desired.http_proxy and observed.http_proxy != desired.http_proxy:
        gaps.append("HTTP proxy")
    return gaps


class ProxyPropagation:
    """
    Proxy propagation scenario, each step moves it to the next state:
        mutate() -> wait_for_config() -> wait_for_health()
    """

    def __init__(
        self,
        cluster: KubernetesClient,
        cluster_id: str,
        desired: ProxyDesiredState,
        health: ClusterHealth = None,
        timings: ProxyTimings = ProxyTimings(),
    ):
        self.cluster = cluster
        self.cluster_id = cluster_id
        self.desired = desired
        self.health = health or ClusterHealth(cluster)
        self.timings = timings
        self.state = ProxyState.UNSET

    def mutate(self):
        """Sets the cluster-wide proxy to the desired state"""
        desired = self.desired
        logger.info(
            "Setting cluster-wide proxy to httpsProxy=%s,httpProxy=%s,settingCA=%s",
            desired.https_proxy,
            desired.http_proxy,
            desired.user_ca_bundle != "",
        )
        configure_cluster_proxy(self.cluster, desired)
        self.state = ProxyState.MUTATED

    def wait_for_config(self) -> PollOutcome:
        """Waits until the proxy resource reflects the desired state"""
        logger.info("Validating state of proxy on cluster within %s minutes", self.timings.config.timeout / 60)

        def proxy_reflected():
            try:
                observed = observe(self.cluster, ca_bundle_requested=bool(self.desired.user_ca_bundle))
            except (OpenShiftPythonException, LookupError) as e:
                return False, e
            gaps = propagation_gaps(self.desired, observed)
            for gap in gaps:
                logger.info("%s still not reflected on cluster", gap)
            return not gaps, None, gaps

        outcome = poll_until(self.timings.config, proxy_reflected)
        self.state = ProxyState.CONFIG_PROPAGATED if outcome else ProxyState.CONFIG_TIMED_OUT
        return outcome

    def wait_for_health(self) -> PollOutcome:
        """Waits until the cluster is healthy after the proxy change"""
        logger.info("Verifying cluster health after proxy addition")

        def cluster_healthy():
            try:
                healthy, failures = self.health.check(self.cluster_id)
            except OpenShiftPythonException as e:
                return False, e
            if healthy:
                logger.info("Cluster %s is healthy after proxy addition", self.cluster_id)
                return True, None
            logger.info("Cluster %s is not healthy after proxy addition", self.cluster_id)
            if failures:
                logger.info("Currently failing %s health checks", ", ".join(failures))
            return False, None, failures

        outcome = poll_until(self.timings.health, cluster_healthy)
        self.state = ProxyState.HEALTH_VERIFIED if outcome else ProxyState.HEALTH_TIMED_OUT
        return outcome
