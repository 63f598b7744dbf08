"""Cluster-wide egress proxy configuration (proxies.config.openshift.io)"""

from dataclasses import dataclass
from typing import Optional

from osdsuite.kubernetes import CustomResource, modify
from osdsuite.kubernetes.config_map import ConfigMap

TRUSTED_CA_NAME = "user-ca-bundle"
TRUSTED_CA_NAMESPACE = "openshift-config"
TRUSTED_CA_KEY = "ca-bundle.crt"


@dataclass(frozen=True)
class ProxyDesiredState:
    """Proxy configuration requested by the test, empty values are neither set nor checked"""

    https_proxy: str = ""
    http_proxy: str = ""
    user_ca_bundle: str = ""

    @property
    def empty(self) -> bool:
        """True, if there is nothing to configure"""
        return not (self.https_proxy or self.http_proxy or self.user_ca_bundle)


@dataclass(frozen=True)
class ProxyObservedState:
    """Proxy configuration as read back from the cluster during one poll"""

    https_proxy: str = ""
    http_proxy: str = ""
    trusted_ca_name: str = ""
    # None when the CA bundle ConfigMap (or its key) does not exist (yet)
    ca_bundle: Optional[str] = None


class Proxy(CustomResource):
    """The `cluster` singleton Proxy"""

    NAME = "proxy.config.openshift.io/cluster"

    @property
    def https_proxy(self) -> str:
        """HTTPS proxy the cluster actually uses"""
        return self.status_field("httpsProxy")

    @property
    def http_proxy(self) -> str:
        """HTTP proxy the cluster actually uses"""
        return self.status_field("httpProxy")

    @property
    def trusted_ca_name(self) -> str:
        """Name of the ConfigMap referenced as trusted CA bundle"""
        return self.model.spec.trustedCA.name or ""

    @modify
    def configure(self, desired: ProxyDesiredState):
        """Sets all non-empty values of the desired state in one change"""
        if "spec" not in self.model:
            self.model["spec"] = {}
        spec = self.model["spec"]
        if desired.https_proxy:
            spec["httpsProxy"] = desired.https_proxy
        if desired.http_proxy:
            spec["httpProxy"] = desired.http_proxy
        if desired.user_ca_bundle:
            spec["trustedCA"] = {"name": TRUSTED_CA_NAME}


def observe(cluster, ca_bundle_requested: bool) -> ProxyObservedState:
    """
    Reads current proxy state from the cluster.
    Missing Proxy is raised, missing CA bundle ConfigMap is reported as `ca_bundle=None`
    """
    proxy = cluster.get(Proxy.NAME, cls=Proxy)
    if proxy is None:
        raise LookupError(f"{Proxy.NAME} does not exist on the cluster")

    ca_bundle = None
    if ca_bundle_requested:
        config_map = cluster.change_project(TRUSTED_CA_NAMESPACE).get(f"configmap/{TRUSTED_CA_NAME}", cls=ConfigMap)
        if config_map is not None:
            ca_bundle = config_map.get(TRUSTED_CA_KEY)

    return ProxyObservedState(
        https_proxy=proxy.https_proxy,
        http_proxy=proxy.http_proxy,
        trusted_ca_name=proxy.trusted_ca_name,
        ca_bundle=ca_bundle,
    )


def configure_cluster_proxy(cluster, desired: ProxyDesiredState) -> Proxy:
    """Stores requested CA bundle and points the cluster Proxy at the desired values"""
    if desired.user_ca_bundle:
        config_map = ConfigMap.create_instance(
            cluster.change_project(TRUSTED_CA_NAMESPACE), TRUSTED_CA_NAME, {TRUSTED_CA_KEY: desired.user_ca_bundle}
        )
        config_map.apply()

    proxy = cluster.get(Proxy.NAME, cls=Proxy)
    if proxy is None:
        raise LookupError(f"{Proxy.NAME} does not exist on the cluster")
    proxy.configure(desired)
    return proxy
