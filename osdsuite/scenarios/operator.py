"""
Installs an operator from the catalog through OLM, verifies it reports findings about a freshly deployed
workload through its metrics and removes it from the cluster again.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from httpx import RequestError
from openshift_client import OpenShiftPythonException

from osdsuite.kubernetes.client import KubernetesClient
from osdsuite.kubernetes.config_map import ConfigMap
from osdsuite.kubernetes.deployment import Deployment
from osdsuite.kubernetes.olm import OperatorGroup, Subscription, ClusterServiceVersion, InstallPlan
from osdsuite.metrics import DVO_FINDINGS, FindingPattern, is_unavailable, missing_findings
from osdsuite.poller import PollSpec, PollOutcome, PollStatus, poll_until
from osdsuite.utils import randomize

logger = logging.getLogger(__name__)

WORKLOAD_IMAGE = "registry.access.redhat.com/ubi8/ubi-minimal"


class OperatorState(enum.Enum):
    """Progress of the operator verification"""

    NOT_INSTALLED = "not installed"
    INSTALLING = "installing"
    INSTALLED_DEPLOYING = "installed, deploying workload"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    VERIFICATION_TIMED_OUT = "verification timed out"
    TORN_DOWN = "torn down"


@dataclass(frozen=True)
class MetricsEndpoint:
    """Service exposing operator metrics"""

    service: str
    port: int
    path: str = "/metrics"
    scheme: str = "http"


@dataclass(frozen=True)
class OperatorPackage:
    """Operator package in a catalog and the namespace it should be installed to"""

    namespace: str
    package: str
    channel: str
    catalog_source: str
    catalog_namespace: str
    metrics: MetricsEndpoint

    @property
    def name(self) -> str:
        """Name of the OperatorGroup and Subscription"""
        return self.package


@dataclass(frozen=True)
class OperatorTimings:
    """How long to wait for the asynchronous parts of the scenario"""

    findings: PollSpec = PollSpec(2, 15)
    current_csv: PollSpec = PollSpec(5, 5 * 60)
    install_plan_removal: PollSpec = PollSpec(10, 5 * 60)
    csv_succeeded: PollSpec = PollSpec(5, 5 * 60)
    deployment_ready: PollSpec = PollSpec(5, 5 * 60)


def dvo_package(namespace="osde2e-deployment-validation-operator", **kwargs) -> OperatorPackage:
    """Deployment Validation Operator from the community catalog"""
    defaults = {
        "package": "deployment-validation-operator",
        "channel": "alpha",
        "catalog_source": "community-operators",
        "catalog_namespace": "openshift-marketplace",
        "metrics": MetricsEndpoint("deployment-validation-operator-metrics", 8383),
    }
    defaults.update(kwargs)
    return OperatorPackage(namespace=namespace, **defaults)


class OperatorVerification:
    """
    Operator verification scenario, each step moves it to the next state:
        install() -> deploy_workload() -> verify() -> teardown()
    Creation and deletion failures are raised as they are, waiting for the cluster is reported as PollOutcome
    """

    def __init__(
        self,
        cluster: KubernetesClient,
        operator: OperatorPackage,
        findings: Iterable[FindingPattern] = DVO_FINDINGS,
        timings: OperatorTimings = OperatorTimings(),
    ):
        self.cluster = cluster
        self.operator = operator
        self.findings = list(findings)
        self.timings = timings
        self.state = OperatorState.NOT_INSTALLED
        self.project: Optional[KubernetesClient] = None
        self.operator_group: Optional[OperatorGroup] = None
        self.subscription: Optional[Subscription] = None
        self.workload: Optional[Deployment] = None

    def install(self):
        """Creates namespace, OperatorGroup and Subscription for the operator"""
        self.state = OperatorState.INSTALLING
        operator = self.operator

        self.project = self.cluster.create_project(operator.namespace)
        logger.info("Created project %s", operator.namespace)

        # Assigned only once created, objects which failed to commit are removed with the namespace
        operator_group = OperatorGroup.create_instance(self.project, operator.name, [operator.namespace])
        operator_group.commit()
        self.operator_group = operator_group
        logger.info("Created operator group %s", operator.name)

        subscription = Subscription.create_instance(
            self.project,
            operator.name,
            package=operator.package,
            channel=operator.channel,
            source=operator.catalog_source,
            source_namespace=operator.catalog_namespace,
        )
        subscription.commit()
        self.subscription = subscription
        logger.info("Created subscription %s to %s/%s", operator.name, operator.catalog_source, operator.package)

    def deploy_workload(
        self, name: str = "dvo-test-case", node_selector: dict[str, str] = None, service_account: str = None
    ) -> Deployment:
        """Deploys single replica workload with random suffix for the operator to validate"""
        self.state = OperatorState.INSTALLED_DEPLOYING
        self.workload = Deployment.create_instance(
            self.project,
            randomize(name),
            WORKLOAD_IMAGE,
            node_selector=node_selector,
            service_account=service_account,
        )
        self.workload.commit()
        logger.info("Created deployment %s", self.workload.name())
        return self.workload

    def scrape_metrics(self) -> str:
        """Returns raw metrics of the operator"""
        metrics = self.operator.metrics
        return self.project.service_proxy_get(metrics.service, metrics.port, metrics.path, metrics.scheme)

    def verify(self) -> PollOutcome:
        """Waits until the operator reports every expected finding for the workload"""
        self.state = OperatorState.VERIFYING
        workload = self.workload.name()

        def findings_reported():
            try:
                data = self.scrape_metrics()
            except RequestError as e:
                logger.info("Metrics endpoint %s is not reachable yet: %s", self.operator.metrics.service, e)
                return False, None, ["metrics endpoint unreachable"]
            if is_unavailable(data):
                logger.info("Metrics endpoint %s is not ready yet", self.operator.metrics.service)
                return False, None, ["metrics endpoint unavailable"]
            missing = missing_findings(data, workload, self.findings)
            return not missing, None, missing

        outcome = poll_until(self.timings.findings, findings_reported)
        self.state = OperatorState.VERIFIED if outcome else OperatorState.VERIFICATION_TIMED_OUT
        return outcome

    def csv_succeeded(self, display_name: str) -> PollOutcome:
        """Waits until ClusterServiceVersion with said display name is successfully installed"""

        def csv_installed():
            csvs = self.project.select("clusterserviceversions", cls=ClusterServiceVersion)
            matching = [csv for csv in csvs if csv.display_name == display_name]
            if not matching:
                return False, None, [f"no CSV named {display_name}"]
            phases = [f"{csv.name()} is {csv.phase or 'pending'}" for csv in matching if not csv.succeeded]
            return not phases, None, phases

        return poll_until(self.timings.csv_succeeded, csv_installed)

    def lock_config_map_exists(self, name: str) -> bool:
        """True, if the operator created its leader lock ConfigMap"""
        return self.project.get(f"configmap/{name}", cls=ConfigMap) is not None

    def deployment_ready(self, name: str, replicas: int = 1) -> PollOutcome:
        """Waits until Deployment of the operator has said number of ready replicas"""

        def ready():
            deployment = self.project.get(f"deployment/{name}", cls=Deployment)
            if deployment is None:
                return False, None, [f"deployment {name} does not exist"]
            ready_replicas = deployment.ready_replicas
            return ready_replicas == replicas, None, [f"{ready_replicas}/{replicas} replicas ready"]

        return poll_until(self.timings.deployment_ready, ready)

    def cluster_roles_present(self, roles: Iterable[str]) -> dict[str, bool]:
        """Returns existence of each ClusterRole"""
        return {role: self.cluster.exists(f"clusterrole/{role}") for role in roles}

    def _resolve_current_csv(self) -> PollOutcome:
        name = self.operator.name

        def current_csv_reported():
            try:
                subscription = self.project.get(f"subscription.operators.coreos.com/{name}", cls=Subscription)
            except OpenShiftPythonException as e:
                return False, e
            if subscription is None:
                return False, LookupError(f"Subscription {name} does not exist in {self.operator.namespace}")
            self.subscription = subscription
            return subscription.current_csv != "", None, [f"subscription {name} has no current CSV"]

        return poll_until(self.timings.current_csv, current_csv_reported)

    def _wait_for_install_plan_removal(self, install_plan: str) -> PollOutcome:
        def install_plan_removed():
            plan = self.project.get(f"installplan/{install_plan}", cls=InstallPlan)
            if plan is None:
                return True, None
            return False, None, [f"installplan {install_plan} still exists in phase {plan.phase or 'unknown'}"]

        return poll_until(self.timings.install_plan_removal, install_plan_removed)

    def _remove_operator(self) -> tuple[PollOutcome, str]:
        """Deletes OperatorGroup, Subscription and the installed CSV, returns CSV resolution and InstallPlan name"""
        csv_outcome = PollOutcome(PollStatus.SUCCESS, 0)
        latest_csv = install_plan = ""
        if self.subscription is not None:
            csv_outcome = self._resolve_current_csv()
            if not csv_outcome:
                logger.error("Unable to resolve installed CSV: %s", csv_outcome.describe("Current CSV"))
            latest_csv = self.subscription.current_csv
            install_plan = self.subscription.install_plan_name

        if self.operator_group is not None:
            self.operator_group.delete(ignore_not_found=False)
            logger.info("Removed operatorgroup %s", self.operator_group.name())
        if self.subscription is not None:
            # Failed lookup means the Subscription is already gone
            self.subscription.delete(ignore_not_found=csv_outcome.failed)
            logger.info("Removed subscription %s", self.subscription.name())

        if latest_csv:
            csv = self.project.get(f"clusterserviceversion/{latest_csv}", cls=ClusterServiceVersion)
            if csv is None:
                raise LookupError(f"ClusterServiceVersion {latest_csv} does not exist")
            csv.delete(ignore_not_found=False)
            logger.info("Removed csv %s", latest_csv)

        return csv_outcome, install_plan

    def teardown(self) -> PollOutcome:
        """
        Removes the operator with everything it installed and waits until OLM garbage collects its InstallPlan.
        The namespace is always deleted, deletion failures are raised afterwards.
        """
        if self.project is None:
            self.state = OperatorState.TORN_DOWN
            return PollOutcome(PollStatus.SUCCESS, 0)

        try:
            csv_outcome, install_plan = self._remove_operator()
        finally:
            self.cluster.delete_project(self.operator.namespace, force=True)
            logger.info("Removed project %s", self.operator.namespace)
            self.state = OperatorState.TORN_DOWN

        if not csv_outcome:
            return csv_outcome
        if not install_plan:
            logger.warning("Subscription %s never reported its InstallPlan", self.operator.name)
            return csv_outcome

        outcome = self._wait_for_install_plan_removal(install_plan)
        if outcome:
            logger.info("Verified installplan removal")
        return outcome
