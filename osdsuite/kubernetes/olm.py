"""Operator Lifecycle Manager objects used to install operators from a catalog"""

from osdsuite.kubernetes import CustomResource


class OperatorGroup(CustomResource):
    """OperatorGroup scoping operators in its namespace to the target namespaces"""

    @classmethod
    def create_instance(cls, cluster, name: str, target_namespaces: list[str], labels: dict[str, str] = None):
        """Creates new instance of OperatorGroup"""
        model: dict = {
            "apiVersion": "operators.coreos.com/v1",
            "kind": "OperatorGroup",
            "metadata": {"name": name, "labels": labels},
            "spec": {"targetNamespaces": target_namespaces},
        }

        return cls(model, context=cluster.context)


class Subscription(CustomResource):
    """Subscription to an operator package in a catalog"""

    @classmethod
    def create_instance(
        cls,
        cluster,
        name: str,
        package: str,
        channel: str,
        source: str,
        source_namespace: str = "openshift-marketplace",
        approval: str = "Automatic",
        labels: dict[str, str] = None,
    ):  # pylint: disable=too-many-arguments
        """Creates new instance of Subscription"""
        model: dict = {
            "apiVersion": "operators.coreos.com/v1alpha1",
            "kind": "Subscription",
            "metadata": {"name": name, "labels": labels},
            "spec": {
                "name": package,
                "channel": channel,
                "source": source,
                "sourceNamespace": source_namespace,
                "installPlanApproval": approval,
            },
        }

        return cls(model, context=cluster.context)

    @property
    def current_csv(self) -> str:
        """Name of the ClusterServiceVersion the Subscription currently resolves to, empty if not resolved yet"""
        return self.status_field("currentCSV")

    @property
    def install_plan_name(self) -> str:
        """Name of the InstallPlan which installed the current CSV, empty if not reported yet"""
        return self.status_field("installPlanRef", "name") or self.status_field("install", "name")


class ClusterServiceVersion(CustomResource):
    """ClusterServiceVersion describing one installed version of an operator"""

    @property
    def display_name(self) -> str:
        """Human readable name of the operator"""
        return self.model.spec.displayName

    @property
    def phase(self) -> str:
        """Installation phase, `Succeeded` once the operator is running"""
        return self.status_field("phase")

    @property
    def succeeded(self) -> bool:
        """True, if the operator was installed successfully"""
        return self.phase == "Succeeded"


class InstallPlan(CustomResource):
    """InstallPlan representing operator installation step"""

    @property
    def phase(self) -> str:
        """Phase of the installation"""
        return self.status_field("phase")
