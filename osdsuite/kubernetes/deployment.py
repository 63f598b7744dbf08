"""Deployment related objects"""

from osdsuite.kubernetes import KubernetesObject


class Deployment(KubernetesObject):
    """Kubernetes Deployment object"""

    @classmethod
    def create_instance(
        cls,
        cluster,
        name,
        image,
        container_name: str = "test",
        replicas: int = 1,
        node_selector: dict[str, str] = None,
        service_account: str = None,
        labels: dict[str, str] = None,
    ):
        """
        Creates new instance of Deployment
        Supports only single container Deployments everything else should be edited directly
        """
        match_labels = {"name": name}
        model: dict = {
            "kind": "Deployment",
            "apiVersion": "apps/v1",
            "metadata": {
                "name": name,
                "labels": labels,
            },
            "spec": {
                "replicas": replicas,
                "selector": {"matchLabels": match_labels},
                "template": {
                    "metadata": {"labels": {**match_labels, **(labels or {})}},
                    "spec": {
                        "containers": [
                            {
                                "image": image,
                                "name": container_name,
                            }
                        ]
                    },
                },
            },
        }
        template = model["spec"]["template"]["spec"]

        if node_selector:
            template["nodeSelector"] = node_selector

        if service_account:
            template["serviceAccountName"] = service_account

        return cls(model, context=cluster.context)

    @property
    def ready_replicas(self) -> int:
        """Returns number of ready replicas reported in status"""
        return self.status_field("readyReplicas", default=0)
