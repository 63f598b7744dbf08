"""Namespace object for Kubernetes"""

from osdsuite.kubernetes import KubernetesObject


class Namespace(KubernetesObject):
    """Kubernetes Namespace"""

    @classmethod
    def create_instance(cls, cluster, name: str, labels: dict[str, str] = None):
        """Creates new instance of Namespace"""
        model: dict = {
            "kind": "Namespace",
            "apiVersion": "v1",
            "metadata": {
                "name": name,
                "labels": labels,
            },
        }

        return cls(model, context=cluster.context)
