"""Config map"""

from osdsuite.kubernetes import KubernetesObject


class ConfigMap(KubernetesObject):
    """Kubernetes ConfigMap object"""

    @classmethod
    def create_instance(
        cls,
        cluster,
        name,
        data: dict[str, str],
        labels: dict[str, str] = None,
    ):
        """Creates new Config Map"""
        model: dict = {
            "kind": "ConfigMap",
            "apiVersion": "v1",
            "metadata": {
                "name": name,
                "labels": labels,
            },
            "data": data,
        }
        return cls(model, context=cluster.context)

    def get(self, name, default=None):
        """Returns data under the key, `default` if the key is not present"""
        if name in self:
            return self[name]
        return default

    def __getitem__(self, name):
        return self.model.data[name]

    def __contains__(self, name):
        return name in self.model.data
