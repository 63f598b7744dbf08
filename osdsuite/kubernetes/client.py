"""This module implements an KubernetesCLI interface using oc/kubectl binary commands."""

from functools import cached_property

import openshift_client as oc
from openshift_client import Context, OpenShiftPythonException

from osdsuite.httpx import ClusterHTTPClient
from osdsuite.kubernetes.namespace import Namespace


class KubernetesClient:
    """KubernetesClient is a helper class for invoking oc commands against the cluster under test"""

    def __init__(self, project: str = None, api_url: str = None, token: str = None, kubeconfig_path: str = None):
        self._project = project
        self._api_url = api_url
        self._token = token
        self._kubeconfig_path = kubeconfig_path

    def change_project(self, project) -> "KubernetesClient":
        """Return new self with a different project"""
        return KubernetesClient(project, self._api_url, self._token, self._kubeconfig_path)

    @cached_property
    def context(self):
        """Prepare context for command execution"""
        context = Context()

        context.project_name = self._project
        context.api_server = self._api_url
        context.token = self._token
        context.kubeconfig_path = self._kubeconfig_path

        return context

    @property
    def api_url(self):
        """Returns real API url"""
        return self._api_url or self.inspect_context(jsonpath="{.clusters[*].cluster.server}")

    @property
    def token(self):
        """Returns real Kubernetes token"""
        if self._token:
            return self._token
        with self.context:
            return oc.whoami("-t")

    @property
    def project(self):
        """Returns real Kubernetes namespace name"""
        with self.context:
            return oc.get_project_name()

    @property
    def connected(self):
        """Returns True, if user is logged in and the project exists"""
        try:
            self.do_action("get", "ns", self._project or "default")
        except OpenShiftPythonException:
            return False
        return True

    def do_action(self, verb: str, *args, stdin_str=None, auto_raise: bool = True):
        """Run an oc command."""
        with self.context:
            return oc.invoke(verb, args, stdin_str=stdin_str, auto_raise=auto_raise)

    def inspect_context(self, jsonpath, raw=False):
        """Returns jsonpath from the current context"""
        return (
            self.do_action("config", "view", f'--output=jsonpath="{jsonpath}"', f"--raw={raw}", "--minify=true")
            .out()
            .replace('"', "")
            .strip()
        )

    def get(self, kind_name: str, cls=None):
        """
        Returns object with said `kind/name` from the current namespace wrapped in `cls`,
        None if the object does not exist. Every other failure is raised.
        """
        with self.context:
            obj = oc.selector(kind_name).object(ignore_not_found=True, cls=cls)
        if obj is not None:
            obj.context = self.context
        return obj

    def exists(self, kind_name: str) -> bool:
        """Returns True if object with said `kind/name` exists"""
        with self.context:
            return oc.selector(kind_name).count_existing() == 1

    def select(self, kind: str, cls=None, labels: dict[str, str] = None, all_namespaces: bool = False) -> list:
        """Returns all objects of said kind, optionally filtered by labels"""
        with self.context:
            return oc.selector(kind, labels=labels, all_namespaces=all_namespaces).objects(cls=cls)

    def create_project(self, name: str) -> "KubernetesClient":
        """Creates new namespace and returns client switched to it"""
        Namespace.create_instance(self, name).commit()
        return self.change_project(name)

    def delete_project(self, name: str, force: bool = False):
        """Deletes namespace and waits until all of its content is gone"""
        args = [f"namespace/{name}", "--ignore-not-found=true", "--wait=true", "--cascade=foreground"]
        if force:
            args.extend(["--grace-period=0", "--force=true"])
        self.do_action("delete", *args)

    def service_proxy_get(self, service: str, port: int | str, path: str = "/", scheme: str = "http") -> str:
        """
        Sends GET request to the service through the API server service proxy and returns raw response body.
        Non-2xx responses are returned as they are, the API server reports them as JSON Status.
        The request is sent once, transport errors are raised for the caller to poll again.
        """
        project = self._project or self.project
        url = f"{self.api_url}/api/v1/namespaces/{project}/services/{scheme}:{service}:{port}/proxy{path}"
        with ClusterHTTPClient(token=self.token, retry=False, verify=False) as client:
            return client.get(url).text
