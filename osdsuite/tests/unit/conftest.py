"""Offline fixtures, the cluster is replaced by in-memory fake and time does not pass"""

import time
from types import SimpleNamespace

import pytest
from openshift_client import OpenShiftPythonException

from osdsuite.kubernetes import KubernetesObject


class FakeCluster:
    """
    In-memory stand-in for KubernetesClient, every project is the same fake.
    Objects are looked up by `kind/name`, listings by kind.
    """

    context = None

    def __init__(self):
        self.objects = {}
        self.listings = {}
        self.metrics = []
        self.created_projects = []
        self.deleted_projects = []

    def change_project(self, project):  # pylint: disable=unused-argument
        """Fake is shared by all projects"""
        return self

    def create_project(self, name):
        """Records created project"""
        self.created_projects.append(name)
        return self

    def delete_project(self, name, force=False):
        """Records deleted project"""
        self.deleted_projects.append((name, force))

    def get(self, kind_name, cls=None):  # pylint: disable=unused-argument
        """Returns stored object, None if there is none"""
        value = self.objects.get(kind_name)
        if isinstance(value, Exception):
            raise value
        return value

    def exists(self, kind_name):
        """True, if object is stored"""
        return kind_name in self.objects

    def select(self, kind, cls=None, labels=None, all_namespaces=False):  # pylint: disable=unused-argument
        """Returns stored listing of said kind"""
        return self.listings.get(kind, [])

    def service_proxy_get(self, service, port, path="/", scheme="http"):  # pylint: disable=unused-argument
        """Returns scripted metric bodies one by one, the last one is repeated"""
        body = self.metrics.pop(0) if len(self.metrics) > 1 else self.metrics[0]
        if isinstance(body, Exception):
            raise body
        return body


@pytest.fixture
def cluster():
    """Fake cluster"""
    return FakeCluster()


@pytest.fixture(autouse=True)
def sleeps(monkeypatch):
    """Records all sleeps instead of waiting"""
    recorded = []
    monkeypatch.setattr(time, "sleep", recorded.append)
    return recorded


@pytest.fixture
def rejected_kinds():
    """Kinds the fake cluster refuses to create"""
    return set()


@pytest.fixture
def committed(monkeypatch, rejected_kinds):
    """Records objects created on the fake cluster"""
    created = []

    def _commit(self):
        if self.kind() in rejected_kinds:
            raise OpenShiftPythonException(f"Error from server (Forbidden): {self.kind()}/{self.name()}")
        created.append(self)
        self._committed = True  # pylint: disable=protected-access
        return self

    monkeypatch.setattr(KubernetesObject, "commit", _commit)
    return created


@pytest.fixture
def missing():
    """`kind/name` of objects which are not on the fake cluster and fail to be deleted"""
    return set()


@pytest.fixture
def deleted(monkeypatch, missing):
    """Records `kind/name` of objects deleted from the fake cluster, in order"""
    removed = []

    def _delete(self, ignore_not_found=True, cmd_args=None):  # pylint: disable=unused-argument
        key = f"{self.kind()}/{self.name()}"
        if key in missing and not ignore_not_found:
            raise OpenShiftPythonException(f"Error from server (NotFound): {key} not found")
        removed.append(key)
        self._committed = False  # pylint: disable=protected-access

    monkeypatch.setattr(KubernetesObject, "delete", _delete)
    return removed


@pytest.fixture
def applied(monkeypatch):
    """Records objects applied to the fake cluster, modifications are done locally"""
    changed = []

    def _apply(self, *args, **kwargs):  # pylint: disable=unused-argument
        changed.append(self)
        self._committed = True  # pylint: disable=protected-access

    def _modify_and_apply(self, modifier_func, *args, **kwargs):  # pylint: disable=unused-argument
        modifier_func(self)
        changed.append(self)
        return SimpleNamespace(status=lambda: 0), True

    monkeypatch.setattr(KubernetesObject, "apply", _apply)
    monkeypatch.setattr(KubernetesObject, "modify_and_apply", _modify_and_apply)
    return changed
