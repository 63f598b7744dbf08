"""Kubernetes common objects"""

import functools

from openshift_client import APIObject, timeout, Missing


class KubernetesObject(APIObject):
    """Custom APIObjects which tracks if the object was already committed to the server or not"""

    def __init__(self, dict_to_model=None, string_to_model=None, context=None):
        super().__init__(dict_to_model, string_to_model, context)
        self._committed = None

    @property
    def committed(self):
        """Returns True, if the objects is already committed to the server"""
        if self._committed is None:
            self._committed, _ = self.exists()
        return self._committed

    def commit(self):
        """
        Creates object on the server and returns created entity.
        It will be the same class but attributes might differ, due to server adding/rejecting some of them.
        """
        self.create(["--save-config=true"])
        self._committed = True
        return self.refresh()

    def apply(self, *args, **kwargs):
        """
        Overrides apply() to fail with assertion error if unsuccessful
        """
        result = super().apply(*args, **kwargs)
        assert result.status() == 0, f"Apply returned non-zero exit code for {self.kind()} {self.name()}"
        self._committed = True
        return result

    def modify_and_apply(self, *args, **kwargs):
        """
        Overrides modify_and_apply() to fail with assertion error if unsuccessful
        """
        result, applied_change = super().modify_and_apply(*args, **kwargs)
        assert result.status() == 0, f"Modify and apply returned non-zero exit code for {self.kind()} {self.name()}"
        return result, applied_change

    def delete(self, ignore_not_found=True, cmd_args=None):
        """Deletes the resource, by default ignored not found"""
        with timeout(60):
            deleted = super().delete(ignore_not_found, cmd_args)
            self._committed = False
            return deleted

    def status_field(self, *path, default=""):
        """Returns nested value from the status of the object, `default` if it is not reported yet"""
        value = self.model.status
        for key in path:
            if value is Missing:
                return default
            value = getattr(value, key)
        return default if value is Missing else value


class CustomResource(KubernetesObject):
    """Custom APIObjects that implements methods that improves manipulation with CR objects"""

    def __getitem__(self, name):
        return self.model.spec[name]


def modify(func):
    """Wraps method of a subclass of KubernetesObject to use modify_and_apply when the object
    is already committed to the server, or run it normally if it isn't.
    All methods modifying the target object in any way should be decorated by this"""

    def _custom_partial(func, *args, **kwargs):
        """Custom partial function which makes sure that self is always assigned correctly"""

        def _func(self):
            func(self, *args, **kwargs)

        return _func

    @functools.wraps(func)
    def _wrap(self, *args, **kwargs):
        if self.committed:
            result, _ = self.modify_and_apply(_custom_partial(func, *args, **kwargs))
            assert result.status
        else:
            func(self, *args, **kwargs)

    return _wrap
