"""Contains capability related classes"""

import functools

from osdsuite.config import settings


@functools.cache
def has_cluster():
    """Returns True, if the cluster under test is reachable with the configured credentials"""
    cluster = settings["control_plane"]["cluster"]
    if not cluster.connected:
        return False, "Cluster under test is not reachable, log in with oc or configure control_plane.cluster"
    return True, None
