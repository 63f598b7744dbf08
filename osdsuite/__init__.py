"""Monkeypatching land"""

import os

from openshift_client import context

# OSD clusters are always OpenShift, default to the oc binary
context.default_oc_path = os.getenv("OPENSHIFT_CLIENT_PYTHON_DEFAULT_OC_PATH", "oc")
