"""Conftest for operator tests, installs the operator once per module and always removes it afterwards"""

import pytest

from osdsuite.scenarios.operator import OperatorVerification, dvo_package


@pytest.fixture(scope="module")
def operator_package(testconfig):
    """Operator package to install, configurable through the `dvo` section of settings"""
    testconfig.validators.validate(only="dvo")
    dvo = testconfig["dvo"]
    return dvo_package(
        namespace=dvo["namespace"],
        package=dvo["package"],
        channel=dvo["channel"],
        catalog_source=dvo["catalog_source"],
        catalog_namespace=dvo["catalog_namespace"],
    )


@pytest.fixture(scope="module")
def operator_verification(request, cluster, operator_package):
    """Installed operator, teardown runs even if the tests failed to not leak resources between runs"""
    verification = OperatorVerification(cluster, operator_package)

    def _teardown():
        outcome = verification.teardown()
        assert outcome, outcome.describe("Operator removal")

    request.addfinalizer(_teardown)
    verification.install()
    return verification
