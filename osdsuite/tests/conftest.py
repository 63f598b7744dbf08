"""Root conftest"""

import signal

import pytest

from osdsuite.capabilities import has_cluster
from osdsuite.config import settings

# Suites which need the live cluster, everything else runs offline
CLUSTER_MARKS = {"operators", "proxy"}


def pytest_addoption(parser):
    """Add options to include various kinds of tests in testrun"""
    parser.addoption(
        "--enforce", action="store_true", default=False, help="Fails tests instead of skip, if capabilities are missing"
    )


def pytest_runtest_setup(item):
    """
    Skip or fail tests based on available capabilities and marks
    First round of filtering is usually done by pytest through -m option
    (https://docs.pytest.org/en/latest/example/markers.html#marking-test-functions-and-selecting-them-for-a-run)
    In this function we skip or fail the tests that were selected but the cluster is not available
    """
    marks = {i.name for i in item.iter_markers()}
    if not marks & CLUSTER_MARKS:
        return
    skip_or_fail = pytest.fail if item.config.getoption("--enforce") else pytest.skip
    connected, error = has_cluster()
    if not connected:
        skip_or_fail(f"Unable to run cluster tests: {error}")


def pytest_collection_modifyitems(session, config, items):  # pylint: disable=unused-argument
    """Limits runtime of operator test bodies by the configured polling timeout, fixtures are not limited"""
    for item in items:
        if item.get_closest_marker("operators") and not item.get_closest_marker("timeout"):
            item.add_marker(pytest.mark.timeout(settings["tests"]["polling_timeout"], func_only=True))


@pytest.fixture(scope="session")
def skip_or_fail(request):
    """Skips or fails tests depending on --enforce option"""
    return pytest.fail if request.config.getoption("--enforce") else pytest.skip


@pytest.fixture(scope="session", autouse=True)
def term_handler():
    """
    This will handle ^C, cleanup won't be skipped
    https://github.com/pytest-dev/pytest/issues/9142
    """
    orig = signal.signal(signal.SIGTERM, signal.getsignal(signal.SIGINT))
    yield
    signal.signal(signal.SIGTERM, orig)


@pytest.fixture(scope="session")
def testconfig():
    """Testsuite settings"""
    return settings


@pytest.fixture(scope="session")
def cluster(testconfig):
    """Kubernetes client for the cluster under test"""
    client = testconfig["control_plane"]["cluster"]
    if not client.connected:
        pytest.fail("You are not logged into the cluster under test")
    return client
