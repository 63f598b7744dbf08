"""Tests for bounded polling of cluster state"""

import pytest

from osdsuite.poller import PollSpec, PollStatus, poll, poll_immediate, poll_until


def sequence(*results):
    """Predicate returning given results one by one"""
    results = list(results)

    def _predicate():
        return results.pop(0)

    return _predicate


def test_success_after_retries(sleeps):
    """Tests that predicate satisfied on the third attempt succeeds after two waits"""
    outcome = poll_immediate(1, 10, sequence((False, None), (False, None), (True, None)))

    assert outcome
    assert outcome.status is PollStatus.SUCCESS
    assert outcome.attempts == 3
    assert sleeps == [1, 1]


def test_timeout_exhausts_attempts(sleeps):
    """Tests that never satisfied predicate is evaluated exactly timeout/interval times"""
    calls = []

    def _never():
        calls.append(1)
        return False, None, ["still pending"]

    outcome = poll_immediate(1, 3, _never)

    assert not outcome
    assert outcome.timed_out
    assert outcome.attempts == 3
    assert len(calls) == 3
    assert outcome.unmet == ["still pending"]
    assert len(sleeps) == 2


def test_error_stops_immediately(sleeps):
    """Tests that returned error fails the poll without retrying"""
    error = LookupError("gone")
    outcome = poll_immediate(1, 10, sequence((False, error), (True, None)))

    assert outcome.failed
    assert outcome.error is error
    assert outcome.attempts == 1
    assert sleeps == []


def test_raised_exception_propagates():
    """Tests that exception raised by the predicate is not swallowed"""

    def _broken():
        raise RuntimeError("unexpected")

    with pytest.raises(RuntimeError, match="unexpected"):
        poll_immediate(1, 10, _broken)


def test_delayed_start_waits_first(sleeps):
    """Tests that delayed poll waits one interval before the first check"""
    outcome = poll(30, 900, sequence((True, None)))

    assert outcome
    assert outcome.attempts == 1
    assert sleeps == [30]


def test_max_tries():
    """Tests that number of attempts is rounded down and never zero"""
    assert PollSpec(2, 15).max_tries == 7
    assert PollSpec(10, 300).max_tries == 30
    assert PollSpec(5, 5).max_tries == 1


@pytest.mark.parametrize("interval, timeout", [(0, 10), (-1, 10), (10, 5)])
def test_invalid_spec(interval, timeout):
    """Tests that non-positive interval and timeout shorter than interval are rejected"""
    with pytest.raises(ValueError):
        PollSpec(interval, timeout)


def test_describe():
    """Tests that timeout and failure are distinguishable in assertion messages"""
    timed_out = poll_until(PollSpec(1, 2), sequence((False, None, ["a"]), (False, None, ["b", "c"])))
    failed = poll_until(PollSpec(1, 2), sequence((False, ValueError("boom"))))

    assert timed_out.describe("Findings") == "Findings timed out after 2 attempt(s), still unmet: b, c"
    assert failed.describe("Findings") == "Findings failed after 1 attempt(s): boom"
