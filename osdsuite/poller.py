"""
Bounded polling of eventually consistent cluster state.

A predicate is evaluated repeatedly until it is satisfied, returns an error, or the poll deadline elapses.
Predicates return ``(satisfied, error)`` and may add a third item, a list of unmet sub-conditions,
which is kept on the outcome so timeouts can be reported with context.
Transient states (resource not found yet, backend not ready) must be absorbed by the predicate itself
by returning ``(False, None)``, only fatal conditions should return an error.

Example:
    outcome = poll_immediate(5, 300, lambda: (subscription.current_csv != "", None))
    assert outcome, outcome.describe("Subscription never reported its CSV")
"""

import enum
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import backoff

logger = logging.getLogger(__name__)

PredicateResult = tuple[bool, Optional[Exception]] | tuple[bool, Optional[Exception], list[str]]
Predicate = Callable[[], PredicateResult]


class PollStatus(enum.Enum):
    """Terminal states of a single poll"""

    SUCCESS = "success"
    TIMED_OUT = "timed out"
    FAILED = "failed"


@dataclass(frozen=True)
class PollSpec:
    """Interval and deadline of a single poll, in seconds"""

    interval: float
    timeout: float
    immediate: bool = True

    def __post_init__(self):
        if self.interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {self.interval}")
        if self.timeout < self.interval:
            raise ValueError(f"Poll timeout ({self.timeout}) must not be shorter than interval ({self.interval})")

    @property
    def max_tries(self) -> int:
        """Number of predicate evaluations that fit into the timeout"""
        return max(1, math.floor(self.timeout / self.interval))


@dataclass(frozen=True)
class PollOutcome:
    """Result of a poll"""

    status: PollStatus
    attempts: int
    error: Optional[Exception] = None
    unmet: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """True, if the predicate was satisfied"""
        return self.status is PollStatus.SUCCESS

    @property
    def timed_out(self) -> bool:
        """True, if the deadline elapsed before the predicate was satisfied"""
        return self.status is PollStatus.TIMED_OUT

    @property
    def failed(self) -> bool:
        """True, if the predicate reported a fatal error"""
        return self.status is PollStatus.FAILED

    def describe(self, what: str = "Condition") -> str:
        """Returns diagnostic message for assertions"""
        if self.succeeded:
            return f"{what} satisfied after {self.attempts} attempt(s)"
        if self.failed:
            return f"{what} failed after {self.attempts} attempt(s): {self.error}"
        message = f"{what} timed out after {self.attempts} attempt(s)"
        if self.unmet:
            message += f", still unmet: {', '.join(self.unmet)}"
        return message

    def __bool__(self):
        return self.succeeded


def _log_backoff(details):
    unmet = details["value"][2] if len(details["value"]) > 2 else []
    logger.debug(
        "Condition %s not met on attempt %d (%.1fs elapsed), next check in %.1fs%s",
        details["target"].__name__,
        details["tries"],
        details["elapsed"],
        details["wait"],
        f", unmet: {', '.join(unmet)}" if unmet else "",
    )


def poll_until(spec: PollSpec, predicate: Predicate) -> PollOutcome:
    """Polls predicate as described by the PollSpec"""
    attempts = 0

    def _check():
        nonlocal attempts
        attempts += 1
        return predicate()

    _check.__name__ = getattr(predicate, "__name__", "predicate")

    if not spec.immediate:
        time.sleep(spec.interval)

    result = backoff.on_predicate(
        backoff.constant,
        lambda value: not value[0] and value[1] is None,
        interval=spec.interval,
        jitter=None,
        max_tries=spec.max_tries,
        max_time=spec.timeout,
        on_backoff=_log_backoff,
        logger=None,
    )(_check)()

    satisfied, error = result[0], result[1]
    unmet = list(result[2]) if len(result) > 2 else []
    if error is not None:
        logger.error("Condition %s failed on attempt %d: %s", _check.__name__, attempts, error)
        return PollOutcome(PollStatus.FAILED, attempts, error=error, unmet=unmet)
    if satisfied:
        logger.info("Condition %s satisfied on attempt %d", _check.__name__, attempts)
        return PollOutcome(PollStatus.SUCCESS, attempts)
    logger.warning("Condition %s timed out after %d attempt(s)", _check.__name__, attempts)
    return PollOutcome(PollStatus.TIMED_OUT, attempts, unmet=unmet)


def poll_immediate(interval: float, timeout: float, predicate: Predicate) -> PollOutcome:
    """Polls predicate every `interval` seconds until `timeout`, first check happens immediately"""
    return poll_until(PollSpec(interval, timeout, immediate=True), predicate)


def poll(interval: float, timeout: float, predicate: Predicate) -> PollOutcome:
    """Polls predicate every `interval` seconds until `timeout`, first check happens after one interval"""
    return poll_until(PollSpec(interval, timeout, immediate=False), predicate)
