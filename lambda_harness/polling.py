"""
Shared timeout policy for the harness poll loops.

Both the queue-drain poll and the log-appearance poll are the same loop:
check a remote resource, stop when the check result satisfies a condition,
otherwise sleep and try again until the deadline passes. The loop lives here
so the two callers only supply the check and the condition.

All durations are integer milliseconds.
"""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from lambda_harness.errors import PollTimeoutError


DEFAULT_TIMEOUT_MS = 30000
DEFAULT_INTERVAL_MS = 1000


class TimeoutPolicy(Enum):
    """What a poll loop does when its deadline passes unsatisfied."""
    RAISE = 'raise'
    RETURN = 'return'


@dataclass
class PollOutcome:
    """Result of a poll loop. satisfied=False only under TimeoutPolicy.RETURN."""
    satisfied: bool
    elapsed_ms: int
    attempts: int
    value: Any = None


def epoch_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def pause(duration_ms: int) -> None:
    """Sleep for duration_ms; non-positive durations return immediately."""
    if duration_ms > 0:
        time.sleep(duration_ms / 1000)


class Deadline:
    """A timeout budget measured from its own creation on a monotonic clock."""

    def __init__(self, timeout_ms: int):
        if timeout_ms < 0:
            raise ValueError(f"timeout_ms must be >= 0, got {timeout_ms}")
        self.timeout_ms = timeout_ms
        self._started = time.monotonic()

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self._started) * 1000)

    def remaining_ms(self) -> int:
        return max(0, self.timeout_ms - self.elapsed_ms())

    def expired(self) -> bool:
        return self.elapsed_ms() >= self.timeout_ms

    def pause(self, duration_ms: int) -> None:
        """Sleep for duration_ms, clamped so the deadline is never overshot."""
        pause(min(duration_ms, self.remaining_ms()))


def poll_until(
    check: Callable[[], Any],
    is_satisfied: Callable[[Any], bool],
    description: str,
    expected: Any = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    interval_ms: int = DEFAULT_INTERVAL_MS,
    initial_delay_ms: int = 0,
    on_timeout: TimeoutPolicy = TimeoutPolicy.RAISE,
    observe: Optional[Callable[[Any], Any]] = None
) -> PollOutcome:
    """
    Call check() until is_satisfied(result) or the deadline passes.

    The check always runs at least once, even when initial_delay_ms uses up
    the whole budget. Exceptions raised by the check are not caught.

    Args:
        check: Zero-argument remote read
        is_satisfied: Condition evaluated on each check result
        description: What is being waited for, used in the timeout error
        expected: Expected value reported in the timeout error
        timeout_ms: Total budget measured from the call
        interval_ms: Sleep between unsatisfied attempts
        initial_delay_ms: Sleep before the first attempt
        on_timeout: Raise PollTimeoutError or return an unsatisfied outcome
        observe: Maps a check result to the value reported on timeout

    Returns:
        PollOutcome with the last check result as value
    """
    deadline = Deadline(timeout_ms)
    deadline.pause(initial_delay_ms)

    attempts = 0
    while True:
        result = check()
        attempts += 1
        if is_satisfied(result):
            return PollOutcome(True, deadline.elapsed_ms(), attempts, result)
        if deadline.expired():
            break
        deadline.pause(interval_ms)

    elapsed = deadline.elapsed_ms()
    if on_timeout is TimeoutPolicy.RAISE:
        observed = observe(result) if observe else result
        raise PollTimeoutError(description, expected, observed, elapsed, timeout_ms)
    return PollOutcome(False, elapsed, attempts, result)
