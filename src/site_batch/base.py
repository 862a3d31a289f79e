"""Base data model for site batch runs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OutcomeStatus(str, Enum):
    """Terminal status of one target in a batch."""

    SUCCEEDED = "succeeded"
    RETRIES_EXHAUSTED = "retries_exhausted"
    FATAL_FAILURE = "fatal_failure"
    CONTEXT_FAILED = "context_failed"


@dataclass
class RetryState:
    """
    Attempt bookkeeping for a single executor call.

    Attributes:
        attempts: Number of operation invocations made so far
        waits: Backoff durations slept, in order
    """

    attempts: int = 0
    waits: list[float] = field(default_factory=list)

    @property
    def total_wait(self) -> float:
        return sum(self.waits)


@dataclass
class ExecutionResult:
    """
    Result of one executor call that did not fail fatally.

    Attributes:
        status: SUCCEEDED or RETRIES_EXHAUSTED
        output: Operation payload when successful
        retry_state: Attempts and waits spent on this call
        last_error: Final throttle message when retries ran out
    """

    status: OutcomeStatus
    output: Any = None
    retry_state: RetryState = field(default_factory=RetryState)
    last_error: str | None = None

    @property
    def success(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED


@dataclass
class TargetOutcome:
    """
    Outcome recorded for one target.

    Attributes:
        target: Site endpoint the outcome belongs to
        status: Terminal status for the target
        output: Operation payload if successful, None otherwise
        error: Failure reason if unsuccessful, None otherwise
        attempts: Operation invocations made (0 when no context was established)
        total_wait: Seconds spent in backoff for this target
        duration: Wall-clock seconds spent on this target
    """

    target: str
    status: OutcomeStatus
    output: Any = None
    error: str | None = None
    attempts: int = 0
    total_wait: float = 0.0
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED


@dataclass
class BatchResult:
    """
    Result of running one operation across a batch of targets.

    Attributes:
        operation: Name of the operation that was run
        outcomes: Per-target outcomes, in input order
        total_targets: Number of targets in the batch
        succeeded: Number of successful targets
        failed: Number of failed targets
    """

    operation: str
    outcomes: list[TargetOutcome]
    total_targets: int = 0
    succeeded: int = 0
    failed: int = 0

    def __post_init__(self):
        """Calculate summary statistics from outcomes."""
        self.total_targets = len(self.outcomes)
        self.succeeded = sum(1 for o in self.outcomes if o.success)
        self.failed = self.total_targets - self.succeeded

    def by_status(self) -> dict[OutcomeStatus, int]:
        """Count outcomes per terminal status."""
        counts: dict[OutcomeStatus, int] = {}
        for outcome in self.outcomes:
            counts[outcome.status] = counts.get(outcome.status, 0) + 1
        return counts

    def failures(self) -> list[TargetOutcome]:
        return [o for o in self.outcomes if not o.success]


@dataclass
class ProcessingStats:
    """Running statistics for a batch."""

    total: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    throttle_count: int = 0
    total_wait: float = 0.0
    start_time: float | None = None
    status_counts: dict[str, int] = field(default_factory=dict)

    def copy(self) -> dict[str, Any]:
        """Return a dictionary snapshot of the stats."""
        return {
            "total": self.total,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "throttle_count": self.throttle_count,
            "total_wait": self.total_wait,
            "start_time": self.start_time,
            "status_counts": self.status_counts.copy(),
        }
