"""Backoff strategies for throttled operations."""

from abc import ABC, abstractmethod


class BackoffStrategy(ABC):
    """Strategy for choosing how long to wait after a throttle signal."""

    @abstractmethod
    def wait_for(self, attempt_index: int, suggested_wait: float | None = None) -> float:
        """
        Compute the wait before the next attempt.

        Args:
            attempt_index: Zero-based index of the attempt that was throttled
            suggested_wait: Server-suggested wait in seconds, if any

        Returns:
            Wait duration in seconds
        """
        ...


class ExponentialBackoffStrategy(BackoffStrategy):
    """Server hint if present, otherwise initial_wait * base ** attempt_index."""

    def __init__(
        self,
        initial_wait: float = 30.0,
        exponential_base: float = 2.0,
        max_wait: float | None = None,
    ):
        """
        Initialize exponential backoff strategy.

        Args:
            initial_wait: Wait after the first throttled attempt, in seconds
            exponential_base: Multiplier applied per attempt
            max_wait: Optional cap for computed waits (server hints are never capped)
        """
        self.initial_wait = initial_wait
        self.exponential_base = exponential_base
        self.max_wait = max_wait

    def wait_for(self, attempt_index: int, suggested_wait: float | None = None) -> float:
        if suggested_wait is not None:
            return max(0.0, suggested_wait)

        wait = self.initial_wait * (self.exponential_base**attempt_index)
        if self.max_wait is not None:
            wait = min(wait, self.max_wait)
        return wait


class FixedDelayStrategy(BackoffStrategy):
    """Fixed wait after every throttle, ignoring server hints unless told otherwise."""

    def __init__(self, delay: float = 30.0, honor_server_hint: bool = False):
        self.delay = delay
        self.honor_server_hint = honor_server_hint

    def wait_for(self, attempt_index: int, suggested_wait: float | None = None) -> float:
        if self.honor_server_hint and suggested_wait is not None:
            return max(0.0, suggested_wait)
        return self.delay
