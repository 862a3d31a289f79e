"""Throttle-aware executor.

Runs one operation against one target, backing off whenever the remote
service signals throttling. Non-throttling failures are not retried.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .base import ExecutionResult, OutcomeStatus, RetryState
from .core import RetryConfig, SiteSession
from .observers import BatchObserver, ProcessingEvent, notify_observers
from .operations import SiteOperation
from .strategies import (
    BackoffStrategy,
    DefaultErrorClassifier,
    ErrorClassifier,
    ExponentialBackoffStrategy,
    FatalOperationError,
)

SleepFunc = Callable[[float], Awaitable[None]]


class ThrottleAwareExecutor:
    """
    Execute a single operation with bounded throttle retries.

    Per call: Pending -> Attempting -> Succeeded | Throttled -> (wait) ->
    Attempting | FatalFailure | RetriesExhausted.
    """

    def __init__(
        self,
        retry: RetryConfig | None = None,
        error_classifier: ErrorClassifier | None = None,
        backoff_strategy: BackoffStrategy | None = None,
        observers: list[BatchObserver] | None = None,
        sleep: SleepFunc = asyncio.sleep,
        logger: logging.Logger | None = None,
        observer_timeout: float = 5.0,
    ):
        """
        Initialize the executor.

        Args:
            retry: Attempt bound and backoff parameters (default: 5 attempts, 30s initial wait)
            error_classifier: Decides which errors are throttle signals
            backoff_strategy: Computes waits (default: exponential from the retry config)
            observers: Observers notified of throttle and backoff events
            sleep: Coroutine used to wait between attempts
            logger: Log sink (default: this module's logger)
            observer_timeout: Seconds to wait on each observer callback
        """
        self.retry = retry or RetryConfig()
        self.retry.validate()
        self.error_classifier = error_classifier or DefaultErrorClassifier()
        self.backoff_strategy = backoff_strategy or ExponentialBackoffStrategy(
            initial_wait=self.retry.initial_wait,
            exponential_base=self.retry.exponential_base,
            max_wait=self.retry.max_wait,
        )
        self.observers = observers or []
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self.observer_timeout = observer_timeout

    async def execute(
        self, operation: SiteOperation, target: str, session: SiteSession
    ) -> ExecutionResult:
        """
        Invoke the operation, retrying on throttle signals.

        Args:
            operation: Operation to invoke
            target: Target the session belongs to (diagnostics only)
            session: Established session for the target

        Returns:
            ExecutionResult with status SUCCEEDED or RETRIES_EXHAUSTED

        Raises:
            FatalOperationError: The operation failed with a non-throttling error
        """
        max_attempts = self.retry.max_attempts
        state = RetryState()
        last_error: str | None = None

        for attempt_index in range(max_attempts):
            attempt = attempt_index + 1
            state.attempts = attempt

            if attempt > 1:
                self.logger.info(f"ℹ️  Retry attempt {attempt}/{max_attempts} for {target}")

            try:
                output = await operation.invoke(session)
            except Exception as e:
                error_info = self.error_classifier.classify(e)

                if not error_info.is_throttled:
                    self.logger.error(
                        f"✗ PERMANENT FAILURE for {target} ({operation.name}):\n"
                        f"  Error type: {type(e).__name__}\n"
                        f"  Error message: {str(e)[:500]}\n"
                        f"  This error will NOT be retried (not a throttle signal)"
                    )
                    raise FatalOperationError(
                        target,
                        attempt,
                        f"{type(e).__name__}: {str(e)[:500]}",
                        retry_state=state,
                    ) from e

                last_error = f"{type(e).__name__}: {str(e)[:200]}"
                wait = self.backoff_strategy.wait_for(attempt_index, error_info.suggested_wait)

                await self._emit(
                    ProcessingEvent.THROTTLED,
                    {
                        "target": target,
                        "attempt": attempt,
                        "category": error_info.error_category,
                        "suggested_wait": error_info.suggested_wait,
                    },
                )
                source = "server hint" if error_info.suggested_wait is not None else "backoff"
                self.logger.warning(
                    f"🚫  Throttled on attempt {attempt}/{max_attempts} for {target} "
                    f"({error_info.error_category}). Waiting {wait:.1f}s ({source})..."
                )

                await self._backoff(target, attempt, wait)
                state.waits.append(wait)
                continue

            if attempt > 1:
                self.logger.info(
                    f"✓ SUCCESS on attempt {attempt} for {target} "
                    f"(after {attempt - 1} throttle(s), waited {state.total_wait:.1f}s)"
                )
            return ExecutionResult(
                status=OutcomeStatus.SUCCEEDED, output=output, retry_state=state
            )

        self.logger.error(
            f"✗ ALL {max_attempts} ATTEMPTS EXHAUSTED for {target} ({operation.name}):\n"
            f"  Final error: {last_error}\n"
            f"  Total backoff: {state.total_wait:.1f}s"
        )
        return ExecutionResult(
            status=OutcomeStatus.RETRIES_EXHAUSTED,
            retry_state=state,
            last_error=last_error,
        )

    async def _backoff(self, target: str, attempt: int, wait: float) -> None:
        """Sleep for the backoff duration, blocking the batch."""
        await self._emit(
            ProcessingEvent.BACKOFF_STARTED,
            {"target": target, "attempt": attempt, "duration": wait},
        )
        if wait > 0:
            await self.sleep(wait)
        await self._emit(
            ProcessingEvent.BACKOFF_ENDED,
            {"target": target, "attempt": attempt, "duration": wait},
        )

    async def _emit(self, event: ProcessingEvent, data: dict) -> None:
        if self.observers:
            await notify_observers(
                self.observers, event, data, self.logger, timeout=self.observer_timeout
            )
