"""Sequential batch orchestrator"""

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable, Sequence

from .base import BatchResult, OutcomeStatus, ProcessingStats, TargetOutcome
from .core import RunnerConfig, SessionFactory
from .executor import SleepFunc, ThrottleAwareExecutor
from .observers import BatchObserver, ProcessingEvent, notify_observers
from .operations import SiteOperation
from .strategies import ContextEstablishmentError, ErrorClassifier, FatalOperationError

# (completed, total, current_target)
ProgressCallbackFunc = Callable[[int, int, str], Awaitable[None] | None]


class SiteBatchOrchestrator:
    """
    Apply one operation to every target, one target at a time.

    For each target a session is opened, the operation is handed to the
    executor, and the session is closed before the next target starts.
    Failures are recorded per target; a batch always runs to completion.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        config: RunnerConfig | None = None,
        executor: ThrottleAwareExecutor | None = None,
        error_classifier: ErrorClassifier | None = None,
        observers: list[BatchObserver] | None = None,
        progress_callback: ProgressCallbackFunc | None = None,
        sleep: SleepFunc = asyncio.sleep,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            session_factory: Opens a session for each target
            config: Runner configuration (default: RunnerConfig())
            executor: Executor to use (default: built from config, classifier and observers)
            error_classifier: Classifier for the default executor
            observers: Observers for batch, target and throttle events
            progress_callback: Optional callback(completed, total, target) after each target
            sleep: Backoff sleep for the default executor
            logger: Log sink shared with the default executor
        """
        self.config = config or RunnerConfig()
        self.config.validate()

        self.session_factory = session_factory
        self.observers = observers or []
        self.progress_callback = progress_callback
        self.logger = logger or logging.getLogger(__name__)
        self.executor = executor or ThrottleAwareExecutor(
            retry=self.config.retry,
            error_classifier=error_classifier,
            observers=self.observers,
            sleep=sleep,
            logger=self.logger,
            observer_timeout=self.config.observer_timeout,
        )
        self._stats = ProcessingStats()

    def get_stats(self) -> dict:
        """Snapshot of the statistics for the current or most recent batch."""
        return self._stats.copy()

    async def run_batch(
        self, targets: Sequence[str], operation: SiteOperation
    ) -> BatchResult:
        """
        Run the operation across all targets in order.

        Args:
            targets: Site endpoints, processed in the given order
            operation: Operation to apply to each target

        Returns:
            BatchResult with one outcome per target, in input order
        """
        targets = list(targets)
        total = len(targets)
        self._stats = ProcessingStats(total=total, start_time=time.time())

        await self._emit(
            ProcessingEvent.BATCH_STARTED,
            {"operation": operation.name, "total": total, "dry_run": self.config.dry_run},
        )
        mode = " [DRY-RUN]" if self.config.dry_run else ""
        self.logger.info(f"ℹ️  Running {operation.name} across {total} target(s){mode}")

        outcomes: list[TargetOutcome] = []
        for index, target in enumerate(targets, start=1):
            self.logger.info(f"ℹ️  [{index}/{total}] {target}")
            outcome = await self._process_target(target, operation)
            outcomes.append(outcome)
            self._record(outcome)

            status = "✓" if outcome.success else "✗"
            self.logger.info(
                f"{status} [{index}/{total}] Completed {target} ({outcome.status.value})"
            )
            await self._run_progress_callback(index, total, target)

        result = BatchResult(operation=operation.name, outcomes=outcomes)

        elapsed = time.time() - (self._stats.start_time or time.time())
        await self._emit(
            ProcessingEvent.BATCH_COMPLETED,
            {
                "operation": operation.name,
                "total": result.total_targets,
                "succeeded": result.succeeded,
                "failed": result.failed,
                "duration": elapsed,
            },
        )

        breakdown = ""
        if self._stats.status_counts:
            breakdown = " | " + ", ".join(
                f"{status}: {count}" for status, count in self._stats.status_counts.items()
            )
        self.logger.info(
            f"ℹ️  Batch {operation.name} complete: {result.succeeded}/{result.total_targets} "
            f"succeeded, {result.failed} failed{breakdown} | "
            f"{self._stats.throttle_count} throttle(s), {self._stats.total_wait:.1f}s backoff, "
            f"{elapsed:.1f}s elapsed"
        )
        return result

    async def _process_target(self, target: str, operation: SiteOperation) -> TargetOutcome:
        """Open a session, execute the operation and release the session."""
        start_time = time.time()
        await self._emit(
            ProcessingEvent.TARGET_STARTED,
            {"target": target, "operation": operation.name},
        )

        try:
            session = await self.session_factory.connect(target)
        except Exception as e:
            error = (
                e
                if isinstance(e, ContextEstablishmentError)
                else ContextEstablishmentError(target, f"{type(e).__name__}: {str(e)[:200]}")
            )
            self.logger.error(f"✗ Could not establish session for {target}: {error}")
            return await self._finish(
                TargetOutcome(
                    target=target,
                    status=OutcomeStatus.CONTEXT_FAILED,
                    error=f"ContextEstablishmentError: {error}",
                    duration=time.time() - start_time,
                )
            )

        try:
            if self.config.dry_run:
                self.logger.info(f"[DRY-RUN] Skipping {operation.name} for {target}")
                return await self._finish(
                    TargetOutcome(
                        target=target,
                        status=OutcomeStatus.SUCCEEDED,
                        output=operation.dry_run(target),
                        duration=time.time() - start_time,
                    )
                )

            try:
                result = await self.executor.execute(operation, target, session)
            except FatalOperationError as e:
                retry_state = e.retry_state
                return await self._finish(
                    TargetOutcome(
                        target=target,
                        status=OutcomeStatus.FATAL_FAILURE,
                        error=f"FatalOperationError: {e}",
                        attempts=e.attempt,
                        total_wait=retry_state.total_wait if retry_state else 0.0,
                        duration=time.time() - start_time,
                    )
                )

            state = result.retry_state
            error = None
            if not result.success:
                error = (
                    f"RetriesExhausted: gave up after {state.attempts} attempt(s); "
                    f"last error: {result.last_error}"
                )
            return await self._finish(
                TargetOutcome(
                    target=target,
                    status=result.status,
                    output=result.output,
                    error=error,
                    attempts=state.attempts,
                    total_wait=state.total_wait,
                    duration=time.time() - start_time,
                )
            )
        finally:
            try:
                await session.close()
            except Exception as e:
                self.logger.warning(f"⚠️  Failed to close session for {target}: {e}")

    async def _finish(self, outcome: TargetOutcome) -> TargetOutcome:
        """Emit the per-target completion event and hand the outcome back."""
        event = (
            ProcessingEvent.TARGET_SUCCEEDED if outcome.success else ProcessingEvent.TARGET_FAILED
        )
        await self._emit(
            event,
            {
                "target": outcome.target,
                "status": outcome.status.value,
                "attempts": outcome.attempts,
                "duration": outcome.duration,
                "error": outcome.error,
            },
        )
        return outcome

    def _record(self, outcome: TargetOutcome) -> None:
        stats = self._stats
        stats.processed += 1
        if outcome.success:
            stats.succeeded += 1
        else:
            stats.failed += 1
        key = outcome.status.value
        stats.status_counts[key] = stats.status_counts.get(key, 0) + 1
        stats.total_wait += outcome.total_wait
        # Every attempt but a final success or fatal error was throttled
        if outcome.status is OutcomeStatus.RETRIES_EXHAUSTED:
            stats.throttle_count += outcome.attempts
        elif outcome.attempts > 1:
            stats.throttle_count += outcome.attempts - 1

    async def _run_progress_callback(self, completed: int, total: int, target: str) -> None:
        """Invoke the progress callback; its failures never affect the batch."""
        if self.progress_callback is None:
            return
        try:
            maybe_awaitable = self.progress_callback(completed, total, target)
            if inspect.isawaitable(maybe_awaitable):
                await maybe_awaitable
        except Exception as e:
            self.logger.warning(f"⚠️  Progress callback failed: {e}")

    async def _emit(self, event: ProcessingEvent, data: dict) -> None:
        if self.observers:
            await notify_observers(
                self.observers,
                event,
                data,
                self.logger,
                timeout=self.config.observer_timeout,
            )
