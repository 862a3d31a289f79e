"""Observer system for batch events."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from typing import Any


class ProcessingEvent(Enum):
    """Events that can be observed during a batch run."""

    BATCH_STARTED = "batch_started"
    BATCH_COMPLETED = "batch_completed"
    TARGET_STARTED = "target_started"
    TARGET_SUCCEEDED = "target_succeeded"
    TARGET_FAILED = "target_failed"
    THROTTLED = "throttled"
    BACKOFF_STARTED = "backoff_started"
    BACKOFF_ENDED = "backoff_ended"


class BatchObserver(ABC):
    """Abstract base class for batch event observers."""

    @abstractmethod
    async def on_event(
        self,
        event: ProcessingEvent,
        data: dict[str, Any],
    ) -> None:
        """
        Handle batch event.

        Args:
            event: The event type
            data: Event-specific data
        """
        pass


class BaseObserver(BatchObserver):
    """Base observer with no-op implementation."""

    async def on_event(
        self,
        event: ProcessingEvent,
        data: dict[str, Any],
    ) -> None:
        """Default: do nothing."""
        pass


async def notify_observers(
    observers: Sequence[BatchObserver],
    event: ProcessingEvent,
    data: dict[str, Any] | None,
    logger: logging.Logger,
    timeout: float = 5.0,
) -> None:
    """Deliver an event to every observer. Observer failures are logged, never raised."""
    event_data = data or {}
    for observer in observers:
        try:
            await asyncio.wait_for(observer.on_event(event, event_data), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"⚠️  Observer callback timed out after {timeout:.0f}s for event {event.name}"
            )
        except Exception as e:
            logger.warning(f"⚠️  Observer error: {e}")
