"""Metrics collection observer."""

import json
from typing import Any

from .base import BaseObserver, ProcessingEvent


class MetricsObserver(BaseObserver):
    """Collect batch metrics for reporting."""

    def __init__(self):
        """Initialize metrics collector."""
        self.metrics = {
            "targets_processed": 0,
            "targets_succeeded": 0,
            "targets_failed": 0,
            "throttles_hit": 0,
            "total_backoff_time": 0.0,
            "target_durations": [],
            "status_counts": {},
        }

    async def on_event(
        self,
        event: ProcessingEvent,
        data: dict[str, Any],
    ) -> None:
        """Collect metrics from events."""
        if event == ProcessingEvent.TARGET_SUCCEEDED:
            self.metrics["targets_processed"] += 1
            self.metrics["targets_succeeded"] += 1
            self._count_status(data)
            if "duration" in data:
                self.metrics["target_durations"].append(data["duration"])

        elif event == ProcessingEvent.TARGET_FAILED:
            self.metrics["targets_processed"] += 1
            self.metrics["targets_failed"] += 1
            self._count_status(data)
            if "duration" in data:
                self.metrics["target_durations"].append(data["duration"])

        elif event == ProcessingEvent.THROTTLED:
            self.metrics["throttles_hit"] += 1

        elif event == ProcessingEvent.BACKOFF_ENDED:
            if "duration" in data:
                self.metrics["total_backoff_time"] += data["duration"]

    def _count_status(self, data: dict[str, Any]) -> None:
        status = data.get("status")
        if status:
            counts = self.metrics["status_counts"]
            counts[status] = counts.get(status, 0) + 1

    async def get_metrics(self) -> dict[str, Any]:
        """Get collected metrics with computed statistics."""
        durations = self.metrics["target_durations"]
        processed = self.metrics["targets_processed"]
        return {
            **self.metrics,
            "avg_target_duration": sum(durations) / len(durations) if durations else 0,
            "success_rate": (
                self.metrics["targets_succeeded"] / processed if processed > 0 else 0
            ),
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self.__init__()

    async def export_json(self) -> str:
        """Export metrics as JSON string.

        Returns:
            JSON string containing all metrics and computed statistics
        """
        metrics = await self.get_metrics()
        export_data = {
            **metrics,
            "target_durations_count": len(metrics.get("target_durations", [])),
        }
        export_data.pop("target_durations", None)
        return json.dumps(export_data, indent=2)

    async def export_dict(self) -> dict[str, Any]:
        """Export metrics as a dictionary."""
        return await self.get_metrics()
