"""Observers for monitoring batch events."""

from .base import BaseObserver, BatchObserver, ProcessingEvent, notify_observers
from .metrics import MetricsObserver

__all__ = ["BatchObserver", "BaseObserver", "ProcessingEvent", "MetricsObserver", "notify_observers"]
