"""Core components for batch runs."""

from .config import RetryConfig, RunnerConfig
from .protocols import SessionFactory, SiteSession
from .settings import Settings

__all__ = [
    "RetryConfig",
    "RunnerConfig",
    "SessionFactory",
    "SiteSession",
    "Settings",
]
