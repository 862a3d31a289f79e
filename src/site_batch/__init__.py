"""Throttle-aware batch operations across remote sites.

This package applies one administrative operation (read or set a version
policy, read policy status, create or check a cleanup job) to each site in
a list, one site at a time, backing off whenever the remote service
throttles.

Key features:
- Strictly sequential per-site orchestration with per-site failure isolation
- Throttle detection with server-suggested waits or exponential backoff
- Pluggable error classification and backoff strategies
- Observer pattern for monitoring
- Configuration-based setup

Example:
    >>> from site_batch import GetPolicy, RunnerConfig, SiteBatchOrchestrator
    >>> from site_batch.classifiers import HttpErrorClassifier
    >>>
    >>> orchestrator = SiteBatchOrchestrator(
    ...     session_factory,
    ...     config=RunnerConfig(),
    ...     error_classifier=HttpErrorClassifier(),
    ... )
    >>> result = await orchestrator.run_batch(targets, GetPolicy())
"""

# Core classes
from .base import (
    BatchResult,
    ExecutionResult,
    OutcomeStatus,
    ProcessingStats,
    RetryState,
    TargetOutcome,
)

# Classifiers
from .classifiers import HttpErrorClassifier

# Configuration and collaborator contracts
from .core import RetryConfig, RunnerConfig, SessionFactory, Settings, SiteSession

# Executor and orchestrator
from .executor import ThrottleAwareExecutor

# Observers
from .observers import BaseObserver, BatchObserver, MetricsObserver, ProcessingEvent

# Operations
from .operations import (
    CleanupJobSpec,
    CreateCleanupJob,
    GetCleanupJobStatus,
    GetPolicy,
    GetPolicyStatus,
    SetPolicy,
    SiteOperation,
    VersionPolicy,
    build_operation,
)
from .orchestrator import SiteBatchOrchestrator

# Error taxonomy and backoff strategies
from .strategies import (
    BackoffStrategy,
    ContextEstablishmentError,
    DefaultErrorClassifier,
    ErrorClassifier,
    ErrorInfo,
    ExponentialBackoffStrategy,
    FatalOperationError,
    FixedDelayStrategy,
    SiteBatchError,
    TargetListError,
    ThrottledError,
)
from .targets import load_targets

__all__ = [
    # Core
    "BatchResult",
    "ExecutionResult",
    "OutcomeStatus",
    "ProcessingStats",
    "RetryState",
    "TargetOutcome",
    # Configuration
    "RetryConfig",
    "RunnerConfig",
    "Settings",
    "SessionFactory",
    "SiteSession",
    # Operations
    "SiteOperation",
    "GetPolicy",
    "SetPolicy",
    "GetPolicyStatus",
    "CreateCleanupJob",
    "GetCleanupJobStatus",
    "VersionPolicy",
    "CleanupJobSpec",
    "build_operation",
    # Errors
    "SiteBatchError",
    "ThrottledError",
    "FatalOperationError",
    "ContextEstablishmentError",
    "TargetListError",
    # Classification and backoff
    "ErrorClassifier",
    "ErrorInfo",
    "DefaultErrorClassifier",
    "HttpErrorClassifier",
    "BackoffStrategy",
    "ExponentialBackoffStrategy",
    "FixedDelayStrategy",
    # Observers
    "BatchObserver",
    "BaseObserver",
    "MetricsObserver",
    "ProcessingEvent",
    # Runner
    "ThrottleAwareExecutor",
    "SiteBatchOrchestrator",
    "load_targets",
]

__version__ = "0.1.0"
