"""Error classification and backoff strategies."""

from .backoff import BackoffStrategy, ExponentialBackoffStrategy, FixedDelayStrategy
from .errors import (
    ContextEstablishmentError,
    DefaultErrorClassifier,
    ErrorClassifier,
    ErrorInfo,
    FatalOperationError,
    SiteBatchError,
    TargetListError,
    ThrottledError,
)

__all__ = [
    "BackoffStrategy",
    "ExponentialBackoffStrategy",
    "FixedDelayStrategy",
    "ErrorClassifier",
    "ErrorInfo",
    "DefaultErrorClassifier",
    "SiteBatchError",
    "ThrottledError",
    "FatalOperationError",
    "ContextEstablishmentError",
    "TargetListError",
]
