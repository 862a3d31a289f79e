"""Error taxonomy and classification for remote site operations."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..base import RetryState

# Common throttling message patterns
THROTTLE_PATTERNS = ("too many requests", "throttl", "server busy")

# Status codes only count when they read as a status, not as part of a URL or id
THROTTLE_STATUS_RE = re.compile(
    r"\b(?:http|status)(?: code)?[\s:=]*(?:429|503)\b", re.IGNORECASE
)


class SiteBatchError(Exception):
    """Base class for all site batch exceptions."""


class ThrottledError(SiteBatchError):
    """
    Raised by an operation when the remote service asks the caller to slow down.

    retry_after is the server-suggested wait in seconds, when one was given.
    """

    def __init__(self, message: str = "throttled", retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class FatalOperationError(SiteBatchError):
    """Raised when an operation fails with a non-throttling error. Not retried."""

    def __init__(
        self,
        target: str,
        attempt: int,
        message: str,
        retry_state: "RetryState | None" = None,
    ):
        super().__init__(f"{target}: attempt {attempt} failed: {message}")
        self.target = target
        self.attempt = attempt
        self.retry_state = retry_state


class ContextEstablishmentError(SiteBatchError):
    """Raised when a session for a target cannot be opened."""

    def __init__(self, target: str, message: str):
        super().__init__(f"{target}: {message}")
        self.target = target


class TargetListError(SiteBatchError):
    """Raised when the target list cannot be read. Fatal to the whole run."""


@dataclass
class ErrorInfo:
    """Structured information about an operation error."""

    is_throttled: bool
    error_category: str
    suggested_wait: float | None = None


class ErrorClassifier(ABC):
    """Abstract base class for classifying operation errors."""

    @abstractmethod
    def classify(self, exception: Exception) -> ErrorInfo:
        """
        Classify an exception raised by an operation attempt.

        Args:
            exception: The exception to classify

        Returns:
            ErrorInfo with classification details
        """
        pass


class DefaultErrorClassifier(ErrorClassifier):
    """Classifier that recognizes ThrottledError and common throttle messages."""

    def _matches_throttle(self, error_str: str) -> bool:
        """Return True if the error string looks like a throttle signal."""
        lowered = error_str.lower()
        if any(pattern in lowered for pattern in THROTTLE_PATTERNS):
            return True
        return THROTTLE_STATUS_RE.search(error_str) is not None

    def classify(self, exception: Exception) -> ErrorInfo:
        """Classify errors; anything that is not throttling is fatal."""
        if isinstance(exception, ThrottledError):
            return ErrorInfo(
                is_throttled=True,
                error_category="throttled",
                suggested_wait=exception.retry_after,
            )

        # Message patterns carry no wait hint, so backoff applies
        if self._matches_throttle(str(exception)):
            return ErrorInfo(is_throttled=True, error_category="throttled")

        if isinstance(exception, TimeoutError):
            return ErrorInfo(is_throttled=False, error_category="timeout")

        if isinstance(exception, ConnectionError):
            return ErrorInfo(is_throttled=False, error_category="connection_error")

        return ErrorInfo(is_throttled=False, error_category=type(exception).__name__)
