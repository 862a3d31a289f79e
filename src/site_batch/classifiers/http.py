"""HTTP error classification for httpx-backed sessions."""

import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

import httpx

from ..strategies.errors import DefaultErrorClassifier, ErrorInfo

# Status codes the remote service uses to ask callers to back off
THROTTLE_STATUS_CODES = (429, 503)


def parse_retry_after(value: str | None, now: datetime | None = None) -> float | None:
    """
    Parse a Retry-After header value into seconds.

    Accepts delta-seconds ("120") or an HTTP date. Returns None when the
    header is missing or unparseable; dates in the past yield 0.0.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        # "inf" and "nan" parse as floats but are not usable waits
        return max(0.0, seconds) if math.isfinite(seconds) else None

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0.0, (when - now).total_seconds())


class HttpErrorClassifier(DefaultErrorClassifier):
    """Classifies httpx errors, treating 429 and 503 responses as throttling."""

    def classify(self, exception: Exception) -> ErrorInfo:
        if isinstance(exception, httpx.HTTPStatusError):
            status = exception.response.status_code
            if status in THROTTLE_STATUS_CODES:
                return ErrorInfo(
                    is_throttled=True,
                    error_category=f"http_{status}",
                    suggested_wait=parse_retry_after(
                        exception.response.headers.get("Retry-After")
                    ),
                )
            return ErrorInfo(is_throttled=False, error_category=f"http_{status}")

        if isinstance(exception, httpx.TimeoutException):
            return ErrorInfo(is_throttled=False, error_category="timeout")

        if isinstance(exception, httpx.TransportError):
            return ErrorInfo(is_throttled=False, error_category="transport_error")

        return super().classify(exception)
