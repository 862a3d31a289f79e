"""Provider-specific error classifiers."""

from .http import HttpErrorClassifier, parse_retry_after

__all__ = ["HttpErrorClassifier", "parse_retry_after"]
