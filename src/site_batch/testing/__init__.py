"""Testing utilities for site_batch."""

from .mocks import MockSessionFactory, MockSiteSession

__all__ = ["MockSessionFactory", "MockSiteSession"]
