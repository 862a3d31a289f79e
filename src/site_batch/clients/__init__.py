"""Remote session collaborators."""

from .rest import ClientCredentials, RestSessionFactory, RestSiteSession

__all__ = ["ClientCredentials", "RestSessionFactory", "RestSiteSession"]
