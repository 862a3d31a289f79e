"""Collaborator protocols for the batch runner."""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..operations import CleanupJobSpec, VersionPolicy


class SiteSession(Protocol):
    """Authenticated session against one site. Owned by a single batch iteration."""

    target: str

    async def get_policy(self) -> Any:
        """Read the site's version policy."""
        ...

    async def set_policy(self, policy: "VersionPolicy") -> Any:
        """Apply a version policy to the site."""
        ...

    async def get_policy_status(self) -> Any:
        """Read the progress of the most recent policy application."""
        ...

    async def create_cleanup_job(self, job: "CleanupJobSpec") -> Any:
        """Queue a version cleanup job on the site."""
        ...

    async def get_cleanup_job_status(self) -> Any:
        """Read the status of the site's cleanup job."""
        ...

    async def close(self) -> None:
        """Release the session."""
        ...


class SessionFactory(Protocol):
    """Establishes a session for a target, or raises if it cannot."""

    async def connect(self, target: str) -> SiteSession:
        """Open a session scoped to the given target."""
        ...
