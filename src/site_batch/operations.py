"""Site operations that can be applied across a batch of targets.

Each operation is a single unit of remote work: it is invoked against an
established session and returns the remote payload, or raises. Operations
hold only their immutable parameters, so one instance can be reused for
every target and every retry attempt.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from .core.protocols import SiteSession
    from .core.settings import Settings


class VersionPolicy(BaseModel):
    """File version retention policy applied by SetPolicy."""

    model_config = ConfigDict(frozen=True)

    auto_expiration: bool = True
    major_version_limit: int | None = Field(default=None, ge=1)
    expire_after_days: int | None = Field(default=None, ge=0)
    apply_to_existing_libraries: bool = False

    @model_validator(mode="after")
    def _check_limits(self) -> "VersionPolicy":
        if not self.auto_expiration and self.major_version_limit is None:
            raise ValueError(
                "major_version_limit is required when auto_expiration is disabled"
            )
        if self.auto_expiration and (
            self.major_version_limit is not None or self.expire_after_days is not None
        ):
            raise ValueError(
                "major_version_limit and expire_after_days cannot be combined "
                "with auto_expiration"
            )
        return self


class CleanupJobSpec(BaseModel):
    """Parameters for a version cleanup job."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["automatic", "delete_older_than_days", "count_limits"] = "automatic"
    delete_before_days: int | None = Field(default=None, ge=1)
    major_version_limit: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_mode(self) -> "CleanupJobSpec":
        if self.mode == "delete_older_than_days" and self.delete_before_days is None:
            raise ValueError("delete_before_days is required for delete_older_than_days")
        if self.mode == "count_limits" and self.major_version_limit is None:
            raise ValueError("major_version_limit is required for count_limits")
        return self


class SiteOperation(ABC):
    """
    Abstract base class for site operations.

    The executor calls invoke() once per attempt, so implementations must be
    idempotent and must not keep state between calls.
    """

    name: str = ""
    description: str = ""

    @abstractmethod
    async def invoke(self, session: "SiteSession") -> Any:
        """
        Perform the remote call against an established session.

        Args:
            session: Session for the current target

        Returns:
            The remote payload

        Raises:
            ThrottledError or a provider error to trigger backoff, or any
            other exception to fail the target
        """
        pass

    def dry_run(self, target: str) -> dict[str, Any]:
        """Placeholder payload returned instead of invoking in dry-run mode."""
        return {"dry_run": True, "operation": self.name, "target": target}

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class GetPolicy(SiteOperation):
    name = "get-policy"
    description = "Read the version policy"

    async def invoke(self, session: "SiteSession") -> Any:
        return await session.get_policy()


class SetPolicy(SiteOperation):
    """Apply a version policy to every target."""

    name = "set-policy"
    description = "Apply the configured version policy"

    def __init__(self, policy: VersionPolicy):
        self.policy = policy

    async def invoke(self, session: "SiteSession") -> Any:
        return await session.set_policy(self.policy)

    def dry_run(self, target: str) -> dict[str, Any]:
        return {**super().dry_run(target), "policy": self.policy.model_dump()}

    def __repr__(self) -> str:
        return f"SetPolicy(policy={self.policy!r})"


class GetPolicyStatus(SiteOperation):
    name = "get-policy-status"
    description = "Read the policy application status"

    async def invoke(self, session: "SiteSession") -> Any:
        return await session.get_policy_status()


class CreateCleanupJob(SiteOperation):
    """Queue a version cleanup job on every target."""

    name = "create-cleanup-job"
    description = "Create a version cleanup job"

    def __init__(self, job: CleanupJobSpec):
        self.job = job

    async def invoke(self, session: "SiteSession") -> Any:
        return await session.create_cleanup_job(self.job)

    def dry_run(self, target: str) -> dict[str, Any]:
        return {**super().dry_run(target), "job": self.job.model_dump()}

    def __repr__(self) -> str:
        return f"CreateCleanupJob(job={self.job!r})"


class GetCleanupJobStatus(SiteOperation):
    name = "get-cleanup-job-status"
    description = "Read the cleanup job status"

    async def invoke(self, session: "SiteSession") -> Any:
        return await session.get_cleanup_job_status()


# Menu key -> operation name, in menu order
OPERATIONS: dict[str, str] = {
    "1": GetPolicy.name,
    "2": SetPolicy.name,
    "3": GetPolicyStatus.name,
    "4": CreateCleanupJob.name,
    "5": GetCleanupJobStatus.name,
}

OPERATION_DESCRIPTIONS: dict[str, str] = {
    op.name: op.description
    for op in (GetPolicy, SetPolicy, GetPolicyStatus, CreateCleanupJob, GetCleanupJobStatus)
}


def build_operation(name: str, settings: "Settings") -> SiteOperation:
    """
    Construct the named operation, taking its parameters from settings.

    Raises:
        ValueError: Unknown operation name or invalid parameters
    """
    if name == GetPolicy.name:
        return GetPolicy()
    if name == SetPolicy.name:
        return SetPolicy(
            VersionPolicy(
                auto_expiration=settings.policy_auto_expiration,
                major_version_limit=settings.policy_major_version_limit,
                expire_after_days=settings.policy_expire_after_days,
                apply_to_existing_libraries=settings.policy_apply_to_existing_libraries,
            )
        )
    if name == GetPolicyStatus.name:
        return GetPolicyStatus()
    if name == CreateCleanupJob.name:
        return CreateCleanupJob(
            CleanupJobSpec(
                mode=settings.cleanup_mode,  # type: ignore[arg-type]
                delete_before_days=settings.cleanup_delete_before_days,
                major_version_limit=settings.cleanup_major_version_limit,
            )
        )
    if name == GetCleanupJobStatus.name:
        return GetCleanupJobStatus()

    raise ValueError(
        f"Unknown operation {name!r}. "
        f"Choose one of: {', '.join(OPERATION_DESCRIPTIONS)}."
    )
