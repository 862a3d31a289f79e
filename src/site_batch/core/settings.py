"""Environment-driven settings for the command line tool."""

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import RetryConfig, RunnerConfig


class Settings(BaseSettings):
    """
    Runtime settings, read from SITE_BATCH_* environment variables or a .env file.

    Credentials are only needed for real runs; dry runs and tests can leave them empty.
    """

    # Credentials
    client_id: str = ""
    tenant: str = ""
    access_token: SecretStr = SecretStr("")

    # Input and logging
    sites_file: str = "sites.txt"
    log_file: str | None = "site_batch.log"
    log_level: str = "INFO"

    # Throttle handling
    max_retries: int = Field(default=5, ge=1)
    initial_backoff: float = Field(default=30.0, ge=0)
    max_backoff: float | None = None
    request_timeout: float = Field(default=60.0, gt=0)

    # SetPolicy parameters
    policy_auto_expiration: bool = True
    policy_major_version_limit: int | None = None
    policy_expire_after_days: int | None = None
    policy_apply_to_existing_libraries: bool = False

    # CreateCleanupJob parameters
    cleanup_mode: str = "automatic"
    cleanup_delete_before_days: int | None = None
    cleanup_major_version_limit: int | None = None

    model_config = SettingsConfigDict(
        env_prefix="SITE_BATCH_", env_file=".env", extra="ignore"
    )

    @model_validator(mode="after")
    def _check_retry(self) -> "Settings":
        # max_backoff must not undercut initial_backoff
        self.retry_config().validate()
        return self

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_attempts=self.max_retries,
            initial_wait=self.initial_backoff,
            max_wait=self.max_backoff,
        )

    def runner_config(self, dry_run: bool = False) -> RunnerConfig:
        return RunnerConfig(retry=self.retry_config(), dry_run=dry_run)
