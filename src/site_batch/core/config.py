"""Configuration management for the batch runner."""

from dataclasses import dataclass, field


@dataclass
class RetryConfig:
    """Configuration for throttle retry behavior."""

    max_attempts: int = 5
    initial_wait: float = 30.0
    exponential_base: float = 2.0
    max_wait: float | None = None  # Caps computed waits only, never server hints

    def validate(self) -> None:
        """Validate retry configuration."""
        if self.max_attempts < 1:
            raise ValueError(
                f"max_attempts must be >= 1 (got {self.max_attempts}). "
                f"Set retry.max_attempts to a positive integer."
            )
        if self.initial_wait < 0:
            raise ValueError(
                f"initial_wait must be >= 0 (got {self.initial_wait}). "
                f"Set retry.initial_wait to a non-negative number in seconds."
            )
        if self.exponential_base < 1:
            raise ValueError(
                f"exponential_base must be >= 1 (got {self.exponential_base}). "
                f"Set retry.exponential_base to 1.0 or higher (typical: 2.0)."
            )
        if self.max_wait is not None and self.max_wait < self.initial_wait:
            raise ValueError(
                f"max_wait must be >= initial_wait (got max_wait={self.max_wait}, "
                f"initial_wait={self.initial_wait}). "
                f"Set retry.max_wait to None for no cap, or at least retry.initial_wait."
            )


@dataclass
class RunnerConfig:
    """Complete configuration for a batch run."""

    retry: RetryConfig = field(default_factory=RetryConfig)

    # Skip remote operation calls; sessions are still established
    dry_run: bool = False

    # Seconds to wait on each observer callback
    observer_timeout: float = 5.0

    def validate(self) -> None:
        """Validate complete configuration."""
        if self.observer_timeout <= 0:
            raise ValueError(
                f"observer_timeout must be > 0 (got {self.observer_timeout}). "
                f"Set config.observer_timeout to a positive number in seconds."
            )

        self.retry.validate()
