"""Execution configuration models."""

from pydantic import BaseModel, Field


class RetryConfig(BaseModel, frozen=True):
    """Bounded retry policy for transient tool launch failures."""

    max_attempts: int = Field(default=3, ge=1)
    initial_backoff_seconds: float = Field(default=1.0, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1)


class ExecutionConfig(BaseModel, frozen=True):
    parallel: bool = True
    max_concurrent: int = Field(default=4, ge=1)
    entry_timeout_seconds: float | None = Field(default=None, gt=0)
    extra_arguments: list[str] = Field(default_factory=lambda: ["--no_progress_bar"])
    output_flag: str = Field(default="-o", min_length=1)
    launch_retry: RetryConfig = Field(default_factory=RetryConfig)
