"""EntryOutcome and RunSummary domain value objects."""

from pathlib import Path

from pydantic import BaseModel, Field


class EntryOutcome(BaseModel, frozen=True):
    """Completion signal of one WorkItem.

    exit_code is None when the tool never ran (launch failure or an invalid
    command template). error carries the launch or comparison failure message.
    """

    index: int = Field(ge=1)
    sample_file: str
    exit_code: int | None = None
    runtime_seconds: float = Field(default=0.0, ge=0)
    timed_out: bool = False
    compared: bool = False
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and not self.timed_out and self.error is None


class RunSummary(BaseModel, frozen=True):
    """Everything the caller needs after a run: per-entry outcomes and the report location."""

    run_id: str = Field(min_length=1)
    total_entries: int = Field(ge=0)
    elapsed_seconds: float = Field(ge=0)
    outcomes: list[EntryOutcome]
    report_path: Path

    @property
    def compared_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.compared)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.succeeded)
