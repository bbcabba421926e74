"""Report accumulator — the comparison records gathered over one run."""

import threading
from datetime import timedelta

from pydantic import BaseModel, Field

NO_DIFFERENCES = "No differences found."


class ComparisonRecord(BaseModel, frozen=True):
    """One entry's comparison outcome; diff_lines is empty when identical."""

    command: str
    sample_file: str
    runtime_seconds: float = Field(ge=0)
    identical: bool
    diff_lines: list[str] = Field(default_factory=list)

    def render(self) -> str:
        lines = [
            f"Time needed for this entry: {timedelta(seconds=self.runtime_seconds)}",
            f"Used command: {self.command}",
            f"Sample file: {self.sample_file}",
        ]
        if self.identical:
            lines.append(NO_DIFFERENCES)
        else:
            lines.extend(self.diff_lines)
        return "\n".join(lines) + "\n"


class Report:
    """Thread-safe, append-only collection of ComparisonRecords.

    Records are appended whole under a lock, so records from concurrently
    finishing entries never interleave. Iteration order is append order.
    """

    def __init__(self) -> None:
        self._records: list[ComparisonRecord] = []
        self._lock = threading.Lock()

    def add(self, record: ComparisonRecord) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[ComparisonRecord]:
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def render(self) -> str:
        """Return the report body with records separated by a blank line."""
        return "\n".join(record.render() for record in self.records)
