"""AccumulatingComparer — shared record-keeping and persistence for every comparer variant."""

import os
import time
from abc import ABC, abstractmethod
from pathlib import Path

from ccx_tester.comparison.domain.compare_data import CompareData, ResultData
from ccx_tester.comparison.domain.report import ComparisonRecord, Report
from ccx_tester.comparison.infrastructure.errors import ComparisonError, ReportSaveError


class AccumulatingComparer(ABC):
    """Base for comparers that differ only in how they produce a diff.

    Subclasses implement `_diff`, returning an empty list for equivalent
    files. Everything else (file checks, record construction, the locked
    Report and report persistence) lives here.
    """

    def __init__(self) -> None:
        self._report = Report()

    @property
    def report(self) -> Report:
        return self._report

    async def compare_and_accumulate(self, data: CompareData) -> None:
        """
        Diff data.produced_file against data.expected_file and append one record.

        Raises:
            ComparisonError: if either file is missing or unreadable, or the
                diff mechanism fails.
        """
        _ensure_readable(path=data.expected_file, role="reference")
        _ensure_readable(path=data.produced_file, role="produced")

        diff_lines = await self._diff(
            expected=data.expected_file, produced=data.produced_file
        )
        self._report.add(
            ComparisonRecord(
                command=data.command,
                sample_file=str(data.sample_file),
                runtime_seconds=data.runtime_seconds,
                identical=not diff_lines,
                diff_lines=diff_lines,
            )
        )

    def report_file_name(self) -> str:
        return f"Report_{time.time_ns()}.txt"

    def save_report(self, folder: Path, result: ResultData) -> Path:
        """
        Write the version header and the accumulated body to a new file in folder.

        Raises:
            ReportSaveError: if the file cannot be written.
        """
        path = folder / self.report_file_name()
        header = (
            f"Report generated for version {result.tool_version}\n"
            f"Generated at {result.generated_at.isoformat(timespec='seconds')}\n"
            "\n"
        )
        try:
            path.write_text(header + self._report.render(), encoding="utf-8")
        except OSError as exc:
            raise ReportSaveError(path=path, reason=str(exc)) from exc
        return path

    @abstractmethod
    async def _diff(self, expected: Path, produced: Path) -> list[str]: ...


def _ensure_readable(path: Path, role: str) -> None:
    if not path.is_file():
        raise ComparisonError(f"{role} file not found: {path}")
    if not os.access(path, os.R_OK):
        raise ComparisonError(f"{role} file is not readable: {path}")
