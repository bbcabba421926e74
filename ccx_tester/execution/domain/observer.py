"""Observer port for the execution domain — defines events in domain language."""

from typing import Protocol


class ExecutionObserver(Protocol):
    def run_started(
        self,
        run_id: str,
        total_entries: int,
        parallel: bool,
        max_concurrent: int,
        comparer: str,
    ) -> None: ...

    def run_completed(
        self,
        run_id: str,
        total_entries: int,
        compared_entries: int,
        elapsed_seconds: float,
    ) -> None: ...

    def entry_started(
        self, run_id: str, index: int, total: int, sample_file: str
    ) -> None: ...

    def entry_finished(
        self,
        run_id: str,
        index: int,
        exit_code: int | None,
        runtime_seconds: float,
        timed_out: bool,
        compared: bool,
    ) -> None: ...

    def entry_failed(self, run_id: str, index: int, reason: str) -> None: ...

    def entry_comparison_failed(self, run_id: str, index: int, reason: str) -> None: ...

    def tool_stdout_line(self, run_id: str, index: int, line: str) -> None: ...

    def tool_stderr_line(self, run_id: str, index: int, line: str) -> None: ...

    def report_saved(self, run_id: str, path: str) -> None: ...
