"""StructlogExecutionObserver — production observer that delegates to structlog."""

import structlog


class StructlogExecutionObserver:
    """Logs execution domain events to structlog.

    Tool stdout goes out at debug level and tool stderr at error level, so a
    default (info) configuration shows only what the tool complained about.

    Does NOT inherit from ExecutionObserver (structural typing via Protocol).
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def run_started(
        self,
        run_id: str,
        total_entries: int,
        parallel: bool,
        max_concurrent: int,
        comparer: str,
    ) -> None:
        self._log.info(
            "run.started",
            run_id=run_id,
            total_entries=total_entries,
            parallel=parallel,
            max_concurrent=max_concurrent if parallel else 1,
            comparer=comparer,
        )

    def run_completed(
        self,
        run_id: str,
        total_entries: int,
        compared_entries: int,
        elapsed_seconds: float,
    ) -> None:
        self._log.info(
            "run.completed",
            run_id=run_id,
            total_entries=total_entries,
            compared_entries=compared_entries,
            elapsed_seconds=round(elapsed_seconds, 2),
        )

    def entry_started(
        self, run_id: str, index: int, total: int, sample_file: str
    ) -> None:
        self._log.info(
            "entry.started",
            run_id=run_id,
            index=index,
            total=total,
            sample_file=sample_file,
        )

    def entry_finished(
        self,
        run_id: str,
        index: int,
        exit_code: int | None,
        runtime_seconds: float,
        timed_out: bool,
        compared: bool,
    ) -> None:
        self._log.info(
            "entry.finished",
            run_id=run_id,
            index=index,
            exit_code=exit_code,
            runtime_seconds=round(runtime_seconds, 3),
            timed_out=timed_out,
            compared=compared,
        )

    def entry_failed(self, run_id: str, index: int, reason: str) -> None:
        self._log.error("entry.failed", run_id=run_id, index=index, reason=reason)

    def entry_comparison_failed(self, run_id: str, index: int, reason: str) -> None:
        self._log.error(
            "entry.comparison_failed", run_id=run_id, index=index, reason=reason
        )

    def tool_stdout_line(self, run_id: str, index: int, line: str) -> None:
        self._log.debug("entry.stdout", run_id=run_id, index=index, line=line)

    def tool_stderr_line(self, run_id: str, index: int, line: str) -> None:
        self._log.error("entry.stderr", run_id=run_id, index=index, line=line)

    def report_saved(self, run_id: str, path: str) -> None:
        self._log.info("report.saved", run_id=run_id, path=path)
