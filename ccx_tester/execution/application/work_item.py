"""WorkItem — runs one catalog entry through the tool and, on success, the comparer."""

import re
import shlex
from pathlib import Path

from ccx_tester.catalog.domain.entry import TestEntry
from ccx_tester.comparison.domain.compare_data import CompareData
from ccx_tester.execution.domain.context import RunContext
from ccx_tester.execution.domain.outcome import EntryOutcome

_PATH_SEPARATORS = re.compile(r"[\\/:]+")


def scratch_file_name(entry: TestEntry, index: int) -> str:
    """Name of the produced artifact for entry, unique within a run.

    The catalog index keeps entries with identical reference basenames apart;
    the flattened reference path keeps the name recognisable.
    """
    flattened = _PATH_SEPARATORS.sub("__", entry.expected_result_file.strip("\\/"))
    return f"{index:04d}_{flattened}"


def build_arguments(
    entry: TestEntry,
    produced_file: Path,
    sample_file: Path,
    extra_arguments: tuple[str, ...],
    output_flag: str,
) -> list[str]:
    """Expand an entry's flag template into the full argument list for the tool.

    Raises:
        ValueError: if entry.command has unbalanced quoting.
    """
    return [
        *shlex.split(entry.command),
        *extra_arguments,
        output_flag,
        str(produced_file),
        str(sample_file),
    ]


class WorkItem:
    """Executes the run-then-compare sequence for single entries of one run.

    `process` never raises for per-entry problems: launch failures, non-zero
    exits, timeouts and comparison errors are reported through the observer
    and folded into the returned EntryOutcome. Exactly one outcome is
    returned per call, together with one "Starting" and one "Finished"
    progress message.
    """

    def __init__(self, context: RunContext) -> None:
        self._context = context

    async def process(self, entry: TestEntry, index: int) -> EntryOutcome:
        ctx = self._context
        ctx.progress.show_progress_message(
            f"Starting with entry {index} of {ctx.total}"
        )
        ctx.observer.entry_started(
            run_id=ctx.run_id,
            index=index,
            total=ctx.total,
            sample_file=entry.sample_file,
        )

        sample_file = ctx.sample_folder / entry.sample_file
        expected_file = ctx.reference_folder / entry.expected_result_file
        produced_file = ctx.scratch_folder / scratch_file_name(entry=entry, index=index)

        exit_code: int | None = None
        runtime_seconds = 0.0
        timed_out = False
        compared = False
        error: str | None = None

        try:
            arguments = build_arguments(
                entry=entry,
                produced_file=produced_file,
                sample_file=sample_file,
                extra_arguments=ctx.extra_arguments,
                output_flag=ctx.output_flag,
            )
            # A leftover artifact from an earlier run must not be compared.
            produced_file.unlink(missing_ok=True)
            run_data = await ctx.runner.run(
                arguments=arguments,
                on_stdout_line=lambda line: ctx.observer.tool_stdout_line(
                    run_id=ctx.run_id, index=index, line=line
                ),
                on_stderr_line=lambda line: self._on_stderr_line(
                    index=index, line=line
                ),
            )
        except Exception as exc:  # noqa: BLE001
            error = str(exc)
            ctx.observer.entry_failed(run_id=ctx.run_id, index=index, reason=error)
        else:
            exit_code = run_data.exit_code
            runtime_seconds = run_data.runtime_seconds
            timed_out = run_data.timed_out
            if exit_code == 0 and not timed_out:
                try:
                    await ctx.comparer.compare_and_accumulate(
                        CompareData(
                            produced_file=produced_file,
                            expected_file=expected_file,
                            sample_file=sample_file,
                            command=entry.command,
                            runtime_seconds=runtime_seconds,
                        )
                    )
                    compared = True
                except Exception as exc:  # noqa: BLE001
                    error = str(exc)
                    ctx.observer.entry_comparison_failed(
                        run_id=ctx.run_id, index=index, reason=error
                    )

        ctx.progress.show_progress_message(
            f"Finished entry {index} with exit code: {exit_code}"
        )
        ctx.observer.entry_finished(
            run_id=ctx.run_id,
            index=index,
            exit_code=exit_code,
            runtime_seconds=runtime_seconds,
            timed_out=timed_out,
            compared=compared,
        )
        return EntryOutcome(
            index=index,
            sample_file=entry.sample_file,
            exit_code=exit_code,
            runtime_seconds=runtime_seconds,
            timed_out=timed_out,
            compared=compared,
            error=error,
        )

    def _on_stderr_line(self, index: int, line: str) -> None:
        if line.strip():
            self._context.observer.tool_stderr_line(
                run_id=self._context.run_id, index=index, line=line
            )
