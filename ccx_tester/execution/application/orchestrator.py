"""Orchestrator — validates a run, dispatches WorkItems and persists the report."""

import asyncio
import os
import shutil
import time
import uuid
from datetime import date, datetime
from pathlib import Path

from ccx_tester.catalog.domain.entry import TestEntry
from ccx_tester.comparison.domain.compare_data import ResultData
from ccx_tester.comparison.domain.comparer import ComparerFactory
from ccx_tester.config.domain.config import HarnessConfig
from ccx_tester.config.infrastructure.errors import (
    ConfigValidationError,
    ReportFolderNotWritableError,
    SampleFolderNotFoundError,
    ToolNotFoundError,
)
from ccx_tester.execution.application.work_item import WorkItem
from ccx_tester.execution.domain.context import RunContext
from ccx_tester.execution.domain.observer import ExecutionObserver
from ccx_tester.execution.domain.outcome import EntryOutcome, RunSummary
from ccx_tester.execution.domain.progress import NullProgressReporter, ProgressReporter
from ccx_tester.runner.domain.runner import RunnerFactory


class Orchestrator:
    """Runs a whole catalog against the configured tool and writes one report.

    Like the WorkItem it drives, the orchestrator only knows ports: runners
    and comparers come from factories, so tests can swap in fakes without
    touching the scheduling logic.
    """

    def __init__(
        self,
        observer: ExecutionObserver,
        runner_factory: RunnerFactory,
        comparer_factory: ComparerFactory,
        progress_reporter: ProgressReporter | None = None,
    ) -> None:
        self._observer = observer
        self._runner_factory = runner_factory
        self._comparer_factory = comparer_factory
        self._progress = progress_reporter or NullProgressReporter()

    async def run_all(self, entries: list[TestEntry], config: HarnessConfig) -> RunSummary:
        """
        Execute every entry and persist the accumulated report.

        All configuration checks happen before the first entry is dispatched.
        Entries run in catalog order when config.execution.parallel is false;
        otherwise at most max_concurrent run at once, in no particular order.

        Raises:
            ToolNotFoundError: if the tool is missing or not executable.
            SampleFolderNotFoundError: if the sample root is not a directory.
            ReportFolderNotWritableError: if reports cannot be written.
            ComparerNotSupportedError: if the comparer name is unknown.
            ConfigValidationError: if the scratch folder cannot be created.
            ReportSaveError: if the final report cannot be written.
        """
        tool_path = _resolve_tool_path(config.tool_path)
        _check_sample_folder(config.sample_folder)
        _prepare_report_folder(config.report_folder)
        comparer = self._comparer_factory.create(config.comparer)
        _prepare_scratch_folder(config.scratch_folder)

        execution = config.execution
        run_id = str(uuid.uuid4())
        context = RunContext(
            run_id=run_id,
            total=len(entries),
            runner=self._runner_factory.create(
                tool_path=tool_path,
                timeout_seconds=execution.entry_timeout_seconds,
            ),
            comparer=comparer,
            observer=self._observer,
            progress=self._progress,
            sample_folder=config.sample_folder,
            reference_folder=config.reference_folder,
            scratch_folder=config.scratch_folder,
            extra_arguments=tuple(execution.extra_arguments),
            output_flag=execution.output_flag,
        )

        self._observer.run_started(
            run_id=run_id,
            total_entries=len(entries),
            parallel=execution.parallel,
            max_concurrent=execution.max_concurrent,
            comparer=config.comparer,
        )
        started_at = time.monotonic()

        work_item = WorkItem(context=context)
        if execution.parallel:
            outcomes = await _run_parallel(
                work_item=work_item,
                entries=entries,
                max_concurrent=execution.max_concurrent,
            )
        else:
            outcomes = await _run_sequential(work_item=work_item, entries=entries)

        elapsed_seconds = time.monotonic() - started_at
        self._observer.run_completed(
            run_id=run_id,
            total_entries=len(entries),
            compared_entries=sum(1 for outcome in outcomes if outcome.compared),
            elapsed_seconds=elapsed_seconds,
        )

        report_path = comparer.save_report(
            folder=config.report_folder,
            result=ResultData(
                tool_version=f"{tool_path} {date.today().isoformat()}",
                generated_at=datetime.now(),
            ),
        )
        self._observer.report_saved(run_id=run_id, path=str(report_path))

        return RunSummary(
            run_id=run_id,
            total_entries=len(entries),
            elapsed_seconds=elapsed_seconds,
            outcomes=outcomes,
            report_path=report_path,
        )


async def _run_sequential(
    work_item: WorkItem, entries: list[TestEntry]
) -> list[EntryOutcome]:
    return [
        await work_item.process(entry=entry, index=index)
        for index, entry in enumerate(entries, start=1)
    ]


async def _run_parallel(
    work_item: WorkItem, entries: list[TestEntry], max_concurrent: int
) -> list[EntryOutcome]:
    """Run every entry with at most max_concurrent in flight; returns outcomes sorted by index."""
    sem = asyncio.Semaphore(max_concurrent)
    outcomes: list[EntryOutcome] = []

    async def _bounded(entry: TestEntry, index: int) -> None:
        async with sem:
            outcomes.append(await work_item.process(entry=entry, index=index))

    async with asyncio.TaskGroup() as tg:
        for index, entry in enumerate(entries, start=1):
            tg.create_task(_bounded(entry=entry, index=index))

    outcomes.sort(key=lambda outcome: outcome.index)
    return outcomes


def _resolve_tool_path(tool_path: Path) -> Path:
    """Return an absolute executable path for tool_path, looking bare names up on PATH.

    A relative path naming an existing file is resolved against the working
    directory.
    """
    if tool_path.is_file():
        if os.access(tool_path, os.X_OK):
            return tool_path.absolute()
        raise ToolNotFoundError(path=tool_path)

    if len(tool_path.parts) == 1:
        found = shutil.which(str(tool_path))
        if found is not None:
            return Path(found)
    raise ToolNotFoundError(path=tool_path)


def _check_sample_folder(sample_folder: Path) -> None:
    if not sample_folder.is_dir():
        raise SampleFolderNotFoundError(path=sample_folder)


def _prepare_report_folder(report_folder: Path) -> None:
    try:
        report_folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ReportFolderNotWritableError(path=report_folder, reason=str(exc)) from exc
    if not os.access(report_folder, os.W_OK):
        raise ReportFolderNotWritableError(
            path=report_folder, reason="permission denied"
        )


def _prepare_scratch_folder(scratch_folder: Path) -> None:
    try:
        scratch_folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigValidationError(
            f"cannot create scratch folder {scratch_folder}: {exc}"
        ) from exc
