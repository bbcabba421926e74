"""Tests for Orchestrator.run_all — validation, scheduling and report persistence."""

import sys
from datetime import date
from pathlib import Path

import pytest

from ccx_tester.catalog.domain.entry import TestEntry
from ccx_tester.comparison.infrastructure.difflib_comparer import DifflibComparer
from ccx_tester.comparison.infrastructure.errors import (
    ComparerNotSupportedError,
    ReportSaveError,
)
from ccx_tester.comparison.infrastructure.registry import ComparerRegistry
from ccx_tester.config.domain.config import HarnessConfig
from ccx_tester.config.domain.execution import ExecutionConfig, RetryConfig
from ccx_tester.config.infrastructure.errors import (
    SampleFolderNotFoundError,
    ToolNotFoundError,
)
from ccx_tester.execution.application.orchestrator import Orchestrator
from ccx_tester.runner.infrastructure.subprocess_runner import SubprocessRunnerFactory
from tests.comparison.fake_comparer import FakeComparer, FakeComparerFactory
from tests.execution.fake_observer import FakeExecutionObserver
from tests.execution.fake_progress_reporter import FakeProgressReporter
from tests.runner.fake_observer import FakeRunnerObserver
from tests.runner.fake_performance_logger import FakePerformanceLogger
from tests.runner.fake_runner import FakeRun, FakeRunner, FakeRunnerFactory

_TOOL = Path(sys.executable)


def _make_entries(count: int) -> list[TestEntry]:
    return [
        TestEntry(
            sample_file=f"sample{i}.ts",
            command=f"-autoprogram -cc{i}",
            expected_result_file=f"sample{i}.srt",
        )
        for i in range(1, count + 1)
    ]


def _make_config(
    tmp_path: Path,
    parallel: bool = False,
    max_concurrent: int = 4,
    comparer: str = "difflib",
    tool_path: Path = _TOOL,
) -> HarnessConfig:
    samples = tmp_path / "samples"
    samples.mkdir(exist_ok=True)
    return HarnessConfig(
        tool_path=tool_path,
        sample_folder=samples,
        reference_folder=tmp_path / "expected",
        report_folder=tmp_path / "reports",
        scratch_folder=tmp_path / "scratch",
        comparer=comparer,
        execution=ExecutionConfig(
            parallel=parallel,
            max_concurrent=max_concurrent,
            entry_timeout_seconds=30,
            extra_arguments=[],
        ),
    )


def _make_orchestrator(
    runner: FakeRunner | None = None,
    comparer: FakeComparer | None = None,
) -> tuple[Orchestrator, FakeRunnerFactory, FakeComparerFactory, FakeExecutionObserver, FakeProgressReporter]:
    runner_factory = FakeRunnerFactory(runner or FakeRunner())
    comparer_factory = FakeComparerFactory(comparer or FakeComparer())
    observer = FakeExecutionObserver()
    progress = FakeProgressReporter()
    orchestrator = Orchestrator(
        observer=observer,
        runner_factory=runner_factory,
        comparer_factory=comparer_factory,
        progress_reporter=progress,
    )
    return orchestrator, runner_factory, comparer_factory, observer, progress


class TestSequentialRun:
    """Sequential runs process entries strictly in catalog order."""

    async def test_entries_run_in_catalog_order(self, tmp_path: Path) -> None:
        orchestrator, runner_factory, _, _, _ = _make_orchestrator()

        await orchestrator.run_all(entries=_make_entries(5), config=_make_config(tmp_path))

        samples = [Path(call[-1]).name for call in runner_factory.runner.calls]
        assert samples == [f"sample{i}.ts" for i in range(1, 6)]

    async def test_progress_messages_interleave_per_entry(self, tmp_path: Path) -> None:
        orchestrator, _, _, _, progress = _make_orchestrator()

        await orchestrator.run_all(entries=_make_entries(2), config=_make_config(tmp_path))

        assert progress.messages == [
            "Starting with entry 1 of 2",
            "Finished entry 1 with exit code: 0",
            "Starting with entry 2 of 2",
            "Finished entry 2 with exit code: 0",
        ]

    async def test_summary_counts(self, tmp_path: Path) -> None:
        runner = FakeRunner(runs={"sample2.ts": FakeRun(exit_code=1)})
        orchestrator, _, _, _, _ = _make_orchestrator(runner=runner)

        summary = await orchestrator.run_all(
            entries=_make_entries(3), config=_make_config(tmp_path)
        )

        assert summary.total_entries == 3
        assert [o.index for o in summary.outcomes] == [1, 2, 3]
        assert summary.compared_count == 2
        assert summary.failed_count == 1


class TestParallelRun:
    """Parallel runs process every entry once with bounded concurrency."""

    async def test_every_entry_processed_once(self, tmp_path: Path) -> None:
        runner = FakeRunner(default=FakeRun(delay_seconds=0.01))
        orchestrator, _, comparer_factory, _, _ = _make_orchestrator(runner=runner)

        summary = await orchestrator.run_all(
            entries=_make_entries(20), config=_make_config(tmp_path, parallel=True)
        )

        compared = sorted(d.sample_file.name for d in comparer_factory.comparer.compared)
        assert compared == sorted(f"sample{i}.ts" for i in range(1, 21))
        assert [o.index for o in summary.outcomes] == list(range(1, 21))

    async def test_concurrency_bounded_by_max_concurrent(self, tmp_path: Path) -> None:
        runner = FakeRunner(default=FakeRun(delay_seconds=0.05))
        orchestrator, _, _, _, _ = _make_orchestrator(runner=runner)

        await orchestrator.run_all(
            entries=_make_entries(10),
            config=_make_config(tmp_path, parallel=True, max_concurrent=3),
        )

        assert runner.max_in_flight == 3

    async def test_one_failure_does_not_stop_others(self, tmp_path: Path) -> None:
        runner = FakeRunner(
            runs={"sample3.ts": FakeRun(error=OSError("exec format error"))}
        )
        orchestrator, _, comparer_factory, observer, _ = _make_orchestrator(runner=runner)

        summary = await orchestrator.run_all(
            entries=_make_entries(5), config=_make_config(tmp_path, parallel=True)
        )

        assert len(summary.outcomes) == 5
        assert len(comparer_factory.comparer.compared) == 4
        assert [e.index for e in observer.entry_failed_events] == [3]

    async def test_report_holds_one_record_per_zero_exit_entry(self, tmp_path: Path) -> None:
        failing = {"sample4.ts", "sample9.ts", "sample15.ts"}
        runner = FakeRunner(
            runs={name: FakeRun(exit_code=2, delay_seconds=0.01) for name in failing},
            default=FakeRun(produced_content="caption\n", delay_seconds=0.01),
        )
        comparer = DifflibComparer()
        config = _make_config(tmp_path, parallel=True, max_concurrent=5)
        expected = tmp_path / "expected"
        expected.mkdir()
        for i in range(1, 21):
            (expected / f"sample{i}.srt").write_text("caption\n")
        orchestrator = Orchestrator(
            observer=FakeExecutionObserver(),
            runner_factory=FakeRunnerFactory(runner),
            comparer_factory=FakeComparerFactory(comparer),
        )

        summary = await orchestrator.run_all(entries=_make_entries(20), config=config)

        records = comparer.report.records
        assert len(records) == 17
        assert {Path(r.sample_file).name for r in records} == {
            f"sample{i}.ts" for i in range(1, 21)
        } - failing
        assert all(r.identical for r in records)
        saved = summary.report_path.read_text(encoding="utf-8")
        assert saved.count("Used command:") == 17

    async def test_progress_pairs_per_entry(self, tmp_path: Path) -> None:
        orchestrator, _, _, _, progress = _make_orchestrator()

        await orchestrator.run_all(
            entries=_make_entries(6), config=_make_config(tmp_path, parallel=True)
        )

        starts = [m for m in progress.messages if m.startswith("Starting")]
        finishes = [m for m in progress.messages if m.startswith("Finished")]
        assert len(starts) == 6
        assert len(finishes) == 6


class TestPreDispatchValidation:
    """Configuration problems abort the run before any entry is dispatched."""

    async def test_missing_tool(self, tmp_path: Path) -> None:
        orchestrator, runner_factory, _, observer, _ = _make_orchestrator()
        config = _make_config(tmp_path, tool_path=tmp_path / "no-ccextractor")

        with pytest.raises(ToolNotFoundError):
            await orchestrator.run_all(entries=_make_entries(2), config=config)

        assert runner_factory.runner.calls == []
        assert observer.run_started_events == []

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    async def test_non_executable_tool(self, tmp_path: Path) -> None:
        tool = tmp_path / "ccextractor"
        tool.write_text("not a program")
        tool.chmod(0o644)
        orchestrator, _, _, _, _ = _make_orchestrator()

        with pytest.raises(ToolNotFoundError):
            await orchestrator.run_all(
                entries=_make_entries(1), config=_make_config(tmp_path, tool_path=tool)
            )

    async def test_bare_tool_name_found_on_path(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PATH", str(_TOOL.parent))
        orchestrator, runner_factory, _, _, _ = _make_orchestrator()

        await orchestrator.run_all(
            entries=_make_entries(1),
            config=_make_config(tmp_path, tool_path=Path(_TOOL.name)),
        )

        assert runner_factory.create_calls[0].tool_path.name == _TOOL.name
        assert runner_factory.create_calls[0].tool_path.is_absolute()

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a shell script")
    async def test_bare_tool_name_in_working_directory_made_absolute(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        tool = tmp_path / "faketool"
        tool.write_text("#!/bin/sh\nexit 0\n")
        tool.chmod(0o755)
        monkeypatch.chdir(tmp_path)
        orchestrator, runner_factory, _, _, _ = _make_orchestrator()

        await orchestrator.run_all(
            entries=_make_entries(1),
            config=_make_config(tmp_path, tool_path=Path("faketool")),
        )

        resolved = runner_factory.create_calls[0].tool_path
        assert resolved.is_absolute()
        assert resolved.samefile(tool)

    @pytest.mark.skipif(sys.platform == "win32", reason="needs a shell script")
    async def test_bare_tool_name_in_working_directory_launches(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        tool = tmp_path / "faketool"
        tool.write_text("#!/bin/sh\nexit 0\n")
        tool.chmod(0o755)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PATH", "/nonexistent")
        orchestrator = Orchestrator(
            observer=FakeExecutionObserver(),
            runner_factory=SubprocessRunnerFactory(
                observer=FakeRunnerObserver(),
                performance_logger=FakePerformanceLogger(),
                retry=RetryConfig(max_attempts=1, initial_backoff_seconds=0),
            ),
            comparer_factory=FakeComparerFactory(),
        )

        summary = await orchestrator.run_all(
            entries=_make_entries(1),
            config=_make_config(tmp_path, tool_path=Path("faketool")),
        )

        outcome = summary.outcomes[0]
        assert outcome.error is None
        assert outcome.exit_code == 0

    async def test_missing_sample_folder(self, tmp_path: Path) -> None:
        orchestrator, runner_factory, _, _, _ = _make_orchestrator()
        config = _make_config(tmp_path).model_copy(
            update={"sample_folder": tmp_path / "nowhere"}
        )

        with pytest.raises(SampleFolderNotFoundError):
            await orchestrator.run_all(entries=_make_entries(1), config=config)

        assert runner_factory.runner.calls == []

    async def test_unknown_comparer(self, tmp_path: Path) -> None:
        observer = FakeExecutionObserver()
        runner = FakeRunner()
        orchestrator = Orchestrator(
            observer=observer,
            runner_factory=FakeRunnerFactory(runner),
            comparer_factory=ComparerRegistry(),
        )

        with pytest.raises(ComparerNotSupportedError):
            await orchestrator.run_all(
                entries=_make_entries(1),
                config=_make_config(tmp_path, comparer="winmerge"),
            )

        assert runner.calls == []

    async def test_report_and_scratch_folders_created(self, tmp_path: Path) -> None:
        orchestrator, _, _, _, _ = _make_orchestrator()

        await orchestrator.run_all(entries=[], config=_make_config(tmp_path))

        assert (tmp_path / "reports").is_dir()
        assert (tmp_path / "scratch").is_dir()


class TestRunEvents:
    async def test_run_started_and_completed(self, tmp_path: Path) -> None:
        orchestrator, _, _, observer, _ = _make_orchestrator()

        summary = await orchestrator.run_all(
            entries=_make_entries(2),
            config=_make_config(tmp_path, parallel=True, max_concurrent=2),
        )

        started = observer.run_started_events[0]
        assert started.run_id == summary.run_id
        assert started.total_entries == 2
        assert started.parallel is True
        assert started.max_concurrent == 2
        assert started.comparer == "difflib"
        assert observer.run_completed_events[0].compared_entries == 2

    async def test_runner_created_once_with_timeout(self, tmp_path: Path) -> None:
        orchestrator, runner_factory, _, _, _ = _make_orchestrator()

        await orchestrator.run_all(entries=_make_entries(3), config=_make_config(tmp_path))

        assert len(runner_factory.create_calls) == 1
        assert runner_factory.create_calls[0].timeout_seconds == 30


class TestReportPersistence:
    """The comparer's report is saved once per run with the tool version header."""

    async def test_report_saved_with_version(self, tmp_path: Path) -> None:
        orchestrator, _, comparer_factory, observer, _ = _make_orchestrator()

        summary = await orchestrator.run_all(
            entries=_make_entries(1), config=_make_config(tmp_path)
        )

        folder, result = comparer_factory.comparer.saved[0]
        assert folder == tmp_path / "reports"
        assert result.tool_version == f"{_TOOL} {date.today().isoformat()}"
        assert summary.report_path == tmp_path / "reports" / "Report_fake.txt"
        assert observer.report_saved_events[0].path == str(summary.report_path)

    async def test_report_save_error_propagates(self, tmp_path: Path) -> None:
        orchestrator, _, _, observer, _ = _make_orchestrator(
            comparer=FakeComparer(save_error=True)
        )

        with pytest.raises(ReportSaveError):
            await orchestrator.run_all(entries=_make_entries(1), config=_make_config(tmp_path))

        assert observer.report_saved_events == []

    async def test_comparer_requested_by_configured_name(self, tmp_path: Path) -> None:
        orchestrator, _, comparer_factory, _, _ = _make_orchestrator()

        await orchestrator.run_all(
            entries=[], config=_make_config(tmp_path, comparer="difflib-reduced")
        )

        assert comparer_factory.requested_names == ["difflib-reduced"]


class TestEndToEndWithDifflib:
    """A fake tool run compared by the real difflib comparer yields a readable report."""

    async def test_one_line_difference_reported(self, tmp_path: Path) -> None:
        config = _make_config(tmp_path)
        (tmp_path / "samples" / "a.ts").write_bytes(b"\x47\x00")
        expected = tmp_path / "expected"
        expected.mkdir()
        (expected / "a.txt").write_text("hello\nworld\n")
        runner = FakeRunner(default=FakeRun(produced_content="hello\nthere\n"))
        orchestrator = Orchestrator(
            observer=FakeExecutionObserver(),
            runner_factory=FakeRunnerFactory(runner),
            comparer_factory=ComparerRegistry(),
        )

        summary = await orchestrator.run_all(
            entries=[
                TestEntry(sample_file="a.ts", command="-autoprogram", expected_result_file="a.txt")
            ],
            config=config,
        )

        text = summary.report_path.read_text(encoding="utf-8")
        assert text.startswith(f"Report generated for version {_TOOL} ")
        assert "Used command: -autoprogram" in text
        assert "-world" in text
        assert "+there" in text
        assert summary.report_path.name.startswith("Report_")

    async def test_each_run_gets_a_fresh_report(self, tmp_path: Path) -> None:
        config = _make_config(tmp_path)
        expected = tmp_path / "expected"
        expected.mkdir()
        (expected / "sample1.srt").write_text("same\n")
        runner = FakeRunner(default=FakeRun(produced_content="same\n"))
        orchestrator = Orchestrator(
            observer=FakeExecutionObserver(),
            runner_factory=FakeRunnerFactory(runner),
            comparer_factory=ComparerRegistry(),
        )

        first = await orchestrator.run_all(entries=_make_entries(1), config=config)
        second = await orchestrator.run_all(entries=_make_entries(1), config=config)

        assert first.report_path != second.report_path
        assert second.report_path.read_text(encoding="utf-8").count("Used command:") == 1
