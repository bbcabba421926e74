"""RunContext — the immutable per-run state shared by every WorkItem."""

from dataclasses import dataclass
from pathlib import Path

from ccx_tester.comparison.domain.comparer import Comparer
from ccx_tester.execution.domain.observer import ExecutionObserver
from ccx_tester.execution.domain.progress import ProgressReporter
from ccx_tester.runner.domain.runner import Runner


@dataclass(frozen=True)
class RunContext:
    """Built once by the Orchestrator per run and handed to every WorkItem.

    The runner and comparer are shared across entries; the comparer's report
    is the only mutable state reachable from here and it guards itself.
    """

    run_id: str
    total: int
    runner: Runner
    comparer: Comparer
    observer: ExecutionObserver
    progress: ProgressReporter
    sample_folder: Path
    reference_folder: Path
    scratch_folder: Path
    extra_arguments: tuple[str, ...] = ()
    output_flag: str = "-o"
