"""Comparer and ComparerFactory Protocols — structural interfaces for comparison strategies."""

from pathlib import Path
from typing import Protocol

from ccx_tester.comparison.domain.compare_data import CompareData, ResultData


class Comparer(Protocol):
    """Judges produced artifacts against references and accumulates a run report.

    One instance is shared by every entry of a run and discarded afterwards.
    Implementations must tolerate concurrent `compare_and_accumulate` calls.
    """

    async def compare_and_accumulate(self, data: CompareData) -> None: ...

    def report_file_name(self) -> str: ...

    def save_report(self, folder: Path, result: ResultData) -> Path: ...


class ComparerFactory(Protocol):
    """Creates a fresh Comparer for a configured variant name."""

    def create(self, name: str) -> Comparer: ...
