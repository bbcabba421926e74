"""Top-level harness configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field

from ccx_tester.config.domain.execution import ExecutionConfig


class HarnessConfig(BaseModel, frozen=True):
    """Everything a run needs to know: where the tool, samples and references live,
    where reports go, which comparer to use, and how to schedule entries."""

    tool_path: Path
    sample_folder: Path
    reference_folder: Path
    report_folder: Path
    scratch_folder: Path = Path("tmpFiles")
    comparer: str = Field(default="difflib", min_length=1)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
