"""Comparator input and report metadata value objects."""

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field


class CompareData(BaseModel, frozen=True):
    """Everything a comparer needs to judge and describe one entry."""

    produced_file: Path
    expected_file: Path
    sample_file: Path
    command: str
    runtime_seconds: float = Field(ge=0)


class ResultData(BaseModel, frozen=True):
    """Run-level metadata written at the top of a report."""

    tool_version: str
    generated_at: datetime
