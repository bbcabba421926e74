"""RunData domain value object — the outcome of one external tool invocation."""

from pydantic import BaseModel, Field


class RunData(BaseModel, frozen=True):
    """Exit status, wall-clock runtime and captured output of one tool process.

    A non-zero exit_code is a normal outcome, not a harness failure; callers
    decide what to do with it. When timed_out is True the process was killed
    and exit_code is the (negative) signal status reported by the OS.
    """

    command: str
    exit_code: int
    runtime_seconds: float = Field(ge=0)
    stdout_lines: list[str] = Field(default_factory=list)
    stderr_lines: list[str] = Field(default_factory=list)
    timed_out: bool = False
