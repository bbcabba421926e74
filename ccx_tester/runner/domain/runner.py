"""Runner and RunnerFactory Protocols — structural interfaces for invoking the external tool."""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol, TypeAlias

from ccx_tester.runner.domain.run_data import RunData

LineCallback: TypeAlias = Callable[[str], None]


class Runner(Protocol):
    """Invokes the bound external tool once per call.

    Each callback is invoked once per emitted line, in emission order for its
    stream. The call returns only after the process has exited and both
    streams are drained.
    """

    async def run(
        self,
        arguments: Sequence[str],
        on_stdout_line: LineCallback,
        on_stderr_line: LineCallback,
    ) -> RunData: ...


class RunnerFactory(Protocol):
    """Creates a Runner bound to a single tool executable for the lifetime of a run."""

    def create(self, tool_path: Path, timeout_seconds: float | None) -> Runner: ...
