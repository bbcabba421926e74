"""SubprocessRunner — runs the external tool with asyncio and captures both streams line by line."""

import asyncio
import shlex
import time
from collections.abc import Sequence
from pathlib import Path

from ccx_tester.config.domain.execution import RetryConfig
from ccx_tester.runner.domain.observer import RunnerObserver
from ccx_tester.runner.domain.performance import PerformanceLogger
from ccx_tester.runner.domain.run_data import RunData
from ccx_tester.runner.domain.runner import LineCallback, Runner
from ccx_tester.runner.infrastructure.errors import ToolLaunchError

# Pipes are read in fixed-size chunks and split into lines here, so a line of
# any length keeps the pipe flowing.
_READ_CHUNK_BYTES = 64 * 1024

# Longest line kept per stream entry; the rest of an over-long line is read
# and discarded.
_MAX_LINE_BYTES = 1024 * 1024

# How long to wait for the pipes to close after a kill. Grandchildren that
# inherited the pipes can keep them open indefinitely.
_DRAIN_GRACE_SECONDS = 2.0

_PERMANENT_LAUNCH_ERRORS = (FileNotFoundError, PermissionError, NotADirectoryError)


class SubprocessRunner:
    """Runs one bound tool executable per call and returns a RunData.

    Both pipes are drained by dedicated reader tasks started as soon as the
    process exists, so a chatty tool never blocks on a full pipe. The process
    handle is awaited directly; the reader tasks are joined before the end
    timestamp is taken.

    The spawned process belongs to the call that launched it: it is killed on
    timeout and on cancellation, and reaped within a short grace period
    before `run` returns or raises.

    Satisfies the Runner protocol structurally.
    """

    def __init__(
        self,
        tool_path: Path,
        observer: RunnerObserver,
        performance_logger: PerformanceLogger,
        retry: RetryConfig,
        timeout_seconds: float | None = None,
    ) -> None:
        self._tool_path = tool_path
        self._observer = observer
        self._performance_logger = performance_logger
        self._retry = retry
        self._timeout_seconds = timeout_seconds

    async def run(
        self,
        arguments: Sequence[str],
        on_stdout_line: LineCallback,
        on_stderr_line: LineCallback,
    ) -> RunData:
        """
        Launch the tool with arguments and wait for it to exit.

        Raises:
            ToolLaunchError: if the process cannot be started (after retries,
                for transient failures).
        """
        argv = [str(self._tool_path), *arguments]
        command = shlex.join(argv)

        process = await self._launch(argv=argv, command=command)
        started_at = time.monotonic()

        stdout_lines: list[str] = []
        stderr_lines: list[str] = []
        assert process.stdout is not None and process.stderr is not None
        readers = [
            asyncio.create_task(
                _read_lines(stream=process.stdout, on_line=on_stdout_line, sink=stdout_lines)
            ),
            asyncio.create_task(
                _read_lines(stream=process.stderr, on_line=on_stderr_line, sink=stderr_lines)
            ),
        ]

        timed_out = False
        try:
            await asyncio.wait_for(process.wait(), timeout=self._timeout_seconds)
        except TimeoutError:
            timed_out = True
            self._observer.runner_timed_out(
                command=command,
                timeout_seconds=float(self._timeout_seconds or 0.0),
            )
            _kill(process)
            await _drain(readers=readers, grace_seconds=_DRAIN_GRACE_SECONDS)
            await _reap(process=process, grace_seconds=_DRAIN_GRACE_SECONDS)
        except asyncio.CancelledError:
            _kill(process)
            await _drain(readers=readers, grace_seconds=_DRAIN_GRACE_SECONDS)
            await _reap(process=process, grace_seconds=_DRAIN_GRACE_SECONDS)
            raise
        else:
            await asyncio.gather(*readers)

        runtime_seconds = time.monotonic() - started_at
        exit_code = process.returncode if process.returncode is not None else -1
        self._performance_logger.process_exited(
            command=command,
            exit_code=exit_code,
            runtime_seconds=runtime_seconds,
        )

        return RunData(
            command=command,
            exit_code=exit_code,
            runtime_seconds=runtime_seconds,
            stdout_lines=stdout_lines,
            stderr_lines=stderr_lines,
            timed_out=timed_out,
        )

    async def _launch(
        self, argv: list[str], command: str
    ) -> asyncio.subprocess.Process:
        """Spawn the process, retrying transient OS failures with exponential backoff."""
        backoff = float(self._retry.initial_backoff_seconds)

        for attempt in range(1, self._retry.max_attempts + 1):
            try:
                return await asyncio.create_subprocess_exec(
                    *argv,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except _PERMANENT_LAUNCH_ERRORS as exc:
                raise ToolLaunchError(f"{argv[0]}: {exc.strerror or exc}") from exc
            except OSError as exc:
                if attempt == self._retry.max_attempts:
                    raise ToolLaunchError(
                        f"{argv[0]}: {exc.strerror or exc}", retriable=True
                    ) from exc
                self._observer.runner_launch_retry(
                    command=command,
                    attempt=attempt,
                    reason=str(exc),
                    backoff_seconds=backoff,
                )
            await asyncio.sleep(backoff)
            backoff *= self._retry.backoff_multiplier

        raise ToolLaunchError(f"{argv[0]}: retry budget exhausted", retriable=True)


class SubprocessRunnerFactory:
    """Creates SubprocessRunner instances sharing one observer, performance logger and retry policy."""

    def __init__(
        self,
        observer: RunnerObserver,
        performance_logger: PerformanceLogger,
        retry: RetryConfig,
    ) -> None:
        self._observer = observer
        self._performance_logger = performance_logger
        self._retry = retry

    def create(self, tool_path: Path, timeout_seconds: float | None) -> Runner:
        return SubprocessRunner(
            tool_path=tool_path,
            observer=self._observer,
            performance_logger=self._performance_logger,
            retry=self._retry,
            timeout_seconds=timeout_seconds,
        )


async def _read_lines(
    stream: asyncio.StreamReader, on_line: LineCallback, sink: list[str]
) -> None:
    """Read stream to EOF, emitting one line per newline.

    Lines longer than _MAX_LINE_BYTES are truncated; the excess is still read
    so the tool never blocks on a full pipe.
    """
    buffer = bytearray()

    def _append(piece: bytes) -> None:
        room = _MAX_LINE_BYTES - len(buffer)
        if room > 0:
            buffer.extend(piece[:room])

    def _emit() -> None:
        line = buffer.decode("utf-8", errors="replace").rstrip("\r")
        buffer.clear()
        sink.append(line)
        on_line(line)

    while chunk := await stream.read(_READ_CHUNK_BYTES):
        start = 0
        while (newline := chunk.find(b"\n", start)) != -1:
            _append(chunk[start:newline])
            _emit()
            start = newline + 1
        _append(chunk[start:])

    if buffer:
        _emit()


async def _drain(readers: list[asyncio.Task[None]], grace_seconds: float) -> None:
    """Give the readers a bounded window to hit EOF, then cancel the stragglers.

    Every reader is awaited, including ones that already failed.
    """
    _, pending = await asyncio.wait(readers, timeout=grace_seconds)
    for reader in pending:
        reader.cancel()
    await asyncio.gather(*readers, return_exceptions=True)


async def _reap(process: asyncio.subprocess.Process, grace_seconds: float) -> None:
    """Wait a bounded time for a killed process to be collected.

    asyncio only reports the exit once both pipes are closed, which a
    grandchild holding them open can postpone indefinitely.
    """
    try:
        await asyncio.wait_for(process.wait(), timeout=grace_seconds)
    except TimeoutError:
        pass


def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass
