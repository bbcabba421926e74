"""Structlog implementation of the RunnerObserver port."""

import structlog


class StructlogRunnerObserver:
    """Delegates runner domain events to structlog.

    Satisfies the RunnerObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def runner_launch_retry(
        self,
        command: str,
        attempt: int,
        reason: str,
        backoff_seconds: float,
    ) -> None:
        self._log.warning(
            "runner.launch_retry",
            command=command,
            attempt=attempt,
            reason=reason,
            backoff_seconds=backoff_seconds,
        )

    def runner_timed_out(self, command: str, timeout_seconds: float) -> None:
        self._log.warning(
            "runner.timed_out", command=command, timeout_seconds=timeout_seconds
        )
