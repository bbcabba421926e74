"""Observer port for the runner domain — defines events in domain language."""

from typing import Protocol


class RunnerObserver(Protocol):
    def runner_launch_retry(
        self,
        command: str,
        attempt: int,
        reason: str,
        backoff_seconds: float,
    ) -> None: ...

    def runner_timed_out(self, command: str, timeout_seconds: float) -> None: ...
