"""PerformanceLogger Protocol and its no-op default."""

from typing import Protocol


class PerformanceLogger(Protocol):
    """Receives a sample after every tool process exits."""

    def process_exited(
        self, command: str, exit_code: int, runtime_seconds: float
    ) -> None: ...


class NullPerformanceLogger:
    """Discards every sample. Used where no platform counters are available."""

    def process_exited(
        self, command: str, exit_code: int, runtime_seconds: float
    ) -> None:
        pass
