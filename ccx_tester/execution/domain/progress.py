"""ProgressReporter Protocol and its no-op default."""

from typing import Protocol


class ProgressReporter(Protocol):
    """Accepts free-text progress messages such as "Starting with entry 3 of 10"."""

    def show_progress_message(self, message: str) -> None: ...


class NullProgressReporter:
    def show_progress_message(self, message: str) -> None:
        pass
