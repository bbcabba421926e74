"""ConsoleProgressReporter — prints progress messages to stderr with Rich."""

from rich.console import Console


class ConsoleProgressReporter:
    """Writes each progress message as a dimmed, timestamped line on stderr.

    Pass a Console to redirect output (tests record into one).

    Satisfies the ProgressReporter protocol structurally.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    def show_progress_message(self, message: str) -> None:
        self._console.log(message, style="dim", markup=False, highlight=False)
