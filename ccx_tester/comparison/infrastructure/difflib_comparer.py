"""DifflibComparer — in-process line diff built on the standard difflib module."""

import asyncio
import difflib
from pathlib import Path

from ccx_tester.comparison.infrastructure.accumulating import AccumulatingComparer
from ccx_tester.comparison.infrastructure.errors import ComparisonError


class DifflibComparer(AccumulatingComparer):
    """Unified diff of expected vs. produced, computed in a worker thread.

    With context_lines=None every line of the reference is shown around the
    changes (the full view); a number limits output to the changed hunks with
    that much context (the reduced view).
    """

    def __init__(self, context_lines: int | None = None) -> None:
        super().__init__()
        self._context_lines = context_lines

    async def _diff(self, expected: Path, produced: Path) -> list[str]:
        return await asyncio.to_thread(self._diff_files, expected, produced)

    def _diff_files(self, expected: Path, produced: Path) -> list[str]:
        try:
            expected_bytes = expected.read_bytes()
            produced_bytes = produced.read_bytes()
        except OSError as exc:
            raise ComparisonError(str(exc)) from exc

        if expected_bytes == produced_bytes:
            return []

        expected_lines = _decode_lines(expected_bytes)
        produced_lines = _decode_lines(produced_bytes)
        context = self._context_lines
        if context is None:
            context = max(len(expected_lines), len(produced_lines))

        return [
            line.rstrip("\n")
            for line in difflib.unified_diff(
                expected_lines,
                produced_lines,
                fromfile=str(expected),
                tofile=str(produced),
                n=context,
                lineterm="",
            )
        ]


def _decode_lines(raw: bytes) -> list[str]:
    lines = raw.decode("utf-8", errors="replace").splitlines(keepends=True)
    # A missing final newline still has to show up as a difference.
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n\\ No newline at end of file"
    return lines
