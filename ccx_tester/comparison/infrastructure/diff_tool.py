"""DiffToolComparer — shells out to the system `diff -y` for a side-by-side diff."""

import asyncio
from pathlib import Path

from ccx_tester.comparison.infrastructure.accumulating import AccumulatingComparer
from ccx_tester.comparison.infrastructure.errors import ComparisonError

# diff(1) exit statuses: 0 identical, 1 different, anything else is trouble.
_IDENTICAL = 0
_DIFFERENT = 1


class DiffToolComparer(AccumulatingComparer):
    """Runs `<diff_binary> -y expected produced` and records its output verbatim."""

    def __init__(self, diff_binary: str = "diff") -> None:
        super().__init__()
        self._diff_binary = diff_binary

    async def _diff(self, expected: Path, produced: Path) -> list[str]:
        try:
            process = await asyncio.create_subprocess_exec(
                self._diff_binary,
                "-y",
                str(expected),
                str(produced),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ComparisonError(
                f"cannot invoke {self._diff_binary}: {exc.strerror or exc}"
            ) from exc

        stdout, stderr = await process.communicate()

        if process.returncode == _IDENTICAL:
            return []
        if process.returncode == _DIFFERENT:
            return stdout.decode("utf-8", errors="replace").splitlines()
        reason = stderr.decode("utf-8", errors="replace").strip()
        raise ComparisonError(
            f"{self._diff_binary} exited with status {process.returncode}: {reason}"
        )
