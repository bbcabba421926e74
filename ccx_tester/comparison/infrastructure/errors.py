"""Error types raised by comparison infrastructure."""

from pathlib import Path

from ccx_tester.core.errors import CcxTesterError


class ComparisonError(CcxTesterError):
    """Raised when an entry's files cannot be read or the diff mechanism fails."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to compare files: {reason}")


class ComparerNotSupportedError(CcxTesterError):
    """Raised when the configured comparer name is not a known variant."""

    def __init__(self, name: str, supported: list[str]) -> None:
        self.name = name
        super().__init__(
            f"Failed to create comparer: unsupported comparer '{name}'"
            f" (supported: {', '.join(supported)})"
        )


class ReportSaveError(CcxTesterError):
    """Raised when the accumulated report cannot be written to the report folder."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to save report to {path}: {reason}")
