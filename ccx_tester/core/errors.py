"""Base exception class for all ccx-tester-specific errors."""


class CcxTesterError(Exception):
    """Base class for all ccx-tester errors."""

    def __init__(self, message: str, retriable: bool = False) -> None:
        super().__init__(message)
        self.retriable = retriable
