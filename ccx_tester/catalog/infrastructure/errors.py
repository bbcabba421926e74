"""Error types raised by catalog infrastructure."""

from ccx_tester.core.errors import CcxTesterError


class CatalogLoadError(CcxTesterError):
    """Raised when a catalog file is missing, malformed, or fails validation."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to load catalog: {reason}")


class CatalogSaveError(CcxTesterError):
    """Raised when a catalog cannot be written to disk."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to save catalog: {reason}")
