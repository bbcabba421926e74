"""Error types raised by runner infrastructure."""

from ccx_tester.core.errors import CcxTesterError


class ToolLaunchError(CcxTesterError):
    """Raised when the external tool process cannot be started.

    Missing or non-executable binaries are permanent; resource exhaustion at
    spawn time (EAGAIN and friends) is retriable.
    """

    def __init__(self, reason: str, retriable: bool = False) -> None:
        super().__init__(f"Failed to launch tool: {reason}", retriable=retriable)
