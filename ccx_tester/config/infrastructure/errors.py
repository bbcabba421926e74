"""Error types raised by config infrastructure and pre-dispatch validation."""

from pathlib import Path

from ccx_tester.core.errors import CcxTesterError


class MissingEnvVarsError(CcxTesterError):
    """Raised when one or more referenced environment variables are not set."""

    def __init__(self, missing_vars: list[str]) -> None:
        self.missing_vars = missing_vars
        var_list = ", ".join(sorted(missing_vars))
        super().__init__(
            f"Failed to load config: missing environment variables: {var_list}"
        )


class ConfigValidationError(CcxTesterError):
    """Raised when the settings file parses but violates the schema."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to validate config: {reason}")


class ConfigLoadError(CcxTesterError):
    """Raised when the settings file cannot be opened or read."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Failed to load config: file not found: {path}")


class ToolNotFoundError(CcxTesterError):
    """Raised before dispatch when the external tool is missing or not executable."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"Failed to start run: tool location ({path}) is not a valid"
            " file/executable"
        )


class SampleFolderNotFoundError(CcxTesterError):
    """Raised before dispatch when the sample root is not a directory."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Failed to start run: sample folder does not exist: {path}")


class ReportFolderNotWritableError(CcxTesterError):
    """Raised before dispatch when the report folder cannot be created or written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(
            f"Failed to start run: report folder is not writable: {path} ({reason})"
        )
