"""Custom exceptions for the catalog reconciler.

Provides a hierarchy of exceptions for the fatal error conditions:
- ReconcilerError: Base exception for all reconciler errors
- SchemaViolationError: Final catalog failed structural validation
- MissingInputError: A required prior-stage output file is absent
- ConfigError: Required configuration value not provided

Recoverable conditions (malformed source documents, unresolved
prerequisites, duplicate semester-pair members) are logged, not raised.
"""

from pathlib import Path


class ReconcilerError(Exception):
    """Base exception for reconciler errors."""


class SchemaViolationError(ReconcilerError):
    """Catalog failed structural validation.

    Attributes:
        issues: Every violation found, formatted as ``"location: message"``.
    """

    def __init__(self, issues: list[str]) -> None:
        """Initialize SchemaViolationError.

        Args:
            issues: Every violation found in the catalog.
        """
        self.issues = issues
        preview = "; ".join(issues[:5])
        if len(issues) > 5:
            preview += f"; ... and {len(issues) - 5} more"
        super().__init__(f"Catalog failed validation with {len(issues)} issue(s): {preview}")


class MissingInputError(ReconcilerError):
    """A required input produced by an earlier stage is missing.

    Attributes:
        path: The file or directory that could not be read.
        stage: The pipeline stage to re-run to produce it.
    """

    def __init__(self, path: Path, stage: str, detail: str = "") -> None:
        """Initialize MissingInputError.

        Args:
            path: The missing file or directory.
            stage: Pipeline stage that produces it.
            detail: Optional extra description.
        """
        self.path = path
        self.stage = stage
        message = f"Required input not found: {path}. Run the '{stage}' step first."
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ConfigError(ReconcilerError):
    """Required configuration value not provided.

    Raised when a stage needs a value (e.g. district or source URL) that
    was given neither on the command line nor in the environment.
    """

    def __init__(self, setting: str, env_var: str) -> None:
        """Initialize ConfigError.

        Args:
            setting: Human-readable name of the missing setting.
            env_var: Environment variable that can provide it.
        """
        self.setting = setting
        self.env_var = env_var
        super().__init__(f"Missing configuration: {setting}. Pass it explicitly or set {env_var}.")
