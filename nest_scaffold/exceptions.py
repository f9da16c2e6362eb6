"""Error kinds raised while scaffolding a project.

Every error is fatal to a run.  The pipeline converts any of them into its
``FAILED`` stage and a single diagnostic line; nothing is retried.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for all scaffolding failures."""


class MissingParameter(ScaffoldError):
    """Raised when a required input (e.g. the version token) is absent."""

    def __init__(self, parameter: str) -> None:
        self.parameter = parameter
        super().__init__(f"Missing required parameter: {parameter}")


class ExternalCommandFailure(ScaffoldError):
    """Raised when the installer or the schema tool does not exit cleanly."""

    def __init__(self, command: list[str], returncode: int, reason: str = "") -> None:
        self.command = command
        self.returncode = returncode
        cmd_str = " ".join(command)
        message = f"Command failed (exit {returncode}): {cmd_str}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DirectoryCreationError(ScaffoldError):
    """Raised when a skeleton directory cannot be created."""

    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = Path(path)
        super().__init__(f"Could not create directory {self.path}: {reason}".rstrip(": "))


class WriteError(ScaffoldError):
    """Raised when a rendered file cannot be written.

    The underlying ``OSError`` is chained as ``__cause__``.
    """

    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = Path(path)
        super().__init__(f"Could not write {self.path}: {reason}".rstrip(": "))


class TemplateError(ScaffoldError):
    """Raised for an unknown template identifier or a failed render."""


class ModuleRegistrationError(ScaffoldError):
    """Raised when the root module cannot be read or has no ``@Module`` decorator."""

    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = Path(path)
        super().__init__(f"Could not register modules in {self.path}: {reason}".rstrip(": "))
