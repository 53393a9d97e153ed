"""Exception taxonomy for Module Maker.

Fatal errors carry the process exit code the CLI reports. Non-fatal ones
(``StubMissingError``, ``SentinelMissingError``, ``ExternalToolError``) are
caught by their callers and downgraded to warnings.
"""

from __future__ import annotations

from pathlib import Path


class ModuleMakerError(Exception):
    """Base class for every error raised by Module Maker."""

    exit_code: int = 1


class InvalidNameError(ModuleMakerError):
    """Raised when a module or relation name is not a valid identifier."""

    exit_code = 2

    def __init__(self, name: str, what: str = "Module") -> None:
        self.name = name
        super().__init__(
            f"Invalid {what.lower()} name '{name}'. {what} name must start with a letter "
            "and contain only letters, numbers, and underscores."
        )


class ModuleExistsError(ModuleMakerError):
    """Raised when creating a module whose directory already exists."""

    exit_code = 3

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Module '{name}' already exists. Use --overwrite to regenerate it.")


class UnknownModuleError(ModuleMakerError):
    """Raised when a command targets a module that does not exist."""

    exit_code = 4

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Module '{name}' does not exist.")


class StubMissingError(ModuleMakerError):
    """A template could not be found in any stub directory."""

    def __init__(self, stub: str, searched: list[Path]) -> None:
        self.stub = stub
        self.searched = searched
        locations = ", ".join(str(p) for p in searched) or "(no stub directories)"
        super().__init__(f"Stub '{stub}' not found in: {locations}")


class GenerationError(ModuleMakerError):
    """An I/O failure aborted generation or registration."""

    exit_code = 5

    def __init__(self, path: Path, cause: Exception, action: str = "write") -> None:
        self.path = path
        self.cause = cause
        if isinstance(cause, UnicodeDecodeError):
            reason = f"not valid {cause.encoding} text"
        else:
            reason = getattr(cause, "strerror", None) or str(cause)
        super().__init__(f"Failed to {action} {path}: {reason}")


class SentinelMissingError(ModuleMakerError):
    """An existing host file lacks the line a registration must go before."""

    def __init__(self, path: Path, sentinel: str) -> None:
        self.path = path
        self.sentinel = sentinel
        super().__init__(f"No '{sentinel}' line in {path}")


class ExternalToolError(ModuleMakerError):
    """An external helper command (composer, artisan) failed."""

    def __init__(self, command: list[str], reason: str) -> None:
        self.command = command
        self.reason = reason
        super().__init__(f"Command '{' '.join(command)}' failed: {reason}")


class RegistryFormatError(ModuleMakerError):
    """A host registry file exists but cannot be parsed."""

    exit_code = 6

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot update {path}: {reason}")
