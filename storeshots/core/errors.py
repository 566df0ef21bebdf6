"""Domain-specific exceptions for the screenshot pipeline."""

from pathlib import Path


class ConfigurationError(ValueError):
    """Raised when a flag or setting value is invalid."""


class InvalidImageError(ValueError):
    """Raised when an input image is missing, unreadable or corrupt."""

    def __init__(self, path: Path, reason: str | None = None):
        self.path = path
        message = f"Invalid image file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class MissingResourceError(FileNotFoundError):
    """Raised when a stage input (framed slots, combined composite) is absent."""


class PreconditionError(RuntimeError):
    """Raised when an upstream artifact violates a stage precondition."""
