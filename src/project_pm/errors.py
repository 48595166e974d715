"""
Exception hierarchy for project-pm.

Only configuration problems and manifest write failures surface as
exceptions. Network, subprocess and filesystem failures inside the
pipeline are converted to default values where they happen.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for categorizing failures."""

    # Configuration errors
    CONFIG_INVALID = "config_invalid"
    CONFIG_MISSING_KEY = "config_missing_key"
    CONFIG_FILE_NOT_FOUND = "config_file_not_found"

    # Manifest errors
    MANIFEST_WRITE_FAILED = "manifest_write_failed"

    # General errors
    UNKNOWN = "unknown"


@dataclass
class ProjectPMError(Exception):
    """
    Base exception for all project-pm errors.

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the operation can be retried
        context: Additional context for debugging
        suggestion: Suggested action to resolve the error
    """

    message: str
    code: ErrorCode = ErrorCode.UNKNOWN
    recoverable: bool = False
    context: dict[str, Any] = field(default_factory=dict)
    suggestion: str | None = None

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "code": self.code.value,
            "recoverable": self.recoverable,
            "context": self.context,
            "suggestion": self.suggestion,
        }


@dataclass
class ConfigError(ProjectPMError):
    """Configuration error."""

    config_path: str | None = None
    key: str | None = None

    def __post_init__(self) -> None:
        if self.config_path:
            self.context["config_path"] = self.config_path
        if self.key:
            self.context["key"] = self.key


@dataclass
class ManifestError(ProjectPMError):
    """Manifest could not be persisted."""

    manifest_path: str | None = None

    def __post_init__(self) -> None:
        if self.manifest_path:
            self.context["manifest_path"] = self.manifest_path


def missing_credentials(keys: list[str]) -> ConfigError:
    """Create error for missing GitHub credentials."""
    joined = " or ".join(keys)
    return ConfigError(
        message=f"Missing {joined} in environment",
        code=ErrorCode.CONFIG_MISSING_KEY,
        key=keys[0] if keys else None,
        suggestion="Set them in the environment or in .env.local.",
    )


def invalid_config(path: str, reason: str) -> ConfigError:
    """Create error for invalid configuration."""
    return ConfigError(
        message=f"Invalid configuration: {reason}",
        code=ErrorCode.CONFIG_INVALID,
        config_path=path,
        suggestion="Check the configuration file format and values.",
    )


def manifest_write_failed(path: str, reason: str) -> ManifestError:
    """Create error for a manifest that could not be written."""
    return ManifestError(
        message=f"Failed to write manifest: {reason}",
        code=ErrorCode.MANIFEST_WRITE_FAILED,
        recoverable=True,
        manifest_path=path,
        suggestion="Check that the data directory is writable.",
    )
