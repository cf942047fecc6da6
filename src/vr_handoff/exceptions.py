"""Exception hierarchy for the hand-off supervisor.

All custom exceptions inherit from ``ApplicationError`` so callers can
catch every reportable failure in one place.

Exception classes support two patterns:
1. No-argument raise: raise ConfigurationMissing()
2. Contextual attributes: err = ProcessNotFound(name="vrserver", path=p); raise err
"""

from __future__ import annotations

from typing import Any


class ApplicationError(Exception):
    """Base exception for all application errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Application error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class ConfigurationError(ApplicationError):
    """Configuration is invalid or missing."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Configuration is invalid or missing"
        super().__init__(message, **kwargs)

    @classmethod
    def missing_value(cls, param_name: str, context: str = "") -> "ConfigurationError":
        """Create error for missing value."""
        msg = f"{param_name} is missing or empty"
        if context:
            msg += f": {context}"
        return cls(msg, param_name=param_name)

    @classmethod
    def invalid_format(cls, param_name: str, received_value: str, expected_format: str = "") -> "ConfigurationError":
        """Create error for invalid format."""
        msg = f"{param_name} has invalid format (received {received_value!r})"
        if expected_format:
            msg += f". Expected {expected_format}"
        return cls(msg, param_name=param_name)


class ConfigurationMissing(ConfigurationError):
    """A required environment variable, file or executable is absent."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Required configuration is missing"
        super().__init__(message, **kwargs)


class ConfigurationCorrupt(ConfigurationError):
    """A configuration file exists but cannot be parsed or lacks expected fields."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Configuration file is corrupt"
        super().__init__(message, **kwargs)


class ProcessNotFound(ApplicationError):
    """Expected process was absent after its bounded wait."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Expected process was not found"
        super().__init__(message, **kwargs)


class ProcessControlError(ApplicationError):
    """The operating system refused or failed a process-control request."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Process control request failed"
        super().__init__(message, **kwargs)


__all__ = [
    "ApplicationError",
    "ConfigurationCorrupt",
    "ConfigurationError",
    "ConfigurationMissing",
    "ProcessControlError",
    "ProcessNotFound",
]
