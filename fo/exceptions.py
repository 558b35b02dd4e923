"""
fo - Exception Hierarchy

All fo-specific exceptions inherit from FoError. These are raised for
configuration and process-start problems only; a command's own failure is
reported through its Task status, never as an exception.
"""

from typing import Any


class FoError(Exception):
    """Base exception for all fo-related errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# Configuration Errors
class ConfigError(FoError):
    """Raised when configuration is invalid or missing."""

    pass


class ThemeNotFoundError(ConfigError):
    """Raised when a requested theme is not defined."""

    pass


class PatternError(ConfigError):
    """Raised when a pattern table contains an invalid regular expression."""

    def __init__(self, message: str, pattern: str, category: str, table: str = "output"):
        super().__init__(message, {"pattern": pattern, "category": category, "table": table})
        self.pattern = pattern
        self.category = category
        self.table = table


# Command Errors
class CommandError(FoError):
    """Base exception for wrapped command failures outside the command itself."""

    pass


class CommandStartError(CommandError):
    """Raised when the wrapped command cannot be started."""

    def __init__(self, message: str, command: str, exit_code: int = 1):
        super().__init__(message, {"command": command, "exit_code": exit_code})
        self.command = command
        self.exit_code = exit_code


class CommandNotFoundError(CommandStartError):
    """Raised when the wrapped command is not on PATH."""

    def __init__(self, message: str, command: str):
        super().__init__(message, command, exit_code=127)
