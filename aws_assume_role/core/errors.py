"""
Error types for AWS Assume Role
"""

from typing import Optional


class AppError(Exception):
    """Base class for all errors reported to the user"""

    exit_code = 1

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigError(AppError):
    """The role configuration could not be located, read, parsed or written"""


class CloudProviderError(AppError):
    """An AWS API call failed or returned an unusable response

    Args:
        message: Human readable description
        error_code: Structured error code from the provider, when it exposes one
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code


class CliError(AppError):
    """Invalid user input or a failed command-line workflow step"""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code
