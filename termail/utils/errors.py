"""Centralized error handling module."""

from enum import Enum
from typing import Any, Dict

from termail.utils.logging import get_logger

_logger = None


def _get_logger():
    """Get logger with lazy initialisation."""
    global _logger
    if _logger is None:
        _logger = get_logger(__name__)
    return _logger


## Error Categories


class ErrorCategory(Enum):
    """Categories of errors for better handling."""

    NETWORK = "network"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    FILE_SYSTEM = "file_system"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


## Custom Exceptions


class TermailError(Exception):
    """Base exception for all termail errors."""

    category = ErrorCategory.UNKNOWN
    user_message = "An error occurred"

    def __init__(
        self, message: str | None = None, details: Dict[str, Any] | None = None
    ):
        """Initialise TermailError with optional message and details."""
        self.message = message or self.user_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error details to a dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
        }


## Network Errors


class ProviderError(TermailError):
    """Base exception for mail provider failures."""

    category = ErrorCategory.NETWORK
    user_message = "The mail provider request failed"


class ListFailure(ProviderError):
    """Listing the most recent messages failed; the whole fetch fails."""

    user_message = "Failed to list messages"


class ItemFailure(ProviderError):
    """Retrieving a single message failed; the message is dropped."""

    user_message = "Failed to retrieve message"


## Authentication Errors


class StartupFailure(TermailError):
    """No usable provider handle could be obtained at startup."""

    category = ErrorCategory.AUTHENTICATION
    user_message = "Unable to connect to the mail provider"


class MissingCredentialsError(StartupFailure):
    """Exception for a missing OAuth client secrets file."""

    user_message = "Gmail client credentials not found"


## Validation Errors


class DecodeFailure(TermailError):
    """Message content could not be decoded."""

    category = ErrorCategory.VALIDATION
    user_message = "Failed to decode message content"


## File System Errors


class FileSystemError(TermailError):
    """Base exception for file system-related errors."""

    category = ErrorCategory.FILE_SYSTEM
    user_message = "A file system error occurred"


## Configuration Errors


class ConfigurationError(TermailError):
    """Base exception for configuration-related errors."""

    category = ErrorCategory.CONFIGURATION
    user_message = "A configuration error occurred"


class InvalidConfigError(ConfigurationError):
    """Exception for invalid configuration settings."""

    user_message = "Invalid configuration settings"


## Error Handler


class ErrorHandler:
    """Centralized error handling and logging."""

    @staticmethod
    def handle(error: Exception, context: str = "", log_traceback: bool = True) -> Dict[str, Any]:
        """Log an error under ``context`` and return its report."""
        if isinstance(error, TermailError):
            report = error.to_dict()
        else:
            report = {
                "error_type": "UnknownError",
                "category": ErrorCategory.UNKNOWN.value,
                "message": str(error),
                "details": {"context": context},
            }

        logger = _get_logger()
        logger.error(f"{context}: {report['message']} ({report['category']})")
        if log_traceback:
            logger.error("Traceback", exc_info=error)
        return report


## Utility Functions


def format_error_message(error: BaseException) -> str:
    """Format an error message for display."""
    if isinstance(error, TermailError):
        cause = error.__cause__
        if cause is not None and str(cause):
            return f"{error.message}: {cause}"
        return error.message
    else:
        return str(error) or "An unexpected error occurred - check logs for details."
