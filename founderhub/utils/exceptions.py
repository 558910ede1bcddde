"""
Centralized exception hierarchy and error handling patterns.
Provides consistent error handling across the application.
"""
import logging
import re
from pathlib import Path
from typing import Optional, Any, Dict

__all__ = [
    'FounderHubError', 'ValidationError', 'SelectionError', 'ThumbnailError',
    'SubmissionError', 'RemovalError', 'StorageError', 'DatabaseError',
    'AuthenticationError', 'ConfigurationError', 'OperationInProgressError',
    'sanitize_error_message', 'sanitize_log_message', 'sanitize_path',
    'log_and_reraise', 'ErrorContext'
]


class FounderHubError(Exception):
    """
    Base exception for all FounderHub errors.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            details: Optional additional context
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None
        }


class ValidationError(FounderHubError):
    """Raised when input validation fails."""
    pass


class SelectionError(FounderHubError):
    """Raised when the file chooser itself fails."""
    pass


class ThumbnailError(FounderHubError):
    """Raised when a preview cannot be produced for a file."""
    pass


class SubmissionError(FounderHubError):
    """Raised when uploading and recording a pitch deck fails."""
    pass


class RemovalError(FounderHubError):
    """Raised when a staged file cannot be removed."""
    pass


class StorageError(FounderHubError):
    """Raised when object storage operations fail."""
    pass


class DatabaseError(FounderHubError):
    """Raised when table reads or writes fail."""
    pass


class AuthenticationError(FounderHubError):
    """Raised when no user is signed in or sign-in fails."""
    pass


class ConfigurationError(FounderHubError):
    """Raised when configuration is invalid."""
    pass


class OperationInProgressError(FounderHubError):
    """Raised when an operation starts while another one is still running."""
    pass


def sanitize_error_message(message: str) -> str:
    """
    Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    # Replace full paths with just filenames
    path_patterns = [
        r'[A-Za-z]:\\[^:\n]*\\([^\\:\n]+)',  # Windows paths
        r'(?<![:/\w])/[^:\s]*/([^/:\s]+)',   # Unix paths
    ]

    sanitized = message
    for pattern in path_patterns:
        sanitized = re.sub(pattern, r'<path>/\1', sanitized)

    # Mask Supabase keys (JWTs and the newer sb_ keys)
    sanitized = re.sub(r'eyJ[a-zA-Z0-9_-]{10,}\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+', 'eyJ***MASKED***', sanitized)
    sanitized = re.sub(r'sb_(secret|publishable)_[a-zA-Z0-9_-]{10,}', r'sb_\1_***MASKED***', sanitized)

    return sanitized


def sanitize_log_message(message: str) -> str:
    """
    Neutralize a log message: strip line breaks and control characters
    that could forge log entries, then mask secrets.

    Args:
        message: Raw log message

    Returns:
        Single-line, masked message
    """
    cleaned = message.replace('\r', '\\r').replace('\n', '\\n')
    cleaned = re.sub(r'[\x00-\x08\x0b-\x1f\x7f]', '', cleaned)
    return sanitize_error_message(cleaned)


def sanitize_path(path) -> str:
    """
    Sanitize a path for safe logging - show only filename.

    Args:
        path: Path object or string

    Returns:
        Sanitized path string (filename only)
    """
    if isinstance(path, Path):
        return f"<path>/{path.name}"
    elif isinstance(path, str):
        return f"<path>/{Path(path).name}"
    return str(path)


def log_and_reraise(
    logger: logging.Logger,
    error: Exception,
    operation: str,
    error_type: type = FounderHubError
) -> None:
    """
    Log an error and re-raise it as a specific type.

    Args:
        logger: Logger instance
        error: Original exception
        operation: Description of failed operation
        error_type: Type of exception to raise

    Raises:
        Exception of specified type
    """
    if isinstance(error, error_type):
        raise error

    message = f"Failed to {operation}: {str(error)}"

    logger.error(
        sanitize_error_message(message),
        extra={
            "operation": operation,
            "error_type": error.__class__.__name__
        }
    )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Full traceback:", exc_info=error)

    if issubclass(error_type, FounderHubError):
        raise error_type(message, cause=error) from error
    else:
        raise error_type(message) from error


class ErrorContext:
    """
    Context manager for handling errors in a specific operation.
    """

    def __init__(
        self,
        operation: str,
        logger: logging.Logger,
        reraise_as: Optional[type] = None
    ):
        """
        Initialize error context.

        Args:
            operation: Description of the operation
            logger: Logger instance
            reraise_as: Optional exception type to convert to
        """
        self.operation = operation
        self.logger = logger
        self.reraise_as = reraise_as or FounderHubError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None and issubclass(exc_type, Exception):
            log_and_reraise(self.logger, exc_val, self.operation, self.reraise_as)
        return False  # Don't suppress exceptions
