"""
Shared error handling decorators.
Convert library exceptions into the FounderHub hierarchy with consistent logging.
"""
import logging
import functools
from typing import TypeVar, Callable, Type

from .exceptions import FounderHubError, sanitize_error_message

log = logging.getLogger(__name__)

T = TypeVar('T')


def handle_file_operation_errors(
    operation: str,
    error_type: Type[FounderHubError] = FounderHubError,
    log_level: int = logging.ERROR
) -> Callable:
    """
    Decorator for handling common file operation errors.

    Args:
        operation: Description of the operation being performed
        error_type: FounderHubError subclass to raise
        log_level: Logging level for errors

    Returns:
        Decorated function that handles file operation errors
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except FounderHubError:
                raise
            except (OSError, ValueError) as e:
                if isinstance(e, FileNotFoundError):
                    error_msg = f"File not found during {operation}: {e}"
                elif isinstance(e, PermissionError):
                    error_msg = f"Permission denied during {operation}: {e}"
                elif isinstance(e, OSError):
                    error_msg = f"OS error during {operation}: {e}"
                else:
                    error_msg = f"Invalid data during {operation}: {e}"
                log.log(log_level, sanitize_error_message(error_msg))
                raise error_type(error_msg, cause=e) from e
        return wrapper
    return decorator


def handle_api_errors(
    provider: str,
    operation: str,
    error_type: Type[FounderHubError] = FounderHubError,
    log_level: int = logging.ERROR
) -> Callable:
    """
    Decorator for handling backend API errors.

    Args:
        provider: Backend name (e.g., "Supabase storage")
        operation: Description of the operation being performed
        error_type: FounderHubError subclass to raise
        log_level: Logging level for errors

    Returns:
        Decorated function that handles API errors
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except FounderHubError:
                raise
            except Exception as e:
                error_kind = type(e).__name__
                text = str(e).lower()
                if "Auth" in error_kind or "jwt" in text or "unauthorized" in text:
                    error_msg = f"{provider} authentication failed during {operation}: {e}"
                elif "Timeout" in error_kind or "timeout" in text:
                    error_msg = f"{provider} request timeout during {operation}: {e}"
                elif "Connect" in error_kind or "network" in text:
                    error_msg = f"{provider} network error during {operation}: {e}"
                else:
                    error_msg = f"{provider} error during {operation}: {e}"

                log.log(log_level, sanitize_error_message(error_msg))
                raise error_type(error_msg, cause=e) from e
        return wrapper
    return decorator
