"""
Core utilities for FounderHub.

This module contains shared utility functions and classes:
- config: Application configuration management
- logging: Rich console and sanitized file logging
- validation: Upload rules and form field validation
- exceptions: Custom exception classes
- error_handling: Shared error handling decorators
- file_io: Shared file I/O operations
- formatting: Display helpers and storage key naming
"""

# Re-export commonly used utilities for convenience
from .config import SETTINGS
from .logging import setup_logging
from .exceptions import (
    FounderHubError,
    ValidationError,
    SelectionError,
    SubmissionError,
    RemovalError,
)
from .validation import ValidationRules, sanitize_path_input
from .file_io import read_json_file, write_json_file
from .error_handling import handle_file_operation_errors, handle_api_errors

__all__ = [
    'SETTINGS',
    'setup_logging',
    'FounderHubError',
    'ValidationError',
    'SelectionError',
    'SubmissionError',
    'RemovalError',
    'ValidationRules',
    'sanitize_path_input',
    'read_json_file',
    'write_json_file',
    'handle_file_operation_errors',
    'handle_api_errors',
]
