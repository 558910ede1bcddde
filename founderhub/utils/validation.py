"""
Input validation and sanitization utilities.
Provides validation for uploaded files and for profile form fields.
"""
import os
import re
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .exceptions import ValidationError, sanitize_path

log = logging.getLogger(__name__)

# Enhanced security patterns for path traversal prevention
SUSPICIOUS_PATTERNS = [
    r'\.\.%2f',  # URL encoded traversal
    r'\.\.%5c',  # URL encoded traversal (backslash)
    r'%2e%2e%2f',  # Double URL encoded traversal
    r'[<>"|*?]',  # Invalid filename chars
    r'^\s*$',  # Empty or whitespace only
    r'[\x00-\x1f]',  # Control characters
    r'[\x7f-\x9f]',  # Extended control characters
]

MAX_PATH_LENGTH = 4096
BYTES_PER_MB = 1024 * 1024

FUNDING_PHASES = (
    'Idea',
    'Pre-Seed',
    'Seed',
    'MVP',
    'Product-Market Fit',
    'Early Growth',
    'Series A',
    'Series B',
    'Series C',
    'Series D+',
    'Scaling',
    'Late Stage',
    'Revenue-Generating',
    'IPO Ready',
    'Bridge',
)

MIN_FUNDING_GOAL = 1000
MIN_IDEA_LENGTH = 10
MIN_MEMBER_FIELD_LENGTH = 2

LINKEDIN_PATTERN = re.compile(
    r'^https?://(www\.)?linkedin\.com/in/[a-zA-Z0-9-]+/?$',
    re.IGNORECASE,
)

__all__ = ['ValidationError', 'ValidationRules', 'sanitize_path_input', 'get_extension',
           'validate_file_size', 'validate_idea_description', 'validate_funding_goal',
           'parse_funding_goal', 'validate_funding_phase', 'validate_member_name',
           'validate_member_role', 'validate_linkedin_url', 'FUNDING_PHASES']


def sanitize_path_input(path_input: str) -> str:
    """
    Sanitize and validate path input from users.

    Args:
        path_input: Raw path input from user

    Returns:
        Cleaned path string

    Raises:
        ValidationError: If path is invalid or suspicious
    """
    if not path_input or not path_input.strip():
        raise ValidationError("Path cannot be empty")

    # Remove surrounding quotes and whitespace
    cleaned = path_input.strip().strip('"\'')

    if not cleaned:
        raise ValidationError("Path cannot be empty after cleaning")

    for pattern in SUSPICIOUS_PATTERNS:
        if re.search(pattern, cleaned, re.IGNORECASE):
            raise ValidationError("Path contains invalid characters or patterns")

    if len(cleaned) > MAX_PATH_LENGTH:
        raise ValidationError(f"Path too long (max {MAX_PATH_LENGTH} characters)")

    return cleaned


def get_extension(name: Union[str, Path]) -> str:
    """Return the lower-cased extension of a file name or URL, without the dot."""
    text = str(name).split('?', 1)[0]
    base = text.replace('\\', '/').rsplit('/', 1)[-1]
    if '.' not in base:
        return ''
    return base.rsplit('.', 1)[-1].lower()


def validate_file_size(
    file_path: Union[str, Path],
    max_size_bytes: int,
    file_type: str = "file"
) -> Path:
    """
    Validate that a file does not exceed the size limit.

    Args:
        file_path: File to check
        max_size_bytes: Maximum allowed size (inclusive)
        file_type: Label used in the error message

    Returns:
        The validated path

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the path is not a file or is too large
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File does not exist: {sanitize_path(path)}")
    if not path.is_file():
        raise ValidationError(f"Path is not a file: {sanitize_path(path)}")

    size = path.stat().st_size
    if size > max_size_bytes:
        raise ValidationError(
            f"{file_type} file too large. Maximum size is {max_size_bytes // BYTES_PER_MB}MB",
            details={"size_bytes": size, "max_size_bytes": max_size_bytes},
        )
    return path


class ValidationRules:
    """
    Extension and size rules for one kind of upload.

    The pitch-deck workflow receives an instance of this class and asks it
    for the chooser filter and for per-file validation.
    """

    def __init__(self, label: str, allowed_extensions: Iterable[str], max_size_bytes: int):
        self.label = label
        self.allowed_extensions = [ext.lower().lstrip('.') for ext in allowed_extensions]
        self.max_size_bytes = max_size_bytes

    @classmethod
    def for_pitch_deck(cls, settings=None) -> "ValidationRules":
        if settings is None:
            from .config import SETTINGS as settings
        return cls("Pitch deck", settings.pitch_deck_extensions, settings.max_pitch_deck_bytes)

    @classmethod
    def for_avatar(cls, settings=None) -> "ValidationRules":
        if settings is None:
            from .config import SETTINGS as settings
        return cls("Avatar", settings.avatar_extensions, settings.max_avatar_bytes)

    def validate(self, file_path: Union[str, Path]) -> Path:
        """
        Validate a single file against these rules.

        Raises:
            ValidationError: If the file is missing, unreadable, too large or
                of a type that is not allowed
        """
        path = Path(file_path)
        if not path.exists():
            raise ValidationError(f"{self.label} file does not exist")
        if not os.access(path, os.R_OK):
            raise ValidationError(f"{self.label} file is not readable")

        try:
            validate_file_size(path, self.max_size_bytes, file_type=self.label)
        except FileNotFoundError as e:
            raise ValidationError(f"{self.label} file does not exist") from e

        extension = get_extension(path.name)
        if extension not in self.allowed_extensions:
            raise ValidationError(
                f"Invalid {self.label.lower()} file type. Allowed: {', '.join(self.allowed_extensions)}",
                details={"extension": extension},
            )
        return path


def validate_idea_description(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValidationError("Please describe your startup idea")
    if len(value.strip()) < MIN_IDEA_LENGTH:
        raise ValidationError(
            f"Please provide a more detailed description (at least {MIN_IDEA_LENGTH} characters)"
        )
    return value.strip()


def parse_funding_goal(value: Union[str, int, None]) -> Optional[int]:
    """Parse a funding goal such as ``"250,000"``; returns None if not a number."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).replace(',', '').strip())
    except ValueError:
        return None


def validate_funding_goal(value: Union[str, int, None]) -> int:
    if value is None or not str(value).strip():
        raise ValidationError("Please enter your funding goal")

    amount = parse_funding_goal(value)
    if amount is None or amount <= 0:
        raise ValidationError("Please enter a valid funding amount")

    if amount < MIN_FUNDING_GOAL:
        raise ValidationError(f"Funding goal should be at least ${MIN_FUNDING_GOAL:,}")

    return amount


def validate_funding_phase(value: Optional[str]) -> str:
    if not value or value not in FUNDING_PHASES:
        raise ValidationError("Please select a valid funding phase")
    return value


def _validate_member_field(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required")
    if len(value.strip()) < MIN_MEMBER_FIELD_LENGTH:
        raise ValidationError(f"{label} must be at least {MIN_MEMBER_FIELD_LENGTH} characters")
    return value.strip()


def validate_member_name(value: Optional[str]) -> str:
    return _validate_member_field(value, "Name")


def validate_member_role(value: Optional[str]) -> str:
    return _validate_member_field(value, "Role")


def validate_linkedin_url(value: Optional[str]) -> Optional[str]:
    """LinkedIn is optional; blank input returns None."""
    if value is None or not value.strip():
        return None
    if not LINKEDIN_PATTERN.match(value.strip()):
        raise ValidationError("Please enter a valid LinkedIn profile URL")
    return value.strip()
