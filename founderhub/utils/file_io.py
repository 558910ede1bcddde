"""
Shared file I/O utility functions.
Used by the local backend (JSON tables and the directory object store).
"""
import json
import logging
import shutil
from pathlib import Path
from typing import Any, Union

from .error_handling import handle_file_operation_errors

log = logging.getLogger(__name__)


@handle_file_operation_errors("JSON file read")
def read_json_file(file_path: Union[str, Path]) -> Any:
    """
    Read and parse a JSON file.

    Args:
        file_path: Path to JSON file

    Returns:
        Parsed JSON data

    Raises:
        FounderHubError: If file cannot be read or parsed
    """
    file_path = Path(file_path)

    with open(file_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    log.debug("Read JSON file: %s", file_path.name)
    return data


@handle_file_operation_errors("JSON file write")
def write_json_file(
    file_path: Union[str, Path],
    data: Any,
    indent: int = 2,
    ensure_ascii: bool = False
) -> None:
    """
    Write data to a JSON file atomically (temp file then rename).

    Args:
        file_path: Path to output JSON file
        data: Data to write
        indent: JSON indentation level
        ensure_ascii: Whether to ensure ASCII encoding

    Raises:
        FounderHubError: If file cannot be written
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    with open(tmp_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, default=str)
    tmp_path.replace(file_path)

    log.debug("Wrote JSON file: %s", file_path.name)


@handle_file_operation_errors("file copy")
def copy_file(source: Union[str, Path], destination: Union[str, Path]) -> Path:
    """
    Copy a file from source to destination, creating parent directories.

    Raises:
        FounderHubError: If file cannot be copied
    """
    source = Path(source)
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination)
    log.debug("Copied file: %s -> %s", source.name, destination.name)
    return destination


@handle_file_operation_errors("file removal")
def safe_remove_file(file_path: Union[str, Path]) -> bool:
    """
    Remove a file if it exists.

    Returns:
        True if file was removed, False if it didn't exist
    """
    file_path = Path(file_path)
    if not file_path.exists():
        return False
    file_path.unlink()
    log.debug("Removed file: %s", file_path.name)
    return True
