"""
Logging setup for the CLI and the TUI.

Console output goes through rich; the optional log file runs every record
through SanitizingFormatter so Supabase keys, JWTs and home paths never land
on disk. The TUI calls `quiet_console_logging` once it takes over the screen.
"""
from rich.logging import RichHandler
import logging
import os
from pathlib import Path
from datetime import datetime

from .exceptions import sanitize_log_message


def get_log_level() -> int:
    """Resolve LOG_LEVEL from FounderHub settings, falling back to the raw environment."""
    # Settings are read lazily so logging can be configured before they load
    try:
        from .config import SETTINGS
        level_str = SETTINGS.log_level.upper()
    except Exception:
        level_str = os.environ.get("LOG_LEVEL", "INFO").upper()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(level_str, logging.INFO)


def is_production() -> bool:
    """True when ENVIRONMENT=production; console logging then drops to warnings."""
    try:
        from .config import SETTINGS
        return SETTINGS.environment.lower() == "production"
    except Exception:
        return os.environ.get("ENVIRONMENT", "development").lower() == "production"


class SanitizingFormatter(logging.Formatter):
    """
    A logging formatter that sanitizes log messages to prevent log injection
    and keeps Supabase keys and local paths out of log files.
    """

    def format(self, record: logging.LogRecord) -> str:
        if record.msg:
            record.msg = sanitize_log_message(str(record.msg))
        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: sanitize_log_message(str(v)) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(sanitize_log_message(str(arg)) for arg in record.args)
        return super().format(record)


def setup_logging(level: int = None, log_file: bool = True, log_dir: Path = Path("logs")) -> None:
    """
    Configure the root logger for a FounderHub command.

    A rich console handler is always installed. With `log_file` a sanitized
    `founderhub_<timestamp>.log` is also written, so session and upload
    errors can be inspected after the TUI exits.

    Args:
        level: Override log level. If None, uses LOG_LEVEL.
        log_file: Whether to write the sanitized log file.
        log_dir: Directory for the log file.
    """
    if level is None:
        level = get_log_level()

    # In production, reduce console verbosity
    console_level = logging.WARNING if is_production() else level

    handlers = [RichHandler(rich_tracebacks=True, level=console_level)]

    if log_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_handler = logging.FileHandler(
            log_dir / f"founderhub_{timestamp}.log",
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(
            SanitizingFormatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


def quiet_console_logging() -> None:
    """Remove console handlers before the Textual app starts; the log file keeps recording."""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if not isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
