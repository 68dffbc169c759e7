"""Logging utilities for Tilegrid.

Provides color-coded output to distinguish codec work, warnings and failures.
"""

import os
from enum import Enum

from .config import Config


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Codec operations (encode, decode)
    YELLOW = "\033[93m"    # Recoverable oddities in stored data
    RED = "\033[91m"       # Errors
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if TILEGRID_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("TILEGRID_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def _verbose() -> bool:
    return Config.LOG_LEVEL in ("DEBUG", "INFO")


def log_codec(message: str) -> None:
    """Log a codec operation (blue)."""
    if _verbose():
        print(colored(f"{MARKER_CODEC} {message}", Color.BLUE))


def log_warning(message: str) -> None:
    """Log a recoverable oddity (yellow)."""
    if Config.LOG_LEVEL != "ERROR":
        print(colored(f"{MARKER_WARNING} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log an error (red)."""
    print(colored(f"{MARKER_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    if _verbose():
        print(colored(f"{MARKER_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    if _verbose():
        print(colored(f"{MARKER_INFO} {message}", Color.CYAN))


# Markers for operation types (color-blind accessible)
MARKER_CODEC = "[•]"
MARKER_WARNING = "[?]"
MARKER_ERROR = "[!]"
MARKER_SUCCESS = "[✓]"
MARKER_INFO = "[i]"
