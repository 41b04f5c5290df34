"""Logging utilities for tagverse games.

Provides color-coded console output to tell apart strategy decisions,
inter-agent communication and round lifecycle events.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Strategy decisions (deterministic math)
    MAGENTA = "\033[95m"   # Communication bus traffic
    RED = "\033[91m"       # Rejected sends, errors
    GREEN = "\033[92m"     # Tags, round/game completion
    CYAN = "\033[96m"      # Info/metadata
    YELLOW = "\033[93m"    # Lifecycle changes (pause, resume, stop)

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
        Colorized text if TAGVERSE_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("TAGVERSE_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def log_decision(message: str) -> None:
    """Log a strategy decision (blue)."""
    print(colored(f"{LOG_TAG_DECISION} {message}", Color.BLUE))


def log_communication(message: str) -> None:
    """Log bus traffic (magenta)."""
    print(colored(f"{LOG_TAG_COMMUNICATION} {message}", Color.MAGENTA))


def log_error(message: str) -> None:
    """Log an error or rejected operation (red)."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a tag or completion (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_lifecycle(message: str) -> None:
    """Log a phase change (yellow)."""
    print(colored(f"{LOG_TAG_LIFECYCLE} {message}", Color.YELLOW))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


# Markers for operation types (color-blind accessible)
LOG_TAG_DECISION = "[•]"       # Strategy decision
LOG_TAG_COMMUNICATION = "[~]"  # Bus message
LOG_TAG_ERROR = "[!]"          # Error/rejection
LOG_TAG_SUCCESS = "[✓]"        # Tag/completion
LOG_TAG_LIFECYCLE = "[>]"      # Phase change
LOG_TAG_INFO = "[i]"           # Information
