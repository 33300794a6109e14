"""Terminal styling for command output.

Falls back to plain text when ANSI colors aren't supported.
"""

import os
import sys


def _supports_color() -> bool:
    """Check if the terminal supports ANSI colors."""
    # Force colors with FORCE_COLOR env var
    if os.environ.get("FORCE_COLOR"):
        return True

    # Disable colors if NO_COLOR env var is set
    if os.environ.get("NO_COLOR"):
        return False

    # Disable colors if not a TTY
    if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
        return False

    if os.name == "nt":
        # Windows Terminal, VS Code and Git Bash handle ANSI codes
        return bool(
            os.environ.get("WT_SESSION")
            or os.environ.get("TERM_PROGRAM") == "vscode"
            or os.environ.get("TERM")
        )

    return True


# Check once at import time
USE_COLOR = _supports_color()


def dim(text: str) -> str:
    """Dim/gray text."""
    if USE_COLOR:
        return f"\033[90m{text}\033[0m"
    return text


def bold(text: str) -> str:
    """Bold text."""
    if USE_COLOR:
        return f"\033[1m{text}\033[0m"
    return text


def green(text: str) -> str:
    """Green text (success)."""
    if USE_COLOR:
        return f"\033[32m{text}\033[0m"
    return text


def yellow(text: str) -> str:
    """Yellow text (line numbers)."""
    if USE_COLOR:
        return f"\033[33m{text}\033[0m"
    return text


def red(text: str) -> str:
    """Red text (error)."""
    if USE_COLOR:
        return f"\033[31m{text}\033[0m"
    return f"! {text}"


def format_location(path: str, line_number: int, text: str) -> str:
    """Format one result as `path:line: text`, grep style."""
    return f"{bold(path)}:{yellow(str(line_number))}: {text}"
