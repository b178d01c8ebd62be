"""
Best-effort external formatting of generated code.

The formatter only improves readability. If it is missing or fails, the
unformatted code is returned unchanged and generation carries on.
"""

import subprocess
from typing import Optional, Sequence

from ...logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_FORMATTER_COMMAND = ("black", "--quiet", "-")


class FormatterUnavailable(Exception):
    """The external formatter could not be run or reported a failure."""

    pass


def run_formatter(
    code: str,
    command: Sequence[str] = DEFAULT_FORMATTER_COMMAND,
    timeout: Optional[float] = None,
) -> str:
    """
    Pipe code through an external formatter.

    Args:
        code: Source text to format
        command: Formatter command line reading stdin and writing stdout
        timeout: Optional timeout in seconds

    Returns:
        Formatted code

    Raises:
        FormatterUnavailable: If the formatter is missing or fails
    """
    if not command:
        raise FormatterUnavailable("No formatter command configured")

    try:
        result = subprocess.run(
            list(command),
            input=code.encode("utf-8"),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise FormatterUnavailable(f"Formatter not found: {command[0]}") from e
    except subprocess.TimeoutExpired as e:
        raise FormatterUnavailable(f"Formatter timed out after {timeout}s") from e
    except OSError as e:
        raise FormatterUnavailable(f"Failed to run formatter {command[0]}: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise FormatterUnavailable(
            f"Formatter exited with status {result.returncode}: {stderr}"
        )

    try:
        formatted = result.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatterUnavailable("Formatter produced invalid UTF-8") from e

    if not formatted.strip() and code.strip():
        raise FormatterUnavailable("Formatter produced no output")

    return formatted


def format_source(
    code: str,
    command: Sequence[str] = DEFAULT_FORMATTER_COMMAND,
    timeout: Optional[float] = None,
) -> str:
    """Format code if possible, otherwise return it unchanged."""
    try:
        return run_formatter(code, command, timeout)
    except FormatterUnavailable as e:
        logger.debug("Skipping formatting: %s", e)
        return code
