"""Utility functions for reading bundles and writing generated code.

This module provides functions for loading schema bundle JSON from files
with proper error handling and validation.
"""

from pathlib import Path
from typing import Union

from .codegen.core.bundle import SchemaBundle, load_bundle
from .codegen.core.errors import BundleFormatError
from .logging_config import get_logger

logger = get_logger(__name__)


class BundleIOError(Exception):
    """Raised when a bundle or generated file cannot be read or written."""

    pass


def load_bundle_from_file(file_path: Union[str, Path]) -> SchemaBundle:
    """Load a schema bundle from a local file.

    Args:
        file_path: Path to the bundle JSON file.

    Returns:
        Parsed SchemaBundle.

    Raises:
        FileNotFoundError: If file doesn't exist.
        BundleIOError: If the file cannot be read.
        BundleFormatError: If the contents are not a valid bundle.
    """
    file_path = Path(file_path)
    logger.debug(f"Attempting to load bundle from file: {file_path}")

    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() != ".json":
        logger.warning(f"File does not have .json extension: {file_path}")

    try:
        data = file_path.read_bytes()
    except OSError as e:
        logger.error(f"Error reading file {file_path}: {e}", exc_info=True)
        raise BundleIOError(f"Error reading file {file_path}: {e}") from e

    try:
        bundle = load_bundle(data)
    except BundleFormatError as e:
        logger.error(f"Invalid bundle in file {file_path}: {e}")
        raise

    logger.info(f"Successfully loaded bundle from {file_path}")
    return bundle


def write_output(code: str, output_path: Union[str, Path]) -> Path:
    """Write generated code, creating parent directories as needed.

    Args:
        code: Generated source text.
        output_path: Destination file.

    Returns:
        The path written to.

    Raises:
        BundleIOError: If the file cannot be written.
    """
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(code, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write {output_path}: {e}", exc_info=True)
        raise BundleIOError(f"Failed to write {output_path}: {e}") from e

    logger.info(f"Wrote generated code to {output_path}")
    return output_path
