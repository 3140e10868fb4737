"""
Shared utilities for the Diff-Diff tuning pipeline.

This module provides common functions used across multiple modules
to avoid code duplication.
"""

import sys
from pathlib import Path

# Enable both `python src/utils.py` and `python -m src.utils` execution modes.
# This ensures src.config imports work regardless of how the script is invoked.
_project_root = str(Path(__file__).parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import logging
import shutil
import tempfile

from src.config import ALLOWED_COMMANDS


# --- Logging Setup ---
def setup_logging(name: str | None = None, level: int = logging.INFO) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__ from the calling module)
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


# --- File Operations ---
def _atomic_write(path: Path, suffix: str, write) -> None:
    """Run `write(tmp_name)` against a temp file, then move it over `path`."""
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            delete=False,
            suffix=suffix,
            dir=path.parent  # Same filesystem for atomic move
        ) as tmp:
            tmp_path = Path(tmp.name)
        write(tmp.name)

        # Atomic move (rename) to final destination
        shutil.move(str(tmp_path), str(path))

    except Exception:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise


def atomic_write_csv(df, path: Path, **kwargs) -> None:
    """
    Write a DataFrame to CSV atomically using a temporary file.

    This prevents data corruption if the write is interrupted.

    Args:
        df: pandas DataFrame to write
        path: Destination path for the CSV file
        **kwargs: Additional arguments to pass to df.to_csv()
    """
    logger = setup_logging(__name__)
    _atomic_write(path, '.csv', lambda tmp_name: df.to_csv(tmp_name, **kwargs))
    logger.debug(f"Atomically wrote {len(df)} rows to {path}")


def atomic_write_json(df, path: Path) -> None:
    """
    Dump a DataFrame as an indented JSON array of records, atomically.

    Args:
        df: pandas DataFrame to write
        path: Destination path for the JSON file
    """
    logger = setup_logging(__name__)
    _atomic_write(path, '.json', lambda tmp_name: df.to_json(tmp_name, orient='records', indent=2))
    logger.debug(f"Atomically wrote {len(df)} records to {path}")


# --- Validation ---
def validate_command(command: str) -> None:
    """
    Validate that a worker command name is known.

    Args:
        command: Command name to validate

    Raises:
        ValueError: If command is not in ALLOWED_COMMANDS
    """
    if command not in ALLOWED_COMMANDS:
        raise ValueError(
            f"Invalid command: '{command}'. "
            f"Allowed values: {', '.join(sorted(ALLOWED_COMMANDS))}"
        )


__all__ = [
    # Logging
    'setup_logging',
    # File operations
    'atomic_write_csv',
    'atomic_write_json',
    # Validation
    'validate_command',
]
