"""
Shared utilities for the Mundial stats engine.

This module provides common functions used across multiple modules
to avoid code duplication.
"""

import json
import logging
import re
import shutil
import tempfile
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path

from mundial_stats.config import ALLOWED_MODES, CSV_URLS

# --- Shared Regex Patterns ---
# Leading integer, optional sign: "12", " -3", "7.9" -> 7, "4pts" -> 4
LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

# Any non-digit character, used to pull the number out of a round label ("RD 10" -> "10")
NON_DIGIT_RE = re.compile(r"\D")


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


# --- Safe Parsing ---
def parse_or_zero(value) -> int:
    """
    Parse the leading integer of a raw cell, defaulting to 0.

    Contract: never raises. Blank, missing or non-numeric text gives 0;
    trailing garbage after the digits is ignored ("12.7" -> 12, "3 pts" -> 3).

    Args:
        value: Raw cell value (usually a string, None tolerated)

    Returns:
        Parsed integer, or 0
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    match = LEADING_INT_RE.match(str(value))
    if not match:
        return 0
    return int(match.group(1))


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round a float half away from zero at the given number of decimals.

    Python's round() is half-to-even; display figures here round halves up
    (12.5% -> 13%, 0.125 -> 0.13).
    """
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def format_average(total: int, count: int, digits: int = 2) -> str:
    """Format total/count with fixed decimals, "0.00" when count is zero."""
    if count <= 0:
        return f"{0:.{digits}f}"
    return f"{round_half_up(total / count, digits):.{digits}f}"


def clean_key(name: str | None) -> str:
    """Cross-reference key: trimmed and case-folded."""
    return (name or "").strip().lower()


def round_sort_key(label: str) -> tuple[int, str]:
    """
    Sort key for round labels such as "RD1", "RD 10", "Rodada 2".

    Digits within the label are concatenated into one number; labels
    without digits sort as 0. Lexical order breaks ties.
    """
    digits = NON_DIGIT_RE.sub("", label or "")
    return (int(digits) if digits else 0, label or "")


# --- File Operations ---
def atomic_write_json(data: dict, path: Path) -> None:
    """
    Write a JSON document atomically using a temporary file.

    This prevents a half-written settings file if the write is interrupted.

    Args:
        data: JSON-serializable mapping
        path: Destination path for the JSON file
    """
    logger = setup_logging(__name__)

    # Ensure parent directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    # Write to temp file first
    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            delete=False,
            suffix='.json',
            dir=path.parent,  # Same filesystem for atomic move
            encoding='utf-8',
        ) as tmp:
            json.dump(data, tmp, ensure_ascii=False, indent=2)
            tmp_path = Path(tmp.name)

        # Atomic move (rename) to final destination
        shutil.move(str(tmp_path), str(path))
        logger.debug(f"Atomically wrote {len(data)} keys to {path}")

    except Exception:
        # Clean up temp file if it exists
        if 'tmp_path' in locals() and tmp_path.exists():
            tmp_path.unlink()
        raise


# --- Validation ---
def validate_mode(mode: str) -> None:
    """
    Validate a kill-feed viewing mode.

    Raises:
        ValueError: If mode is not in ALLOWED_MODES
    """
    if mode not in ALLOWED_MODES:
        raise ValueError(
            f"Invalid mode: '{mode}'. "
            f"Allowed values: {', '.join(sorted(ALLOWED_MODES))}"
        )


def validate_source_keys(urls: dict) -> None:
    """
    Validate that every key of a source mapping is a known dataset.

    Raises:
        ValueError: If any key is not in CSV_URLS
    """
    unknown = sorted(set(urls) - set(CSV_URLS))
    if unknown:
        raise ValueError(
            f"Unknown source keys: {', '.join(unknown)}. "
            f"Allowed values: {', '.join(sorted(CSV_URLS))}"
        )


__all__ = [
    # Logging
    'setup_logging',
    # Parsing
    'parse_or_zero',
    'round_half_up',
    'format_average',
    'clean_key',
    'round_sort_key',
    'LEADING_INT_RE',
    'NON_DIGIT_RE',
    # File operations
    'atomic_write_json',
    # Validation
    'validate_mode',
    'validate_source_keys',
]
