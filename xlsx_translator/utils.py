"""Utility functions for xlsx translation."""

import re
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Double-quoted string literals inside a formula; "" is an escaped quote.
FORMULA_STRING_PATTERN = re.compile(r'"((?:[^"]|"")*)"')


def is_translatable(text) -> bool:
    """Check if text has anything worth translating.

    Empty strings, whitespace and text without a single alphabetic character
    (numbers, dates typed as text, punctuation) are left alone.

    Args:
        text: Text to check

    Returns:
        True if text contains at least one letter
    """
    if not isinstance(text, str):
        return False

    return any(ch.isalpha() for ch in text)


def normalize_key(text: str) -> str:
    """Normalize text for dictionary lookups.

    Args:
        text: Source text

    Returns:
        Text stripped of surrounding whitespace and lower-cased
    """
    return text.strip().lower()


def is_formula(value) -> bool:
    """Check if a cell value is a formula."""
    return isinstance(value, str) and value.startswith("=")


def shorten(text: str, width: int = 50) -> str:
    if len(text) <= width:
        return text
    return text[:width] + "..."


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Set up logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
    """
    handlers = [logging.StreamHandler()]

    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
