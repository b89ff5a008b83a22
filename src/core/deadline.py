"""Deadline normalization shared by the extractor and the store writer."""

import logging
import re
from datetime import datetime

from dateutil import parser as date_parser

from src.core.schemas import SEE_WEBSITE

logger = logging.getLogger(__name__)

_HAS_DIGIT = re.compile(r"\d")
# Two defaults differing in year, month and day: a field missing from the
# text shows up as a difference between the two parses.
_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def is_see_website(text: str) -> bool:
    return text.strip().lower() == SEE_WEBSITE.lower()


def parse_deadline(text: str | None) -> str | None:
    """Normalize deadline text.

    Returns:
        ``SEE_WEBSITE`` for empty text or the sentinel itself, an ISO
        ``YYYY-MM-DD`` string for a complete calendar date, or None when the
        text is present but not a full date ("Rolling", "May 1", "12").
    """
    if text is None:
        return SEE_WEBSITE
    cleaned = " ".join(text.split())
    if not cleaned or is_see_website(cleaned):
        return SEE_WEBSITE
    if not _HAS_DIGIT.search(cleaned):
        return None
    try:
        first, second = (date_parser.parse(cleaned, default=d).date() for d in _DEFAULTS)
    except (ValueError, OverflowError):
        logger.debug("Unparseable deadline '%s'", cleaned)
        return None
    if first != second:
        logger.debug("Partial deadline '%s' (no full year/month/day)", cleaned)
        return None
    return first.isoformat()
