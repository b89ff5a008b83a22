"""AcademicWorks row extractor — converts listing-table rows into Scholarship objects.

Design rules:
  - Every selector lookup uses a fallback tuple (see selectors.py).
  - Missing optional fields fall back to defaults; they never fail the row.
  - A row without a usable deep link, or with a deadline that is neither a
    date nor "See Website", is invalid and yields None.
"""

import logging
import re
from collections.abc import Sequence

from bs4 import BeautifulSoup, Tag

from src.core.config import DEFAULT_CATEGORY_RULES, CategoryRule
from src.core.deadline import parse_deadline
from src.core.identity import generate_scholarship_id
from src.core.schemas import Scholarship, Source
from src.scraping.categorizer import categorize
from src.scraping.requirements import derive_requirements
from src.scraping.selectors import (
    AMOUNT_SELECTORS,
    DEADLINE_SELECTORS,
    DESCRIPTION_SELECTORS,
    NAME_LINK_SELECTORS,
    ROW_SELECTORS,
)
from src.scraping.urls import is_bare_base_url, resolve_link

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Scholarship Opportunity"
UNKNOWN_NAME = "Unknown Scholarship"
NO_DESCRIPTION = "No description available."

_CURRENCY_CHARS = re.compile(r"[$€£¥,]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def parse_rows(html: str) -> list[Tag]:
    """Return the listing rows of a page, trying each row selector in order."""
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    for selector in ROW_SELECTORS:
        # Header rows carry only <th> cells.
        rows = [row for row in soup.select(selector) if row.find("td") is not None]
        if rows:
            return rows
    return []


def parse_amount(text: str | None) -> int:
    """'$2,500' → 2500; '$1,000 - $5,000' → 1000. Missing or non-numeric ('Varies') → 0."""
    if not text:
        return 0
    cleaned = _CURRENCY_CHARS.sub("", text).strip()
    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return 0
    return int(float(match.group()))


class FieldExtractor:
    """Extracts one Scholarship per listing row."""

    def __init__(self, category_rules: Sequence[CategoryRule] = DEFAULT_CATEGORY_RULES) -> None:
        self._rules = tuple(category_rules)

    def extract_rows(self, rows: list[Tag], source: Source, page_index: int) -> list[Scholarship]:
        """Extract every row, dropping invalid ones and any that raise."""
        results: list[Scholarship] = []
        for row in rows:
            try:
                scholarship = self.extract(row, source, page_index)
            except Exception:
                logger.debug("Failed to extract row on %s page %d, skipping",
                             source.id, page_index, exc_info=True)
                continue
            if scholarship is not None:
                results.append(scholarship)
        return results

    def extract(self, row: Tag, source: Source, page_index: int) -> Scholarship | None:
        """Extract a single row.

        ``page_index`` is only used for logging — IDs are content-derived.
        Returns None for an invalid row.
        """
        name, link = self._parse_name_and_link(row, source)
        if not name or name == UNKNOWN_NAME or not link:
            logger.debug("Row on %s page %d has no usable name/link — skipping",
                         source.id, page_index)
            return None

        raw_deadline = self._text(row, DEADLINE_SELECTORS)
        deadline = parse_deadline(raw_deadline)
        if deadline is None:
            logger.debug("Row '%s' on %s has unparseable deadline '%s' — skipping",
                         name, source.id, raw_deadline)
            return None

        amount = parse_amount(self._text(row, AMOUNT_SELECTORS))
        description = self._text(row, DESCRIPTION_SELECTORS) or NO_DESCRIPTION

        return Scholarship(
            id=generate_scholarship_id(source.id, name, amount),
            source_id=source.id,
            name=name,
            provider=f"{source.display_name} External Opportunities",
            amount=amount,
            deadline=deadline,
            description=description,
            requirements=derive_requirements(description),
            url=link,
            categories=categorize(name, description, self._rules),
        )

    # --- Private helpers ---

    def _parse_name_and_link(self, row: Tag, source: Source) -> tuple[str, str]:
        anchor = self._find_first(row, NAME_LINK_SELECTORS)
        if anchor is None:
            return "", ""
        href = str(anchor.get("href") or "").strip()
        if not href or href.startswith(("#", "javascript:")):
            return "", ""
        link = resolve_link(href, source.base_url)
        if is_bare_base_url(link, source.base_url):
            return "", ""
        name = " ".join(anchor.get_text().split())
        return name or PLACEHOLDER_NAME, link

    def _text(self, row: Tag, selectors: tuple[str, ...]) -> str:
        """First non-empty text for the selectors, or ""."""
        el = self._find_first(row, selectors)
        if el is None:
            return ""
        return el.get_text().strip()

    @staticmethod
    def _find_first(parent: Tag, selectors: tuple[str, ...]) -> Tag | None:
        for selector in selectors:
            el = parent.select_one(selector)
            if el is not None:
                return el
        return None
