"""Keyword-table categorization.

Coarse substring matching over name + description. A scholarship may match
several rules; no match yields the default category.
"""

from collections.abc import Sequence

from src.core.config import DEFAULT_CATEGORY_RULES, CategoryRule
from src.core.schemas import DEFAULT_CATEGORY


def categorize(
    name: str,
    description: str,
    rules: Sequence[CategoryRule] = DEFAULT_CATEGORY_RULES,
) -> list[str]:
    """Return matching tags in rule-table order, or ``[DEFAULT_CATEGORY]``."""
    text = f"{name} {description}".lower()
    tags: list[str] = []
    for rule in rules:
        if rule.tag not in tags and any(kw in text for kw in rule.keywords):
            tags.append(rule.tag)
    return tags or [DEFAULT_CATEGORY]
