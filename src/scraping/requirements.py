"""Eligibility-requirement derivation from free-text descriptions.

Descriptions are prose, not lists, so extraction degrades through three tiers:
  1. Sentence split, keyword + length + boilerplate filters, max 5.
  2. Loose split on '.'/';' keeping 'must' clauses, max 3.
  3. A single pointer to the portal.
"""

import re

REQUIREMENT_KEYWORDS: tuple[str, ...] = (
    "must",
    "eligible",
    "gpa",
    "student",
    "major",
    "enrolled",
    "year",
    "preference",
    "criteria",
)

BOILERPLATE_PHRASES: tuple[str, ...] = ("click here", "apply button")

FALLBACK_REQUIREMENT = "Please review the full eligibility requirements on the website."

MAX_STRICT = 5
MAX_LOOSE = 3

_WS_PATTERN = re.compile(r"\s+")
_SPLIT_DECIMAL = re.compile(r"(\d)\. (\d)")
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.?!;])\s+(?=[A-Z])")
_LOOSE_BOUNDARY = re.compile(r"[.;]")


def clean_description(description: str) -> str:
    """Collapse whitespace and repair decimals split by markup ("3. 0" → "3.0")."""
    text = _WS_PATTERN.sub(" ", description).strip()
    return _SPLIT_DECIMAL.sub(r"\1.\2", text)


def derive_requirements(description: str) -> list[str]:
    """Return an ordered list of short eligibility statements (never empty)."""
    text = clean_description(description)

    strict = [s.strip() for s in _SENTENCE_BOUNDARY.split(text)]
    requirements = [s for s in strict if _is_requirement(s)][:MAX_STRICT]
    if requirements:
        return requirements

    loose = [s.strip() for s in _LOOSE_BOUNDARY.split(text)]
    requirements = [s for s in loose if len(s) > 20 and "must" in s.lower()][:MAX_LOOSE]
    if requirements:
        return requirements

    return [FALLBACK_REQUIREMENT]


def _is_requirement(sentence: str) -> bool:
    if not 15 < len(sentence) < 200:
        return False
    lower = sentence.lower()
    if any(phrase in lower for phrase in BOILERPLATE_PHRASES):
        return False
    return any(kw in lower for kw in REQUIREMENT_KEYWORDS)
