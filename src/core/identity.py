"""Content-derived scholarship IDs.

IDs depend only on (source_id, name, amount) so a re-scrape of the same
listing lands on the same document regardless of page or row position.
"""

import hashlib
import re

_SLUG_SAFE_PATTERN = re.compile(r"[^a-z0-9]+")
_MAX_SLUG_LENGTH = 60
_DIGEST_LENGTH = 8


def normalize_name(name: str) -> str:
    """Lower-case and collapse internal whitespace."""
    return " ".join(name.strip().lower().split())


def slugify(name: str) -> str:
    slug = _SLUG_SAFE_PATTERN.sub("-", normalize_name(name)).strip("-")
    return slug or "scholarship"


def generate_scholarship_id(source_id: str, name: str, amount: int) -> str:
    """Build a deterministic, human-readable scholarship ID.

    The slug is truncated for readability; a digest of the full normalized
    triple keeps truncated slugs from colliding.
    """
    normalized_source = source_id.strip().lower()
    payload = "|".join([normalized_source, normalize_name(name), str(int(amount))])
    digest = hashlib.sha1(payload.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]
    slug = slugify(name)[:_MAX_SLUG_LENGTH].rstrip("-")
    return f"{normalized_source}-{slug}-{int(amount)}-{digest}"
