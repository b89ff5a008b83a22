"""Local on-device page cache: one JSON record with a key, timestamp and payload."""

import json
import logging
import os
import tempfile
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from src.core.schemas import Scholarship

logger = logging.getLogger(__name__)

_SCHOLARSHIP_LIST = TypeAdapter(list[Scholarship])


class LocalPageCache:
    """Single-record scholarship cache with a TTL and a versioned key.

    A record written under a different key (an older extraction schema) is
    treated exactly like a missing one.
    """

    def __init__(
        self,
        path: str | Path,
        key: str,
        ttl_hours: float = 24.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._path = Path(path)
        self._key = key
        self._ttl_seconds = ttl_hours * 3600
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Scholarship] | None:
        """Return the cached scholarships, or None when missing, stale or corrupt."""
        if not self._path.exists():
            return None
        try:
            record = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Unreadable cache at %s: %s", self._path, e)
            return None

        if not isinstance(record, dict) or record.get("key") != self._key:
            logger.info("Cache key mismatch at %s — ignoring", self._path)
            return None

        timestamp = record.get("timestamp")
        if not isinstance(timestamp, (int, float)):
            return None
        age = self._clock() - timestamp
        if age >= self._ttl_seconds:
            logger.info("Cache expired (%.1fh old)", age / 3600)
            return None

        try:
            return _SCHOLARSHIP_LIST.validate_python(record.get("data", []))
        except ValidationError as e:
            logger.warning("Cache payload failed validation: %s", e.error_count())
            return None

    def save(self, scholarships: Sequence[Scholarship]) -> bool:
        """Write the payload atomically. Returns False (and logs) on failure."""
        record = {
            "key": self._key,
            "timestamp": self._clock(),
            "data": _SCHOLARSHIP_LIST.dump_python(list(scholarships), mode="json"),
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                suffix=".json", prefix="scholarship_cache_", dir=self._path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(record, f, ensure_ascii=False)
                os.replace(temp_path, self._path)
            except Exception:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise
        except OSError as e:
            logger.error("Failed to write cache %s: %s", self._path, e)
            return False
        logger.info("Cached %d scholarships at %s", len(scholarships), self._path)
        return True

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
