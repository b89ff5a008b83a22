"""Per-user applied/hidden marks on scholarships."""

import logging
import sqlite3
from datetime import datetime
from typing import get_args

from src.core.db import delete_user_status, list_user_statuses, upsert_user_status
from src.core.schemas import ScholarshipStatus, UserScholarshipStatus

logger = logging.getLogger(__name__)

VALID_STATUSES: frozenset[str] = frozenset(get_args(ScholarshipStatus))


class UserStatusStore:
    """Keyed by (user_id, scholarship_id); one status per pair.

    Setting a status overwrites the previous one, so a scholarship is never
    both applied and hidden for the same user.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def set_status(
        self,
        user_id: str,
        scholarship_id: str,
        status: str,
    ) -> UserScholarshipStatus:
        if status not in VALID_STATUSES:
            valid = ", ".join(sorted(VALID_STATUSES))
            msg = f"Invalid status '{status}'. Expected one of: {valid}"
            raise ValueError(msg)
        record = UserScholarshipStatus(
            user_id=user_id,
            scholarship_id=scholarship_id,
            status=status,
            updated_at=datetime.now(),
        )
        upsert_user_status(self._conn, user_id, scholarship_id, status, record.updated_at)
        logger.debug("User '%s' marked '%s' as %s", user_id, scholarship_id, status)
        return record

    def clear_status(self, user_id: str, scholarship_id: str) -> bool:
        """Remove the mark. Returns False when there was nothing to remove."""
        return delete_user_status(self._conn, user_id, scholarship_id)

    def list_by_status(self, user_id: str, status: str) -> list[str]:
        """Scholarship ids the user marked with ``status``, oldest first."""
        if status not in VALID_STATUSES:
            valid = ", ".join(sorted(VALID_STATUSES))
            msg = f"Invalid status '{status}'. Expected one of: {valid}"
            raise ValueError(msg)
        return [row["scholarship_id"] for row in list_user_statuses(self._conn, user_id, status)]

    def get_all_statuses(self, user_id: str) -> dict[str, ScholarshipStatus]:
        """Map of scholarship id → status for every mark the user has."""
        return {
            row["scholarship_id"]: row["status"]
            for row in list_user_statuses(self._conn, user_id)
        }
