"""SQLite document store for scholarships and per-user statuses."""

import sqlite3
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

_SCHOLARSHIPS_TABLE = """
CREATE TABLE IF NOT EXISTS scholarships (
    id              TEXT    PRIMARY KEY,
    name            TEXT    NOT NULL,
    provider        TEXT    NOT NULL DEFAULT '',
    amount          INTEGER NOT NULL DEFAULT 0,
    deadline        TEXT,
    link            TEXT    NOT NULL,
    description     TEXT    NOT NULL DEFAULT '',
    requirements    TEXT    NOT NULL DEFAULT '[]',
    university_id   TEXT    NOT NULL,
    categories      TEXT    NOT NULL DEFAULT '[]',
    region          TEXT    NOT NULL DEFAULT 'National',
    updated_at      TEXT    NOT NULL
);
"""

_SCHOLARSHIPS_NAME_INDEX = """
CREATE INDEX IF NOT EXISTS idx_scholarships_name ON scholarships (name, id);
"""

_USER_SCHOLARSHIPS_TABLE = """
CREATE TABLE IF NOT EXISTS user_scholarships (
    user_id         TEXT NOT NULL,
    scholarship_id  TEXT NOT NULL,
    status          TEXT NOT NULL CHECK (status IN ('applied', 'hidden')),
    updated_at      TEXT NOT NULL,
    PRIMARY KEY (user_id, scholarship_id)
);
"""

_UPSERT_SCHOLARSHIP = """
INSERT INTO scholarships
    (id, name, provider, amount, deadline, link, description,
     requirements, university_id, categories, region, updated_at)
VALUES
    (:id, :name, :provider, :amount, :deadline, :link, :description,
     :requirements, :university_id, :categories, :region, :updated_at)
ON CONFLICT(id) DO UPDATE SET
    name = excluded.name,
    provider = excluded.provider,
    amount = excluded.amount,
    deadline = excluded.deadline,
    link = excluded.link,
    description = excluded.description,
    requirements = excluded.requirements,
    university_id = excluded.university_id,
    categories = excluded.categories,
    region = excluded.region,
    updated_at = excluded.updated_at
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_SCHOLARSHIPS_TABLE)
    conn.execute(_SCHOLARSHIPS_NAME_INDEX)
    conn.execute(_USER_SCHOLARSHIPS_TABLE)
    conn.commit()
    return conn


def bulk_upsert_scholarships(
    conn: sqlite3.Connection,
    documents: Sequence[dict[str, Any]],
) -> int:
    """Upsert a chunk of scholarship documents in a single transaction.

    Either every document in the chunk is written or none is.
    Returns the number of documents written.
    """
    if not documents:
        return 0
    with conn:
        conn.executemany(_UPSERT_SCHOLARSHIP, documents)
    return len(documents)


def count_scholarships(conn: sqlite3.Connection) -> int:
    row = conn.execute("SELECT COUNT(*) AS n FROM scholarships").fetchone()
    return int(row["n"])


def fetch_scholarships_after(
    conn: sqlite3.Connection,
    after: tuple[str, str] | None,
    limit: int,
) -> list[sqlite3.Row]:
    """Return up to ``limit`` documents ordered by (name, id), strictly after ``after``."""
    if after is None:
        return conn.execute(
            "SELECT * FROM scholarships ORDER BY name, id LIMIT ?",
            (limit,),
        ).fetchall()
    name, doc_id = after
    return conn.execute(
        """
        SELECT * FROM scholarships
        WHERE name > ? OR (name = ? AND id > ?)
        ORDER BY name, id
        LIMIT ?
        """,
        (name, name, doc_id, limit),
    ).fetchall()


def fetch_cursor_after(
    conn: sqlite3.Connection,
    after: tuple[str, str] | None,
    limit: int,
) -> tuple[str, str] | None:
    """Return the (name, id) key of the last document in the next ``limit`` rows.

    Key-only variant of fetch_scholarships_after used when re-walking pages.
    Returns None when there are no rows after ``after``.
    """
    if after is None:
        rows = conn.execute(
            "SELECT name, id FROM scholarships ORDER BY name, id LIMIT ?",
            (limit,),
        ).fetchall()
    else:
        name, doc_id = after
        rows = conn.execute(
            """
            SELECT name, id FROM scholarships
            WHERE name > ? OR (name = ? AND id > ?)
            ORDER BY name, id
            LIMIT ?
            """,
            (name, name, doc_id, limit),
        ).fetchall()
    if not rows:
        return None
    return (rows[-1]["name"], rows[-1]["id"])


def get_scholarship(conn: sqlite3.Connection, scholarship_id: str) -> sqlite3.Row | None:
    return conn.execute(
        "SELECT * FROM scholarships WHERE id = ?",
        (scholarship_id,),
    ).fetchone()


def get_scholarships_by_ids(
    conn: sqlite3.Connection,
    scholarship_ids: Sequence[str],
    batch_size: int = 500,
) -> list[sqlite3.Row]:
    """Fetch documents by id, in no particular order. Unknown ids are ignored."""
    rows: list[sqlite3.Row] = []
    for start in range(0, len(scholarship_ids), batch_size):
        batch = list(scholarship_ids[start:start + batch_size])
        placeholders = ", ".join("?" * len(batch))
        rows.extend(conn.execute(
            f"SELECT * FROM scholarships WHERE id IN ({placeholders})",
            batch,
        ).fetchall())
    return rows


def delete_scholarships_older_than(conn: sqlite3.Connection, cutoff: datetime) -> int:
    """Delete documents not refreshed since ``cutoff``. Returns rows deleted."""
    with conn:
        cursor = conn.execute(
            "DELETE FROM scholarships WHERE updated_at < ?",
            (cutoff.isoformat(),),
        )
    return cursor.rowcount


def upsert_user_status(
    conn: sqlite3.Connection,
    user_id: str,
    scholarship_id: str,
    status: str,
    updated_at: datetime,
) -> None:
    """Insert or overwrite the single status record for (user_id, scholarship_id)."""
    conn.execute(
        """
        INSERT INTO user_scholarships (user_id, scholarship_id, status, updated_at)
        VALUES (?, ?, ?, ?)
        ON CONFLICT(user_id, scholarship_id)
        DO UPDATE SET status = excluded.status, updated_at = excluded.updated_at
        """,
        (user_id, scholarship_id, status, updated_at.isoformat()),
    )
    conn.commit()


def delete_user_status(conn: sqlite3.Connection, user_id: str, scholarship_id: str) -> bool:
    """Delete a status record. Returns True if a row was removed."""
    cursor = conn.execute(
        "DELETE FROM user_scholarships WHERE user_id = ? AND scholarship_id = ?",
        (user_id, scholarship_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def list_user_statuses(
    conn: sqlite3.Connection,
    user_id: str,
    status: str | None = None,
) -> list[sqlite3.Row]:
    """Return a user's status records, optionally filtered by status."""
    if status is None:
        return conn.execute(
            """
            SELECT scholarship_id, status, updated_at FROM user_scholarships
            WHERE user_id = ? ORDER BY updated_at
            """,
            (user_id,),
        ).fetchall()
    return conn.execute(
        """
        SELECT scholarship_id, status, updated_at FROM user_scholarships
        WHERE user_id = ? AND status = ? ORDER BY updated_at
        """,
        (user_id, status),
    ).fetchall()
