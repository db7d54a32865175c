"""SQLite persistence for job postings and their keyword index."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Sequence

import structlog

from ..engine.identity import unique
from ..engine.text import parse_absolute_date, to_iso
from ..errors import StorageError
from ..models import JobPosting, UpsertResult

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS job_postings (
        id TEXT PRIMARY KEY,
        source TEXT NOT NULL,
        external_id TEXT,
        title TEXT NOT NULL,
        company TEXT,
        location TEXT,
        description TEXT,
        url TEXT NOT NULL,
        listed_at TEXT,
        tags TEXT,
        raw TEXT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS job_keywords (
        job_id TEXT NOT NULL,
        keyword TEXT NOT NULL,
        PRIMARY KEY (job_id, keyword),
        FOREIGN KEY (job_id) REFERENCES job_postings(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_job_listed_at ON job_postings(listed_at)",
    "CREATE INDEX IF NOT EXISTS idx_job_company ON job_postings(company)",
    "CREATE INDEX IF NOT EXISTS idx_job_keywords ON job_keywords(keyword)",
)

# listed_at and raw never regress to NULL once known.
UPSERT_SQL = """
    INSERT INTO job_postings (
        id, source, external_id, title, company, location, description, url, listed_at, tags, raw
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(id) DO UPDATE SET
        source = excluded.source,
        external_id = excluded.external_id,
        title = excluded.title,
        company = excluded.company,
        location = excluded.location,
        description = excluded.description,
        url = excluded.url,
        listed_at = COALESCE(excluded.listed_at, job_postings.listed_at),
        tags = excluded.tags,
        raw = COALESCE(excluded.raw, job_postings.raw),
        updated_at = CURRENT_TIMESTAMP
"""

# Stay well below SQLite's bound-parameter limit.
_ID_CHUNK = 500


def _to_sql_timestamp(value: str | None) -> str | None:
    parsed = parse_absolute_date(value)
    return to_iso(parsed) if parsed is not None else None


def _nullable(value: str | None) -> str | None:
    return value or None


class JobStore:
    """Transactional batch writer addressed by database file path.

    No connection outlives a call: ``bootstrap`` and ``upsert`` each open their
    own connection and close it before returning.
    """

    def __init__(self, path: Path, logger: structlog.BoundLogger | None = None) -> None:
        self.path = Path(path)
        self.logger = logger or structlog.get_logger("job_ingest.storage")

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path, isolation_level=None)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Cannot open database {self.path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
        finally:
            conn.close()

    # ------------------------------------------------------------------
    def bootstrap(self) -> None:
        try:
            with self._connect() as conn:
                conn.execute("PRAGMA journal_mode = WAL")
                for statement in SCHEMA:
                    conn.execute(statement)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to bootstrap {self.path}: {exc}") from exc
        self.logger.info("storage_ready", path=str(self.path))

    def upsert(self, jobs: Sequence[JobPosting]) -> UpsertResult:
        """Write a batch in one transaction; any failure rolls the whole batch back."""

        if not jobs:
            return UpsertResult()
        try:
            with self._connect() as conn:
                conn.execute("BEGIN")
                try:
                    existing = self._existing_ids(conn, [job.id for job in jobs])
                    for job in jobs:
                        conn.execute(UPSERT_SQL, self._row(job))
                        conn.execute("DELETE FROM job_keywords WHERE job_id = ?", (job.id,))
                        conn.executemany(
                            "INSERT OR IGNORE INTO job_keywords (job_id, keyword) VALUES (?, ?)",
                            [
                                (job.id, keyword)
                                for keyword in unique(k.lower() for k in job.keywords if k)
                            ],
                        )
                    conn.execute("COMMIT")
                except BaseException:
                    if conn.in_transaction:
                        conn.execute("ROLLBACK")
                    raise
        except sqlite3.Error as exc:
            raise StorageError(f"Upsert of {len(jobs)} job(s) failed: {exc}") from exc

        result = UpsertResult()
        seen = set(existing)
        for job in jobs:
            if job.id in seen:
                result.updated += 1
            else:
                result.inserted += 1
                seen.add(job.id)
        self.logger.info(
            "upsert_committed",
            path=str(self.path),
            inserted=result.inserted,
            updated=result.updated,
        )
        return result

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------
    def get(self, job_id: str) -> dict[str, Any] | None:
        with self._reading() as conn:
            row = conn.execute("SELECT * FROM job_postings WHERE id = ?", (job_id,)).fetchone()
        return self._decode(row) if row is not None else None

    def keywords_for(self, job_id: str) -> list[str]:
        with self._reading() as conn:
            rows = conn.execute(
                "SELECT keyword FROM job_keywords WHERE job_id = ? ORDER BY keyword", (job_id,)
            ).fetchall()
        return [row["keyword"] for row in rows]

    def find_by_keyword(self, keyword: str, limit: int = 50) -> list[dict[str, Any]]:
        with self._reading() as conn:
            rows = conn.execute(
                """
                SELECT p.* FROM job_postings p
                JOIN job_keywords k ON k.job_id = p.id
                WHERE k.keyword = ?
                ORDER BY p.listed_at IS NULL, p.listed_at DESC
                LIMIT ?
                """,
                (keyword.lower(), limit),
            ).fetchall()
        return [self._decode(row) for row in rows]

    def count(self) -> int:
        with self._reading() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM job_postings").fetchone()[0])

    # ------------------------------------------------------------------
    @contextmanager
    def _reading(self) -> Iterator[sqlite3.Connection]:
        try:
            with self._connect() as conn:
                yield conn
        except sqlite3.Error as exc:
            raise StorageError(f"Query against {self.path} failed: {exc}") from exc

    @staticmethod
    def _existing_ids(conn: sqlite3.Connection, job_ids: Sequence[str]) -> set[str]:
        ids = unique(job_ids)
        found: set[str] = set()
        for start in range(0, len(ids), _ID_CHUNK):
            chunk = ids[start : start + _ID_CHUNK]
            placeholders = ",".join("?" for _ in chunk)
            rows = conn.execute(
                f"SELECT id FROM job_postings WHERE id IN ({placeholders})", chunk
            ).fetchall()
            found.update(row["id"] for row in rows)
        return found

    @staticmethod
    def _row(job: JobPosting) -> tuple[Any, ...]:
        return (
            job.id,
            job.source,
            _nullable(job.external_id),
            job.title or "",
            _nullable(job.company),
            _nullable(job.location),
            _nullable(job.description),
            job.url,
            _to_sql_timestamp(job.listed_at),
            json.dumps(unique(job.tags), ensure_ascii=False),
            json.dumps(job.raw, ensure_ascii=False, default=str) if job.raw else None,
        )

    @staticmethod
    def _decode(row: sqlite3.Row) -> dict[str, Any]:
        record = dict(row)
        record["tags"] = json.loads(record["tags"]) if record.get("tags") else []
        record["raw"] = json.loads(record["raw"]) if record.get("raw") else None
        return record


def bootstrap(path: Path) -> JobStore:
    store = JobStore(path)
    store.bootstrap()
    return store


def upsert(path: Path, jobs: Sequence[JobPosting]) -> UpsertResult:
    return JobStore(path).upsert(jobs)


__all__ = ["JobStore", "SCHEMA", "bootstrap", "upsert"]
