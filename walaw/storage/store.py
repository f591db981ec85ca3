"""
SQLite document store.

The store is an explicit handle: open it, pass it to the orchestrator or the
query engine, close it. A writer opens the file read-write (WAL journal so
readers are never blocked); the query side opens the same file read-only.

Every upsert writes the primary row and its FTS row in one transaction, so a
reader sees either the old pair or the new pair, never a row without its
index entry.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional
from urllib.request import pathname2url

from ..models import CrawlProgress, CrawlStatus, Family, LegalSection, RuleDocument
from .schema import SCHEMA_VERSION, schema_script

logger = logging.getLogger(__name__)


class StoreConstraintError(Exception):
    """A write was rejected before reaching storage (empty text, missing key)."""


class StoreUnavailableError(Exception):
    """The store file cannot be opened or created."""


class DocumentStore:
    """
    Persistent store for RCW/WAC sections, court rules and crawl progress.

    Usage:
        with DocumentStore.open("data/washington-laws.db") as store:
            store.init_schema()
            store.upsert_section(Family.RCW, section)
    """

    def __init__(self, conn: sqlite3.Connection, path: str, read_only: bool = False):
        self.conn = conn
        self.path = path
        self.read_only = read_only

    @classmethod
    def open(cls, path: str | Path, read_only: bool = False) -> "DocumentStore":
        """Open (or create) the store file.

        Args:
            path: SQLite file path
            read_only: Open with ``mode=ro``; the file must already exist

        Raises:
            StoreUnavailableError: If the file cannot be opened or created
        """
        path = Path(path)
        try:
            if read_only:
                if not path.exists():
                    raise StoreUnavailableError(f"Store not found: {path}")
                conn = sqlite3.connect(
                    f"file:{pathname2url(str(path.resolve()))}?mode=ro", uri=True, check_same_thread=False
                )
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(str(path))
                conn.execute("PRAGMA journal_mode = WAL")
            conn.row_factory = sqlite3.Row
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailableError(f"Cannot open store {path}: {e}") from e

        mode = "read-only" if read_only else "read-write"
        logger.info(f"[STORE] Opened {path} ({mode})")
        return cls(conn, str(path), read_only=read_only)

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            logger.debug(f"[STORE] Closed {self.path}")

    def __enter__(self) -> "DocumentStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_writable(self) -> None:
        if self.read_only:
            raise StoreConstraintError("Store is open read-only")

    # ------------------------------------------------------------------
    # Schema and metadata
    # ------------------------------------------------------------------

    def init_schema(self) -> None:
        """Create tables and indexes if missing, and stamp the schema version."""
        self._require_writable()
        with self.conn:
            self.conn.executescript(schema_script())
        self.set_metadata("version", SCHEMA_VERSION)
        logger.info(f"[STORE] Schema ready (version {SCHEMA_VERSION})")

    def set_metadata(self, key: str, value: str) -> None:
        self._require_writable()
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO metadata (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )

    def get_metadata(self, key: str) -> Optional[str]:
        row = self.conn.execute("SELECT value FROM metadata WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def stamp_last_update(self) -> None:
        """Record the current time as the corpus ``last_update`` marker."""
        row = self.conn.execute("SELECT CURRENT_TIMESTAMP AS now").fetchone()
        self.set_metadata("last_update", row["now"])

    # ------------------------------------------------------------------
    # Upserts
    # ------------------------------------------------------------------

    def upsert_section(self, family: Family, section: LegalSection) -> int:
        """Insert or overwrite one RCW/WAC section and refresh its FTS row.

        Returns:
            The primary row id

        Raises:
            StoreConstraintError: On empty text, a missing citation or a non-statute family
            sqlite3.Error: On storage failure (the transaction is rolled back)
        """
        self._require_writable()
        if not family.is_statute:
            raise StoreConstraintError(f"{family.value} does not hold sections")
        if not section.citation:
            raise StoreConstraintError("Section has no citation")
        if not section.full_text or not section.full_text.strip():
            raise StoreConstraintError(f"{family.value} {section.citation}: empty text")

        table, fts = family.table, family.fts_table
        with self.conn:
            row = self.conn.execute(
                f"SELECT id FROM {table} WHERE citation = ?", (section.citation,)
            ).fetchone()
            values = (
                section.title_num, section.chapter_num, section.section_num,
                section.title_name, section.chapter_name, section.section_name,
                section.full_text, section.effective_date, section.last_amended,
            )
            if row:
                row_id = row["id"]
                self.conn.execute(
                    f"""
                    UPDATE {table} SET
                        title_num = ?, chapter_num = ?, section_num = ?,
                        title_name = ?, chapter_name = ?, section_name = ?,
                        full_text = ?, effective_date = ?, last_amended = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                    """,
                    values + (row_id,),
                )
            else:
                cursor = self.conn.execute(
                    f"""
                    INSERT INTO {table} (
                        citation, title_num, chapter_num, section_num,
                        title_name, chapter_name, section_name,
                        full_text, effective_date, last_amended
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (section.citation,) + values,
                )
                row_id = cursor.lastrowid

            self.conn.execute(f"DELETE FROM {fts} WHERE rowid = ?", (row_id,))
            self.conn.execute(
                f"""
                INSERT INTO {fts} (rowid, citation, title_name, chapter_name, section_name, full_text)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (row_id, section.citation, section.title_name, section.chapter_name,
                 section.section_name, section.full_text),
            )

        logger.debug(f"[STORE] Upserted {family.value} {section.citation} (id={row_id})")
        return row_id

    def upsert_rule(self, rule: RuleDocument) -> int:
        """Insert or overwrite one court rule and refresh its FTS row."""
        self._require_writable()
        if not rule.rule_set or not rule.rule_number:
            raise StoreConstraintError("Rule has no rule set or number")
        if not rule.full_text or not rule.full_text.strip():
            raise StoreConstraintError(f"{rule.citation}: empty text")

        with self.conn:
            row = self.conn.execute(
                "SELECT id FROM court_rules WHERE rule_set = ? AND rule_number = ?",
                (rule.rule_set, rule.rule_number),
            ).fetchone()
            if row:
                row_id = row["id"]
                self.conn.execute(
                    """
                    UPDATE court_rules SET
                        rule_name = ?, full_text = ?, effective_date = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                    """,
                    (rule.rule_name, rule.full_text, rule.effective_date, row_id),
                )
            else:
                cursor = self.conn.execute(
                    """
                    INSERT INTO court_rules (rule_set, rule_number, rule_name, full_text, effective_date)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (rule.rule_set, rule.rule_number, rule.rule_name, rule.full_text, rule.effective_date),
                )
                row_id = cursor.lastrowid

            self.conn.execute("DELETE FROM court_rules_fts WHERE rowid = ?", (row_id,))
            self.conn.execute(
                """
                INSERT INTO court_rules_fts (rowid, rule_set, rule_number, rule_name, full_text)
                VALUES (?, ?, ?, ?, ?)
                """,
                (row_id, rule.rule_set, rule.rule_number, rule.rule_name, rule.full_text),
            )

        logger.debug(f"[STORE] Upserted {rule.citation} (id={row_id})")
        return row_id

    # ------------------------------------------------------------------
    # Progress ledger
    # ------------------------------------------------------------------

    def record_progress(
        self,
        family: Family,
        unit: str,
        status: CrawlStatus,
        error_message: Optional[str] = None,
    ) -> None:
        self._require_writable()
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO crawl_progress (family, unit, status, error_message, updated_at)
                VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(family, unit) DO UPDATE SET
                    status = excluded.status,
                    error_message = excluded.error_message,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (family.value, unit, CrawlStatus(status).value, error_message),
            )

    def get_progress(self, family: Optional[Family] = None) -> list[CrawlProgress]:
        sql = "SELECT family, unit, status, error_message, updated_at FROM crawl_progress"
        params: tuple = ()
        if family is not None:
            sql += " WHERE family = ?"
            params = (family.value,)
        sql += " ORDER BY id"
        return [
            CrawlProgress(
                family=row["family"],
                unit=row["unit"],
                status=CrawlStatus(row["status"]),
                error_message=row["error_message"],
                updated_at=row["updated_at"],
            )
            for row in self.conn.execute(sql, params)
        ]

    # ------------------------------------------------------------------
    # Raw counts (used by tests and statistics)
    # ------------------------------------------------------------------

    def count(self, table: str) -> int:
        row = self.conn.execute(f"SELECT COUNT(*) AS n FROM {table}").fetchone()
        return row["n"]
