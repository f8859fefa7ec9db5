"""Vault item database: the store handle behind VaultStore.

Follows the backup/file-share database pattern: SQLite + WAL mode via
core.db.connect(), one short-lived connection per call.

The handle is built once at application startup and passed into VaultStore.
Schema creation runs at most once per handle, under a lock, whether it is
triggered by initialize() or by the first query.
"""

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from ..core.db import connect as db_connect
from .models import SecretRecord

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data/vault.db")


class VaultDatabase:
    """SQLite persistence for secret records.

    Args:
        db_path: Path to SQLite database file. Defaults to data/vault.db.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._init_lock = threading.Lock()
        self._initialized = False

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a WAL-mode connection; commits on success, always closes."""
        conn = db_connect(self.db_path, row_factory=True)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Create the table and indexes once; later calls are no-ops."""
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connect() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS vault_items (
                        id               TEXT PRIMARY KEY,
                        owner_id         TEXT NOT NULL,
                        title            TEXT NOT NULL,
                        username         TEXT NOT NULL,
                        encrypted_secret TEXT NOT NULL,
                        key_version      INTEGER NOT NULL DEFAULT 1,
                        url              TEXT NOT NULL DEFAULT '',
                        notes            TEXT NOT NULL DEFAULT '',
                        tags             TEXT NOT NULL DEFAULT '[]',
                        created_at       TEXT NOT NULL,
                        updated_at       TEXT NOT NULL
                    )
                """)
                conn.execute("""
                    CREATE INDEX IF NOT EXISTS idx_items_owner_created
                    ON vault_items(owner_id, created_at DESC)
                """)
                conn.execute("""
                    CREATE INDEX IF NOT EXISTS idx_items_owner_search
                    ON vault_items(owner_id, title, username)
                """)
            self._initialized = True
            logger.info("Vault database ready at %s", self.db_path)

    # ── CRUD ────────────────────────────────────────────────────────

    def insert(self, record: SecretRecord) -> SecretRecord:
        """Persist a new record and return it as stored."""
        self.initialize()
        with self._connect() as conn:
            conn.execute(
                """INSERT INTO vault_items
                   (id, owner_id, title, username, encrypted_secret, key_version,
                    url, notes, tags, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (record.id, record.owner_id, record.title, record.username,
                 record.encrypted_secret, record.key_version, record.url,
                 record.notes, json.dumps(record.tags), record.created_at,
                 record.updated_at),
            )
        return record

    def list_for_owner(
        self, owner_id: str, search: Optional[str] = None
    ) -> List[SecretRecord]:
        """Return the owner's records, newest first.

        ``search`` is matched case-insensitively as a substring of title,
        username, url or any tag.
        """
        self.initialize()
        query = "SELECT * FROM vault_items WHERE owner_id = ?"
        params: list = [owner_id]

        if search:
            needle = search.casefold()
            query += """
                AND (instr(casefold(title), ?) > 0
                     OR instr(casefold(username), ?) > 0
                     OR instr(casefold(url), ?) > 0
                     OR EXISTS (
                         SELECT 1 FROM json_each(vault_items.tags)
                         WHERE instr(casefold(json_each.value), ?) > 0
                     ))
            """
            params.extend([needle] * 4)

        query += " ORDER BY created_at DESC, rowid DESC"

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [SecretRecord.from_row(r) for r in rows]

    def get(self, owner_id: str, item_id: str) -> Optional[SecretRecord]:
        """Return one record if it exists and belongs to owner_id."""
        self.initialize()
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM vault_items WHERE id = ? AND owner_id = ?",
                (item_id, owner_id),
            ).fetchone()
        return SecretRecord.from_row(row) if row else None

    def replace(
        self,
        owner_id: str,
        item_id: str,
        *,
        title: str,
        username: str,
        encrypted_secret: str,
        key_version: int,
        url: str,
        notes: str,
        tags: List[str],
        updated_at: str,
    ) -> Optional[SecretRecord]:
        """Full-replace the mutable fields of an owned record.

        Returns the updated record, or None when nothing matched both
        id and owner.
        """
        self.initialize()
        with self._connect() as conn:
            cursor = conn.execute(
                """UPDATE vault_items
                   SET title = ?, username = ?, encrypted_secret = ?,
                       key_version = ?, url = ?, notes = ?, tags = ?,
                       updated_at = ?
                   WHERE id = ? AND owner_id = ?""",
                (title, username, encrypted_secret, key_version, url, notes,
                 json.dumps(tags), updated_at, item_id, owner_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                "SELECT * FROM vault_items WHERE id = ? AND owner_id = ?",
                (item_id, owner_id),
            ).fetchone()
        return SecretRecord.from_row(row)

    def delete(self, owner_id: str, item_id: str) -> bool:
        """Delete an owned record. Returns True if a row was removed."""
        self.initialize()
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM vault_items WHERE id = ? AND owner_id = ?",
                (item_id, owner_id),
            )
        return cursor.rowcount > 0
