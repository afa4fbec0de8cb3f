# -*- coding: utf-8 -*-
"""
Registry store for Aqman devices.
Keeps the last-known network address of every device that has reported in.
"""

import sqlite3
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from pathlib import Path
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@dataclass
class RegistryEntry:
    """A single registered device."""
    serial: str
    ip: str
    port: str
    updated_at: datetime

    @property
    def address(self) -> Tuple[str, str]:
        return self.ip, self.port


def _parse_timestamp(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.warning(f"Unparseable registry timestamp: {value!r}")
        return None


class RegistryStore:
    """SQLite-backed serial -> address registry.

    Storage errors never escape this class: they are logged and reported to
    the caller as absence (``None``, ``False`` or an empty list).
    """

    def __init__(self, db_path: str = "aqman.db"):
        # Ensure database directory exists
        db_dir = Path(db_path).parent
        if str(db_dir) != '.':
            db_dir.mkdir(parents=True, exist_ok=True)

        self.db_path = db_path
        self._lock = threading.Lock()

        try:
            self.init_database()
            logger.info(f"RegistryStore initialized with database: {db_path}")
        except Exception as e:
            logger.error(f"Failed to initialize registry database: {e}")
            raise

    def init_database(self):
        """Create the registry table if it does not exist."""
        with self.get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS aqman (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    serial TEXT UNIQUE NOT NULL,
                    ip TEXT NOT NULL,
                    port TEXT NOT NULL,
                    updated_at DATETIME NOT NULL
                )
            """)
            conn.commit()

    @contextmanager
    def get_connection(self):
        """Get database connection with automatic closing"""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=10.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}")
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                conn.close()

    def list_serials(self) -> List[str]:
        """Return every registered serial in registration order."""
        try:
            with self.get_connection() as conn:
                rows = conn.execute("SELECT serial FROM aqman ORDER BY id").fetchall()
                return [row["serial"] for row in rows]
        except sqlite3.Error as e:
            logger.error(f"Error listing device serials: {e}")
            return []

    def get_entry(self, serial: str) -> Optional[RegistryEntry]:
        """Return the full registry entry for ``serial``, if any."""
        try:
            with self.get_connection() as conn:
                row = conn.execute(
                    "SELECT serial, ip, port, updated_at FROM aqman WHERE serial = ?",
                    (serial,)
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error looking up device {serial}: {e}")
            return None

        if row is None:
            return None
        return RegistryEntry(
            serial=row["serial"],
            ip=row["ip"],
            port=row["port"],
            updated_at=_parse_timestamp(row["updated_at"]),
        )

    def lookup(self, serial: str) -> Optional[Tuple[str, str]]:
        """Return ``(ip, port)`` for ``serial`` or None when it is unknown."""
        entry = self.get_entry(serial)
        if entry is None or not entry.ip or not entry.port:
            return None
        return entry.address

    def exists(self, serial: str) -> bool:
        try:
            with self.get_connection() as conn:
                row = conn.execute(
                    "SELECT 1 FROM aqman WHERE serial = ?", (serial,)
                ).fetchone()
                return row is not None
        except sqlite3.Error as e:
            logger.error(f"Error checking device {serial}: {e}")
            return False

    def count(self) -> int:
        try:
            with self.get_connection() as conn:
                return conn.execute("SELECT COUNT(*) FROM aqman").fetchone()[0]
        except sqlite3.Error as e:
            logger.error(f"Error counting devices: {e}")
            return 0

    def upsert(self, serial: str, ip: str, port: str,
               timestamp: Optional[datetime] = None) -> Optional[bool]:
        """Insert or update the address of ``serial``.

        Returns True when a new entry was created, False when an existing one
        was updated, and None when the write failed. The existence check and
        the write share one IMMEDIATE transaction, so ``created`` holds even
        when several processes write to the same database file.
        """
        timestamp = timestamp or datetime.now(timezone.utc)
        try:
            with self._lock:
                with self.get_connection() as conn:
                    conn.execute("BEGIN IMMEDIATE")
                    existing = conn.execute(
                        "SELECT id FROM aqman WHERE serial = ?", (serial,)
                    ).fetchone()

                    conn.execute("""
                        INSERT INTO aqman (serial, ip, port, updated_at)
                        VALUES (?, ?, ?, ?)
                        ON CONFLICT(serial) DO UPDATE SET
                            ip = excluded.ip,
                            port = excluded.port,
                            updated_at = excluded.updated_at
                    """, (serial, ip, port, timestamp.isoformat()))
                    conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error upserting device {serial}: {e}")
            return None

        created = existing is None
        if created:
            logger.info(f"New device registered: {serial} at {ip}:{port}")
        else:
            logger.info(f"Device {serial} address updated to {ip}:{port}")
        return created
