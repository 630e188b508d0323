# Oekodata - Versioned Store
# ==========================
# Durable version history, record sets and the current-version pointer
"""
SQLite-backed store for promoted dataset versions.

Features:
- One materialized record set per version ("materials_v<label>")
- Append-only version history in insertion order
- A single current-version pointer moved only by promote()
- A single pending-version slot for the approval workflow
- Promotion is one transaction: record set, history, pointer and pending
  slot change together or not at all
"""

import hashlib
import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..discovery.models import CandidateMetadata
from ..errors import StoreWriteFailure, VersionNotFound
from ..ingest.models import Material, materials_from_dicts, materials_to_dicts
from .comparator import version_sort_key

logger = logging.getLogger(__name__)

CURRENT_VERSION_KEY = "current_version_label"
PENDING_VERSION_KEY = "pending_version"
MONITORED_URL_KEY = "monitored_url"
LAST_INGESTION_KEY = "last_ingestion"


def record_set_name(label: str) -> str:
    return f"materials_v{label}"


@dataclass
class Version:
    """Metadata of one promoted release."""
    version: str
    publish_date: Optional[str] = None
    ingested_at: str = ""
    materials_count: int = 0
    url: Optional[str] = None
    filename: Optional[str] = None
    is_current: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'publish_date': self.publish_date,
            'ingested_at': self.ingested_at,
            'materials_count': self.materials_count,
            'url': self.url,
            'filename': self.filename,
            'is_current': self.is_current,
        }


@dataclass
class CurrentVersion:
    """The served version together with its records."""
    version: Version
    materials: List[Material] = field(default_factory=list)

    @property
    def materials_count(self) -> int:
        return len(self.materials)


@dataclass
class PendingVersion:
    """A staged candidate awaiting a human decision."""
    candidate: CandidateMetadata
    materials: List[Material]
    staged_at: str = field(default_factory=lambda: datetime.now().isoformat())
    source_path: Optional[str] = None

    @property
    def version_label(self) -> str:
        return self.candidate.version_label

    def summary(self) -> Dict[str, Any]:
        """Pending metadata without the record set."""
        return {
            'version': self.version_label,
            'publish_date': self.candidate.publish_date,
            'url': self.candidate.url,
            'filename': self.candidate.filename,
            'staged_at': self.staged_at,
            'materials_count': len(self.materials),
            'source_path': self.source_path,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'candidate': self.candidate.to_dict(),
            'materials': materials_to_dicts(self.materials),
            'staged_at': self.staged_at,
            'source_path': self.source_path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PendingVersion":
        return cls(
            candidate=CandidateMetadata.from_dict(data['candidate']),
            materials=materials_from_dicts(data.get('materials', [])),
            staged_at=data.get('staged_at', ''),
            source_path=data.get('source_path'),
        )


@dataclass
class PromoteResult:
    version: Version
    created: bool        # False when the label already existed and was left alone
    replaced: bool = False


class VersionedStore:
    """
    Single owner of all persisted pipeline state.

    Example:
        store = VersionedStore("data/oekodata.db")
        store.promote("2024/1:2024, Version 5", materials,
                      {"publish_date": "2024-12-03"})
        current = store.get_current()
    """

    def __init__(self, db_path: str = "oekodata.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._init_database()

    @contextmanager
    def _get_connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(str(self.db_path), timeout=30)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self):
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS version_history (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    version TEXT NOT NULL UNIQUE,
                    publish_date TEXT,
                    ingested_at TEXT NOT NULL,
                    materials_count INTEGER NOT NULL,
                    url TEXT,
                    filename TEXT
                );

                CREATE TABLE IF NOT EXISTS record_sets (
                    name TEXT PRIMARY KEY,
                    version TEXT NOT NULL,
                    content TEXT NOT NULL,
                    content_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );
            """)

    # ------------------------------------------------------------------
    # Key-value slots
    # ------------------------------------------------------------------

    def get_value(self, key: str) -> Optional[Any]:
        with self._get_connection() as conn:
            return self._read_value(conn, key)

    def set_value(self, key: str, value: Any) -> None:
        with self._lock, self._get_connection() as conn:
            self._write_value(conn, key, value)

    @staticmethod
    def _read_value(conn, key: str) -> Optional[Any]:
        row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return json.loads(row['value']) if row else None

    @staticmethod
    def _write_value(conn, key: str, value: Any) -> None:
        conn.execute(
            "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
            (key, json.dumps(value, default=str), datetime.now().isoformat())
        )

    def current_label(self) -> Optional[str]:
        return self.get_value(CURRENT_VERSION_KEY)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_current(self) -> Optional[CurrentVersion]:
        """The served version with its records, or None before the first promotion."""
        with self._lock, self._get_connection() as conn:
            label = self._read_value(conn, CURRENT_VERSION_KEY)
            if not label:
                return None
            row = conn.execute(
                "SELECT * FROM version_history WHERE version = ?", (label,)
            ).fetchone()
            materials = self._read_record_set(conn, label)
        if row is None or materials is None:
            logger.error(f"Current pointer references missing version '{label}'")
            return None
        return CurrentVersion(self._row_to_version(row, label), materials)

    def get_by_label(self, label: str) -> List[Material]:
        """Record set of a promoted version; raises VersionNotFound."""
        with self._get_connection() as conn:
            materials = self._read_record_set(conn, label)
        if materials is None:
            raise VersionNotFound(label)
        return materials

    def get_version(self, label: str) -> Version:
        with self._get_connection() as conn:
            current = self._read_value(conn, CURRENT_VERSION_KEY)
            row = conn.execute(
                "SELECT * FROM version_history WHERE version = ?", (label,)
            ).fetchone()
        if row is None:
            raise VersionNotFound(label)
        return self._row_to_version(row, current)

    def has_version(self, label: str) -> bool:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT 1 FROM version_history WHERE version = ?", (label,)
            ).fetchone()
        return row is not None

    def history_log(self) -> List[Version]:
        """All versions in the order they were first promoted."""
        with self._get_connection() as conn:
            current = self._read_value(conn, CURRENT_VERSION_KEY)
            rows = conn.execute("SELECT * FROM version_history ORDER BY seq").fetchall()
        return [self._row_to_version(row, current) for row in rows]

    def list_history(self) -> List[Version]:
        """Versions sorted by publish date, newest first (label breaks ties)."""
        return sorted(
            self.history_log(),
            key=lambda v: version_sort_key(v.version, v.publish_date),
            reverse=True
        )

    @staticmethod
    def _row_to_version(row, current_label: Optional[str]) -> Version:
        return Version(
            version=row['version'],
            publish_date=row['publish_date'],
            ingested_at=row['ingested_at'],
            materials_count=row['materials_count'],
            url=row['url'],
            filename=row['filename'],
            is_current=(row['version'] == current_label),
        )

    @staticmethod
    def _read_record_set(conn, label: str) -> Optional[List[Material]]:
        row = conn.execute(
            "SELECT content FROM record_sets WHERE name = ?", (record_set_name(label),)
        ).fetchone()
        if row is None:
            return None
        return materials_from_dicts(json.loads(row['content']))

    # ------------------------------------------------------------------
    # Promotion
    # ------------------------------------------------------------------

    def promote(self, label: str, materials: List[Material],
                metadata: Optional[Dict[str, Any]] = None,
                force: bool = False) -> PromoteResult:
        """
        Make a version current in one transaction.

        Writes the record set, appends history, moves the current pointer and
        clears the pending slot when it holds this label. A label that is
        already in history is left untouched unless force is set.

        Raises:
            StoreWriteFailure: the transaction failed; nothing was changed
        """
        metadata = metadata or {}
        now = datetime.now().isoformat()

        with self._lock:
            try:
                with self._get_connection() as conn:
                    existing = conn.execute(
                        "SELECT * FROM version_history WHERE version = ?", (label,)
                    ).fetchone()

                    if existing is not None and not force:
                        self._clear_pending(conn, label)
                        current = self._read_value(conn, CURRENT_VERSION_KEY)
                        logger.info(f"Version '{label}' already ingested, skipping promotion")
                        return PromoteResult(self._row_to_version(existing, current), created=False)

                    self._write_record_set(conn, label, materials, now)
                    version = Version(
                        version=label,
                        publish_date=metadata.get('publish_date'),
                        ingested_at=now,
                        materials_count=len(materials),
                        url=metadata.get('url'),
                        filename=metadata.get('filename'),
                        is_current=True,
                    )
                    self._append_history(conn, version, replace=existing is not None)
                    self._write_value(conn, CURRENT_VERSION_KEY, label)
                    self._write_value(conn, LAST_INGESTION_KEY, {
                        'version': label,
                        'ingested_at': now,
                        'materials_count': len(materials),
                    })
                    self._clear_pending(conn, label)
            except sqlite3.Error as e:
                logger.error(f"Promotion of '{label}' rolled back: {e}")
                raise StoreWriteFailure(label, str(e)) from e

        action = "Re-ingested" if existing is not None else "Promoted"
        logger.info(f"{action} version '{label}' with {len(materials)} materials")
        return PromoteResult(version, created=True, replaced=existing is not None)

    @staticmethod
    def _write_record_set(conn, label: str, materials: List[Material], now: str) -> None:
        content = json.dumps(materials_to_dicts(materials), sort_keys=True, default=str)
        conn.execute(
            """INSERT OR REPLACE INTO record_sets (name, version, content, content_hash, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (record_set_name(label), label, content,
             hashlib.sha256(content.encode()).hexdigest(), now)
        )

    @staticmethod
    def _append_history(conn, version: Version, replace: bool = False) -> None:
        if replace:
            conn.execute(
                """UPDATE version_history
                   SET publish_date = ?, ingested_at = ?, materials_count = ?, url = ?, filename = ?
                   WHERE version = ?""",
                (version.publish_date, version.ingested_at, version.materials_count,
                 version.url, version.filename, version.version)
            )
            return
        conn.execute(
            """INSERT INTO version_history
               (version, publish_date, ingested_at, materials_count, url, filename)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (version.version, version.publish_date, version.ingested_at,
             version.materials_count, version.url, version.filename)
        )

    # ------------------------------------------------------------------
    # Pending slot
    # ------------------------------------------------------------------

    def get_pending(self) -> Optional[PendingVersion]:
        data = self.get_value(PENDING_VERSION_KEY)
        return PendingVersion.from_dict(data) if data else None

    def stage_pending(self, pending: PendingVersion) -> None:
        """Put a candidate into the pending slot, replacing whatever was there."""
        with self._lock, self._get_connection() as conn:
            self._write_value(conn, PENDING_VERSION_KEY, pending.to_dict())
        logger.info(f"Staged version '{pending.version_label}' "
                    f"({len(pending.materials)} materials)")

    def clear_pending(self) -> bool:
        with self._lock, self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM kv WHERE key = ?", (PENDING_VERSION_KEY,))
            return cursor.rowcount > 0

    def _clear_pending(self, conn, label: str) -> None:
        pending = self._read_value(conn, PENDING_VERSION_KEY)
        if pending and pending.get('candidate', {}).get('version_label') == label:
            conn.execute("DELETE FROM kv WHERE key = ?", (PENDING_VERSION_KEY,))
