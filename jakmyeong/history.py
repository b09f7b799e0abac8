#!/usr/bin/env python3
"""
Name History Database
=====================
Keeps the names a family has looked at between sessions:

- every shown or saved candidate, keyed by Hangul + Hanja
- a status workflow (new → favorite / rejected)
- the pagination state of ``more`` sessions, so the next run
  continues where the last one stopped

Storage: SQLite database (``history.db_path`` in app.yaml)
"""

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from jakmyeong.settings import require_setting, resolve_path

logger = logging.getLogger(__name__)


class NameStatus(Enum):
    """Status of a saved name"""
    NEW = "new"                # Shown or saved, not reviewed
    FAVORITE = "favorite"      # Kept for the shortlist
    REJECTED = "rejected"      # Not wanted


@dataclass
class HistoryEntry:
    """A saved name with its scoring snapshot"""
    id: Optional[int]
    hangul: str
    hanja: str
    full_hangul: str
    full_hanja: str
    score: Optional[float] = None
    status: NameStatus = NameStatus.NEW
    data: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.hangul}-{self.hanja}"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'hangul': self.hangul,
            'hanja': self.hanja,
            'full_hangul': self.full_hangul,
            'full_hanja': self.full_hanja,
            'score': self.score,
            'status': self.status.value,
            'data': self.data,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }


class NameHistoryDB:
    """
    SQLite store for saved names and batch sessions.

    Usage:
        db = NameHistoryDB()

        # Save a generated candidate
        db.save(candidate)

        # Mark it as a favorite
        db.set_status('서윤', '瑞允', NameStatus.FAVORITE)

        # Resume a paging session
        db.save_batch_state('김:F', manager.get_state())
        state = db.load_batch_state('김:F')
    """

    def __init__(self, db_path: str = None):
        if db_path is None:
            db_path = resolve_path(require_setting("history.db_path"))

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create database tables"""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS names (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    hangul TEXT NOT NULL,
                    hanja TEXT NOT NULL DEFAULT '',
                    full_hangul TEXT NOT NULL,
                    full_hanja TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'new',
                    score REAL,
                    data TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE(hangul, hanja)
                )
            """)

            # Paging sessions of `jakmyeong more`
            conn.execute("""
                CREATE TABLE IF NOT EXISTS batch_states (
                    key TEXT PRIMARY KEY,
                    state TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_status ON names(status)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_score ON names(score DESC)")

            conn.commit()

    def _now(self) -> str:
        return datetime.now().isoformat()

    # =========================================================================
    # Names
    # =========================================================================

    def save(self, candidate, status: Optional[NameStatus] = None) -> HistoryEntry:
        """
        Save a candidate, or refresh its score if it is already stored.

        ``candidate`` is a ``NameCandidate`` or any object with ``hangul``
        and ``score`` (a ``PureKoreanName`` is stored with an empty Hanja).
        The stored status is only changed when ``status`` is given.
        """
        if isinstance(status, str):
            status = NameStatus(status)

        hangul = candidate.hangul
        hanja = getattr(candidate, 'hanja', '') or ''
        full_hangul = getattr(candidate, 'full_hangul', None) or getattr(candidate, 'full_name', hangul)
        full_hanja = getattr(candidate, 'full_hanja', '') or ''
        data = json.dumps(candidate.to_dict(), ensure_ascii=False) if hasattr(candidate, 'to_dict') else None
        now = self._now()

        with sqlite3.connect(self.db_path) as conn:
            try:
                conn.execute("""
                    INSERT INTO names (
                        hangul, hanja, full_hangul, full_hanja, status,
                        score, data, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    hangul, hanja, full_hangul, full_hanja, (status or NameStatus.NEW).value,
                    candidate.score, data, now, now
                ))
            except sqlite3.IntegrityError:
                conn.execute("""
                    UPDATE names SET full_hangul = ?, full_hanja = ?, score = ?,
                        data = ?, updated_at = ?
                    WHERE hangul = ? AND hanja = ?
                """, (full_hangul, full_hanja, candidate.score, data, now, hangul, hanja))
                if status is not None:
                    conn.execute(
                        "UPDATE names SET status = ? WHERE hangul = ? AND hanja = ?",
                        (status.value, hangul, hanja)
                    )
            conn.commit()

        logger.debug(f"Saved {full_hangul} ({full_hanja or '-'})")
        return self.get(hangul, hanja)

    def get(self, hangul: str, hanja: str = '') -> Optional[HistoryEntry]:
        """Get a saved name by its Hangul and Hanja"""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                "SELECT * FROM names WHERE hangul = ? AND hanja = ?",
                (hangul, hanja or '')
            )
            row = cursor.fetchone()
            return self._row_to_entry(row) if row else None

    def _row_to_entry(self, row) -> HistoryEntry:
        """Convert database row to HistoryEntry"""
        return HistoryEntry(
            id=row['id'],
            hangul=row['hangul'],
            hanja=row['hanja'],
            full_hangul=row['full_hangul'],
            full_hanja=row['full_hanja'],
            score=row['score'],
            status=NameStatus(row['status']),
            data=json.loads(row['data']) if row['data'] else {},
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    def set_status(self, hangul: str, hanja: str, status: NameStatus) -> bool:
        """Change the status of a saved name. Returns False if it is unknown."""
        if isinstance(status, str):
            status = NameStatus(status)
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("""
                UPDATE names SET status = ?, updated_at = ?
                WHERE hangul = ? AND hanja = ?
            """, (status.value, self._now(), hangul, hanja or ''))
            conn.commit()
            return cursor.rowcount > 0

    def delete(self, hangul: str, hanja: str = '') -> bool:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM names WHERE hangul = ? AND hanja = ?",
                (hangul, hanja or '')
            )
            conn.commit()
            return cursor.rowcount > 0

    def list(self, status: Optional[NameStatus] = None, limit: int = 50) -> List[HistoryEntry]:
        """Saved names, best score first, optionally for one status"""
        if isinstance(status, str):
            status = NameStatus(status)
        query = "SELECT * FROM names"
        params: list = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(status.value)
        query += " ORDER BY score DESC, full_hangul ASC"
        if limit:
            query += " LIMIT ?"
            params.append(limit)

        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(query, params)
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    # =========================================================================
    # Batch Sessions
    # =========================================================================

    def save_batch_state(self, key: str, state: Dict[str, Any]):
        """Store the state of a ``BatchManager`` under a session key"""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                INSERT INTO batch_states (key, state, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET state = excluded.state,
                    updated_at = excluded.updated_at
            """, (key, json.dumps(state, ensure_ascii=False), self._now()))
            conn.commit()

    def load_batch_state(self, key: str) -> Optional[Dict[str, Any]]:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("SELECT state FROM batch_states WHERE key = ?", (key,))
            row = cursor.fetchone()
        return json.loads(row[0]) if row else None

    def clear_batch_state(self, key: str) -> bool:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM batch_states WHERE key = ?", (key,))
            conn.commit()
            return cursor.rowcount > 0

    # =========================================================================
    # Statistics
    # =========================================================================

    def stats(self) -> dict:
        """Get database statistics"""
        with sqlite3.connect(self.db_path) as conn:
            stats = {'total': 0, 'by_status': {}}

            cursor = conn.execute("SELECT COUNT(*) FROM names")
            stats['total'] = cursor.fetchone()[0]

            cursor = conn.execute("SELECT status, COUNT(*) FROM names GROUP BY status")
            for row in cursor.fetchall():
                stats['by_status'][row[0]] = row[1]

            cursor = conn.execute("SELECT AVG(score) FROM names WHERE score IS NOT NULL")
            stats['avg_score'] = cursor.fetchone()[0]

            cursor = conn.execute("SELECT MAX(score) FROM names")
            stats['top_score'] = cursor.fetchone()[0]

            cursor = conn.execute("SELECT COUNT(*) FROM batch_states")
            stats['sessions'] = cursor.fetchone()[0]

            return stats


# Singleton
_default_db = None

def get_history_db() -> NameHistoryDB:
    """Get default database instance"""
    global _default_db
    if _default_db is None:
        _default_db = NameHistoryDB()
    return _default_db
