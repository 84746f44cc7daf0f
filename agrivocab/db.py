from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from agrivocab.models import ProgressState, WordRecord

SCHEMA = """
CREATE TABLE IF NOT EXISTS words (
    idx INTEGER PRIMARY KEY,
    category TEXT NOT NULL,
    english TEXT NOT NULL,
    korean TEXT NOT NULL,
    example1 TEXT,
    example2 TEXT,
    example3 TEXT,
    frequency TEXT,
    difficulty INTEGER DEFAULT 2
);

CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS catalog_meta (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    source TEXT,
    imported_at TEXT NOT NULL
);
"""

PROGRESS_KEY = "progress"


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._init_schema()

    def _init_schema(self) -> None:
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    # ── Catalog ───────────────────────────────────────────────────────────

    def import_catalog(self, records: list[WordRecord], source: str = "") -> int:
        """Replace the stored catalog snapshot. Progress is left as-is."""
        with self.conn:
            self.conn.execute("DELETE FROM words")
            self.conn.executemany(
                "INSERT INTO words (idx, category, english, korean, example1, "
                "example2, example3, frequency, difficulty) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    (r.index, r.category, r.english, r.korean, r.example1,
                     r.example2, r.example3, r.frequency, r.difficulty)
                    for r in records
                ],
            )
            self.conn.execute(
                "INSERT OR REPLACE INTO catalog_meta (id, source, imported_at) "
                "VALUES (1, ?, ?)",
                (source, datetime.now(timezone.utc).isoformat()),
            )
        return len(records)

    def get_catalog(self) -> list[WordRecord]:
        rows = self.conn.execute("SELECT * FROM words ORDER BY idx").fetchall()
        return [
            WordRecord(
                index=r["idx"],
                category=r["category"],
                english=r["english"],
                korean=r["korean"],
                example1=r["example1"] or "",
                example2=r["example2"] or "",
                example3=r["example3"] or "",
                frequency=r["frequency"] or "",
                difficulty=r["difficulty"],
            )
            for r in rows
        ]

    def get_word_count(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) FROM words").fetchone()
        return row[0]

    def get_catalog_meta(self) -> dict | None:
        row = self.conn.execute("SELECT source, imported_at FROM catalog_meta").fetchone()
        return dict(row) if row else None

    # ── Progress ──────────────────────────────────────────────────────────

    def load_progress(self) -> ProgressState:
        row = self.conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (PROGRESS_KEY,)
        ).fetchone()
        if row is None:
            return ProgressState()
        return ProgressState.from_dict(json.loads(row["value"]))

    def save_progress(self, progress: ProgressState) -> None:
        """Write the complete progress object in a single statement."""
        self.conn.execute(
            "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
            (
                PROGRESS_KEY,
                json.dumps(progress.to_dict()),
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        self.conn.commit()

    def reset_progress(self) -> None:
        self.conn.execute("DELETE FROM kv_store WHERE key = ?", (PROGRESS_KEY,))
        self.conn.commit()
