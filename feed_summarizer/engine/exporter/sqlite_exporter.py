"""Key/value persistence of formatted summaries in SQLite."""

from __future__ import annotations

import json
import sqlite3
import uuid
from pathlib import Path
from typing import Any, Iterable, Sequence

from .base import BaseExporter


def generate_keys(count: int) -> list[str]:
    return [str(uuid.uuid4()) for _ in range(count)]


class SQLiteExporter(BaseExporter):
    """Store each record as a JSON payload under a (kind, key) pair."""

    def __init__(self, path: Path, kind: str = "summaries") -> None:
        self.path = path
        self.kind = kind
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.path)
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS entities (
                kind TEXT NOT NULL,
                key TEXT NOT NULL,
                payload TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT (datetime('now')),
                PRIMARY KEY (kind, key)
            )
            """
        )
        self.conn.commit()

    def put_multi(self, kind: str, keys: Sequence[str], records: Sequence[Any]) -> None:
        """Insert or replace ``records`` under ``keys`` in one transaction."""

        if not records:
            raise ValueError("no entities to put")
        if len(keys) != len(records):
            raise ValueError("keys and records must have the same length")
        with self.conn:
            self.conn.executemany(
                "INSERT OR REPLACE INTO entities(kind, key, payload) VALUES (?, ?, ?)",
                [
                    (kind, key, json.dumps(record, ensure_ascii=False))
                    for key, record in zip(keys, records)
                ],
            )

    def get(self, kind: str, key: str) -> Any | None:
        row = self.conn.execute(
            "SELECT payload FROM entities WHERE kind = ? AND key = ?", (kind, key)
        ).fetchone()
        return json.loads(row[0]) if row else None

    def export(self, record: Any) -> None:
        self.export_many([record])

    def export_many(self, records: Iterable[Any]) -> None:
        """Store ``records`` under fresh uuid keys of this exporter's kind."""

        records = list(records)
        self.put_multi(self.kind, generate_keys(len(records)), records)

    def flush(self) -> None:
        self.conn.commit()

    def close(self) -> None:
        self.conn.commit()
        self.conn.close()


__all__ = ["SQLiteExporter", "generate_keys"]
