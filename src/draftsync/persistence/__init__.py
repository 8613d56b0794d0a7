"""Persistence layer for the authoritative roster and the cycle audit log."""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional
from uuid import uuid4

from draftsync.errors import SourceUnavailable
from draftsync.models import ProspectRecord


logger = logging.getLogger(__name__)


@dataclass
class CycleRecord:
    cycle_id: str
    created_at: datetime
    published: bool
    report: dict


class RosterStore:
    """Simple SQLite-backed store for the roster and reconciliation cycles."""

    def __init__(self, db_path: Path | str):
        self._use_uri = isinstance(db_path, str) and db_path.startswith("file:")
        self.db_path: Path | str = db_path if self._use_uri else Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path)
            except sqlite3.OperationalError:
                fallback_dir = Path(tempfile.gettempdir()) / "draftsync-runtime"
                fallback_dir.mkdir(parents=True, exist_ok=True)
                fallback = fallback_dir / "draftsync.sqlite"
                logger.warning("Unable to open %s; falling back to %s", self.db_path, fallback)
                conn = sqlite3.connect(fallback)
                self.db_path = fallback
                self._create_schema(conn)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS prospects (
                position_idx INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                position TEXT NOT NULL,
                school TEXT NOT NULL,
                rank TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS cycles (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                published INTEGER NOT NULL,
                report_json TEXT NOT NULL
            )
            """
        )
        conn.commit()

    def replace_roster(self, records: Iterable[ProspectRecord]) -> int:
        """Overwrite the stored roster with ``records`` in one transaction."""

        rows = [
            (index, record.name, record.position, record.school, record.rank)
            for index, record in enumerate(records)
        ]
        with self._connect() as conn:
            conn.execute("DELETE FROM prospects")
            conn.executemany(
                "INSERT INTO prospects (position_idx, name, position, school, rank) VALUES (?, ?, ?, ?, ?)",
                rows,
            )
            conn.commit()
        return len(rows)

    def load_roster(self) -> List[ProspectRecord]:
        with self._connect() as conn:
            cur = conn.execute(
                "SELECT name, position, school, rank FROM prospects ORDER BY position_idx"
            )
            return [
                ProspectRecord(
                    name=row["name"],
                    position=row["position"],
                    school=row["school"],
                    rank=row["rank"],
                )
                for row in cur.fetchall()
            ]

    def save_cycle(
        self,
        *,
        report: dict,
        published: bool,
        cycle_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        cycle_id = cycle_id or uuid4().hex
        created_at = created_at or datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO cycles (id, created_at, published, report_json) VALUES (?, ?, ?, ?)",
                (cycle_id, created_at.isoformat(), int(published), json.dumps(report)),
            )
            conn.commit()
        return cycle_id

    def list_cycles(self, limit: int = 20) -> List[CycleRecord]:
        with self._connect() as conn:
            cur = conn.execute(
                "SELECT id, created_at, published, report_json FROM cycles ORDER BY created_at DESC LIMIT ?",
                (limit,),
            )
            return [
                CycleRecord(
                    cycle_id=row["id"],
                    created_at=datetime.fromisoformat(row["created_at"]),
                    published=bool(row["published"]),
                    report=json.loads(row["report_json"]),
                )
                for row in cur.fetchall()
            ]

    # Async adapters used by the reconciliation cycle.

    async def roster_source(self) -> List[ProspectRecord]:
        try:
            return await asyncio.to_thread(self.load_roster)
        except sqlite3.Error as exc:
            raise SourceUnavailable("roster-store", str(exc)) from exc

    async def roster_sink(self, records: List[ProspectRecord]) -> None:
        count = await asyncio.to_thread(self.replace_roster, records)
        logger.debug("Wrote %d prospects to %s", count, self.db_path)

    async def record_cycle(self, report) -> None:
        await asyncio.to_thread(
            self.save_cycle,
            report=report.to_dict(),
            published=report.published,
            created_at=report.started_at,
        )
