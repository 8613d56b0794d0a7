"""Helpers to load roster CSV exports and emit canonical prospect records."""

from __future__ import annotations

import asyncio
import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from draftsync.errors import MalformedRecord, SourceUnavailable
from draftsync.models import ProspectRecord


logger = logging.getLogger(__name__)

# Column layout of the roster sheet export.
DEFAULT_ROSTER_MAPPING = {
    "name": "Name",
    "position": "Position",
    "school": "School",
    "rank": "Rank",
}

ROSTER_HEADER = ("Name", "Position", "School", "Rank")


class ProspectRow(BaseModel):
    raw_name: str
    raw_position: Optional[str] = None
    raw_school: Optional[str] = None
    raw_rank: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "ProspectRow":
        def extract(spec: Optional[str | Sequence[str]], *, default: Optional[str] = None) -> Optional[str]:
            if spec is None:
                return default
            if isinstance(spec, str):
                value = row.get(spec)
                return value.strip() if value is not None else default
            parts = [(row.get(col) or "").strip() for col in spec if row.get(col)]
            return " ".join(parts) if parts else default

        def parse_spec(key: str) -> Optional[str | Sequence[str]]:
            spec = mapping.get(key)
            if spec is None:
                return None
            if "|" in spec:
                return tuple(part.strip() for part in spec.split("|"))
            return spec

        return cls(
            raw_name=extract(parse_spec("name"), default="") or "",
            raw_position=extract(parse_spec("position")),
            raw_school=extract(parse_spec("school")),
            raw_rank=extract(parse_spec("rank")),
        )


@dataclass(frozen=True)
class RosterLoadReport:
    total_rows: int
    loaded: int
    malformed_rows: List[int]


def load_roster_rows(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[ProspectRow]:
    mapping = {**DEFAULT_ROSTER_MAPPING, **(mapping or {})}
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        rows = [ProspectRow.from_mapping(row, mapping) for row in reader]
    return rows


def rows_to_prospects(rows: Sequence[ProspectRow]) -> tuple[List[ProspectRecord], RosterLoadReport]:
    """Convert rows to records; rows without a usable name are reported, not raised."""

    records: List[ProspectRecord] = []
    malformed: List[int] = []
    for index, row in enumerate(rows, start=1):
        try:
            record = ProspectRecord.from_raw(
                {
                    "name": row.raw_name,
                    "position": row.raw_position,
                    "school": row.raw_school,
                    "rank": row.raw_rank,
                }
            )
        except MalformedRecord as exc:
            logger.debug("Skipping roster row %d: %s", index, exc)
            malformed.append(index)
            continue
        records.append(record)
    report = RosterLoadReport(total_rows=len(rows), loaded=len(records), malformed_rows=malformed)
    return records, report


def load_roster_csv(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[ProspectRecord]:
    records, report = rows_to_prospects(load_roster_rows(path, mapping=mapping))
    if report.malformed_rows:
        logger.warning("Skipped %d malformed rows in %s", len(report.malformed_rows), path)
    return records


def write_roster_csv(path: Path, records: Iterable[ProspectRecord], *, include_draft: bool = False) -> int:
    """Write records in the roster sheet layout; returns the number of rows written."""

    header = list(ROSTER_HEADER)
    if include_draft:
        header += ["Drafted", "Pick", "Team"]
    count = 0
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for record in records:
            row = [record.name, record.position, record.school, record.rank]
            if include_draft:
                info = record.draft_info
                row += [
                    "yes" if record.is_drafted else "no",
                    "" if info is None else str(info.pick_number),
                    "" if info is None else info.team,
                ]
            writer.writerow(row)
            count += 1
    return count


class CsvRosterSource:
    """Async roster source reading a CSV export on every call."""

    def __init__(self, path: Path, *, mapping: Mapping[str, str] | None = None):
        self.path = path
        self.mapping = mapping

    async def __call__(self) -> List[ProspectRecord]:
        try:
            return await asyncio.to_thread(load_roster_csv, self.path, mapping=self.mapping)
        except (OSError, UnicodeError, csv.Error) as exc:
            raise SourceUnavailable(f"csv:{self.path.name}", str(exc)) from exc
