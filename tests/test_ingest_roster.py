from datetime import datetime, timezone
from pathlib import Path

import pytest

from draftsync.errors import SourceUnavailable
from draftsync.ingest import (
    CsvRosterSource,
    ProspectRow,
    load_roster_csv,
    rows_to_prospects,
    write_roster_csv,
)
from draftsync.models import DraftInfo, ProspectRecord


def _row(**kwargs):
    mapping = {"name": "Name", "position": "Position", "school": "School", "rank": "Rank"}
    return ProspectRow.from_mapping(kwargs, mapping)


def test_from_mapping_joins_multi_column_names():
    row = ProspectRow.from_mapping(
        {"First": "Charlie", "Last": "Condon", "College": " Georgia "},
        {"name": "First|Last", "school": "College"},
    )

    assert row.raw_name == "Charlie Condon"
    assert row.raw_school == "Georgia"
    assert row.raw_position is None


def test_rows_to_prospects_reports_malformed_rows():
    rows = [
        _row(Name="Charlie Condon", Position="OF/1B", School="Georgia", Rank="1"),
        _row(Name="", Position="C"),
        _row(Name="Eli Willits", Position="SS", School="TBD"),
    ]

    records, report = rows_to_prospects(rows)

    assert [record.name for record in records] == ["Charlie Condon", "Eli Willits"]
    assert records[1].school == "unknown"
    assert report.total_rows == 3
    assert report.loaded == 2
    assert report.malformed_rows == [2]


def test_write_then_load_roster_csv(tmp_path: Path):
    path = tmp_path / "roster.csv"
    records = [
        ProspectRecord(name="Charlie Condon", position="OF/1B", school="Georgia", rank="1"),
        ProspectRecord(name="Eli Willits"),
    ]

    assert write_roster_csv(path, records) == 2
    assert path.read_text(encoding="utf-8").splitlines()[0] == "Name,Position,School,Rank"
    assert load_roster_csv(path) == records


def test_write_roster_csv_with_draft_columns(tmp_path: Path):
    path = tmp_path / "resolved.csv"
    info = DraftInfo(pick_number=5, team="A's", timestamp=datetime(2025, 7, 13, tzinfo=timezone.utc))
    records = [
        ProspectRecord(name="Eli Willits", is_drafted=True, draft_info=info),
        ProspectRecord(name="Charlie Condon"),
    ]

    write_roster_csv(path, records, include_draft=True)
    lines = path.read_text(encoding="utf-8").splitlines()

    assert lines[0] == "Name,Position,School,Rank,Drafted,Pick,Team"
    assert lines[1] == "Eli Willits,unknown,unknown,unknown,yes,5,A's"
    assert lines[2] == "Charlie Condon,unknown,unknown,unknown,no,,"


@pytest.mark.anyio
async def test_csv_roster_source_reads_file(tmp_path: Path):
    path = tmp_path / "roster.csv"
    path.write_text("Name,Position,School,Rank\nKolten Smith,RHP,Georgia,45\n", encoding="utf-8")

    records = await CsvRosterSource(path)()

    assert records == [ProspectRecord(name="Kolten Smith", position="RHP", school="Georgia", rank="45")]


@pytest.mark.anyio
async def test_csv_roster_source_missing_file_is_unavailable(tmp_path: Path):
    source = CsvRosterSource(tmp_path / "missing.csv")

    with pytest.raises(SourceUnavailable) as excinfo:
        await source()

    assert excinfo.value.source == "csv:missing.csv"


@pytest.mark.anyio
async def test_csv_roster_source_undecodable_file_is_unavailable(tmp_path: Path):
    path = tmp_path / "prospects.csv"
    path.write_bytes(b"\xff\xfeName,Position\n\xff\xfe,SS\n")

    with pytest.raises(SourceUnavailable) as excinfo:
        await CsvRosterSource(path)()

    assert excinfo.value.source == "csv:prospects.csv"
