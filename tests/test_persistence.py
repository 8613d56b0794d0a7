from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from draftsync.cycle import CycleReport
from draftsync.models import DraftInfo, ProspectRecord
from draftsync.persistence import RosterStore


def _roster():
    return [
        ProspectRecord(name="Charlie Condon", position="OF/1B", school="Georgia", rank="1"),
        ProspectRecord(name="Eli Willits"),
        ProspectRecord(name="Kolten Smith", position="RHP", school="Georgia", rank="45"),
    ]


def test_replace_and_load_roster_preserves_order(tmp_path: Path):
    store = RosterStore(tmp_path / "draftsync.sqlite")

    assert store.replace_roster(_roster()) == 3
    assert store.load_roster() == _roster()


def test_replace_roster_overwrites_previous_rows(tmp_path: Path):
    store = RosterStore(tmp_path / "draftsync.sqlite")
    store.replace_roster(_roster())

    store.replace_roster([ProspectRecord(name="Jac Caglianone", school="Florida")])

    assert [record.name for record in store.load_roster()] == ["Jac Caglianone"]


def test_replace_roster_drops_draft_annotations(tmp_path: Path):
    store = RosterStore(tmp_path / "draftsync.sqlite")
    info = DraftInfo(pick_number=5, team="A's", timestamp=datetime(2025, 7, 13, tzinfo=timezone.utc))

    store.replace_roster([ProspectRecord(name="Eli Willits", is_drafted=True, draft_info=info)])

    (record,) = store.load_roster()
    assert record.is_drafted is False


def test_save_and_list_cycles_newest_first(tmp_path: Path):
    store = RosterStore(tmp_path / "draftsync.sqlite")
    base = datetime(2025, 7, 13, 22, 0, tzinfo=timezone.utc)

    store.save_cycle(report={"drafted": 0}, published=True, cycle_id="first", created_at=base)
    store.save_cycle(report={"drafted": 2}, published=False, cycle_id="second", created_at=base + timedelta(seconds=30))

    cycles = store.list_cycles()
    assert [cycle.cycle_id for cycle in cycles] == ["second", "first"]
    assert cycles[0].published is False
    assert cycles[0].report == {"drafted": 2}
    assert cycles[1].created_at == base
    assert len(store.list_cycles(limit=1)) == 1


@pytest.mark.anyio
async def test_async_adapters_round_trip(tmp_path: Path):
    store = RosterStore(tmp_path / "draftsync.sqlite")

    await store.roster_sink(_roster())
    loaded = await store.roster_source()
    report = CycleReport(started_at=datetime(2025, 7, 13, 22, 0, tzinfo=timezone.utc), published=True, roster_total=3)
    await store.record_cycle(report)

    assert loaded == _roster()
    (cycle,) = store.list_cycles()
    assert cycle.published is True
    assert cycle.report["roster_total"] == 3
