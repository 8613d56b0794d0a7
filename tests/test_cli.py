import json
from pathlib import Path

import pytest

from draftsync.cli import main
from draftsync.ingest import load_roster_csv
from draftsync.persistence import RosterStore


ROSTER_CSV = """Name,Position,School,Rank
Charlie Condon,unknown,Georgia,1
Eli Willits,SS,unknown,7
Chris Smith,C,Duke,60
Chris Smith,RHP,Texas,61
"""

INCOMING_CSV = """First,Last,Pos,College
Charlie,Condon,OF/1B,Georgia
Jac,Caglianone,1B/LHP,Florida
,,C,
"""


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_merge_command_writes_roster_and_report(tmp_path: Path, capsys):
    existing = _write(tmp_path / "roster.csv", ROSTER_CSV)
    incoming = _write(tmp_path / "incoming.csv", INCOMING_CSV)
    output = tmp_path / "merged.csv"
    report = tmp_path / "report.json"
    profile = tmp_path / "profile.json"

    main(
        [
            "merge",
            str(existing),
            str(incoming),
            "--output",
            str(output),
            "--report",
            str(report),
            "--incoming-column",
            "name=First|Last",
            "--incoming-column",
            "position=Pos",
            "--incoming-column",
            "school=College",
            "--save-profile",
            str(profile),
        ]
    )

    records = load_roster_csv(output)
    assert [record.name for record in records] == [
        "Charlie Condon",
        "Eli Willits",
        "Chris Smith",
        "Jac Caglianone",
    ]
    assert records[0].position == "OF/1B"
    assert records[2].school == "Duke"
    summary = json.loads(report.read_text(encoding="utf-8"))
    assert summary["added"] == 1
    assert summary["updated"] == 1
    assert summary["malformed_rows"] == [3]
    assert summary["skipped_names"] == []
    assert json.loads(profile.read_text(encoding="utf-8"))["incoming_mapping"]["name"] == "First|Last"
    assert "1 added" in capsys.readouterr().out


def test_merge_command_loads_saved_profile(tmp_path: Path):
    existing = _write(tmp_path / "roster.csv", ROSTER_CSV)
    incoming = _write(tmp_path / "incoming.csv", INCOMING_CSV)
    profile = _write(
        tmp_path / "profile.json",
        json.dumps({"incoming_mapping": {"name": "First|Last", "position": "Pos", "school": "College"}}),
    )
    output = tmp_path / "replaced.csv"

    main(["merge", str(existing), str(incoming), "--replace", "--load-profile", str(profile), "--output", str(output)])

    assert [record.name for record in load_roster_csv(output)] == ["Charlie Condon", "Jac Caglianone"]


def test_merge_command_rejects_unknown_mapping_field(tmp_path: Path):
    existing = _write(tmp_path / "roster.csv", ROSTER_CSV)
    incoming = _write(tmp_path / "incoming.csv", INCOMING_CSV)

    with pytest.raises(ValueError, match="team"):
        main(["merge", str(existing), str(incoming), "--incoming-column", "team=Club", "--output", str(tmp_path / "out.csv")])

    assert not (tmp_path / "out.csv").exists()


def test_resolve_command_annotates_roster(tmp_path: Path, capsys):
    roster = _write(tmp_path / "roster.csv", ROSTER_CSV)
    payload = {
        "drafts": {
            "rounds": [
                {
                    "round": "1",
                    "picks": [
                        {"pickNumber": 5, "isDrafted": True, "person": {"fullName": "Eli Willits"}, "team": {"name": "A's"}},
                        {
                            "pickNumber": 12,
                            "isDrafted": True,
                            "person": {"fullName": "Chris Smith"},
                            "team": {"name": "Cubs"},
                            "school": {"name": "Texas"},
                        },
                        {"pickNumber": 1, "isDrafted": True, "person": {"fullName": "Ethan Holliday"}},
                    ],
                }
            ]
        }
    }
    picks_json = _write(tmp_path / "draft.json", json.dumps(payload))
    output = tmp_path / "status.csv"

    main(["resolve", str(roster), "--picks-json", str(picks_json), "--output", str(output)])

    lines = output.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Name,Position,School,Rank,Drafted,Pick,Team"
    assert lines[2] == "Eli Willits,SS,unknown,7,yes,5,A's"
    assert lines[3] == "Chris Smith,C,Duke,60,no,,"
    assert lines[4] == "Chris Smith,RHP,Texas,61,yes,12,Cubs"
    out = capsys.readouterr().out
    assert "Matched 2/4 players to 3 picks" in out
    assert "'Ethan Holliday'" in out


def test_import_roster_command_fills_store(tmp_path: Path):
    roster = _write(tmp_path / "roster.csv", ROSTER_CSV)
    db = tmp_path / "draftsync.sqlite"

    main(["import-roster", str(roster), "--db", str(db)])

    stored = RosterStore(db).load_roster()
    assert [record.name for record in stored] == ["Charlie Condon", "Eli Willits", "Chris Smith"]
