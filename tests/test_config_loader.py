import json
from pathlib import Path

import pytest

from draftsync.config_loader import MappingProfile


def test_profile_round_trips_through_json(tmp_path: Path):
    path = tmp_path / "profile.json"
    profile = MappingProfile(
        roster_mapping={"name": "Player"},
        incoming_mapping={"name": "First|Last", "school": " College "},
    )

    profile.save(path)
    loaded = MappingProfile.load(path)

    assert loaded == profile
    assert loaded.incoming_mapping["school"] == "College"


def test_unknown_field_in_saved_profile_is_rejected(tmp_path: Path):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps({"incoming_mapping": {"name": "Name", "team": "Club"}}), encoding="utf-8")

    with pytest.raises(ValueError, match="team"):
        MappingProfile.load(path)


def test_blank_column_is_rejected():
    with pytest.raises(ValueError, match="position"):
        MappingProfile(roster_mapping={"position": "  "})


def test_command_line_entries_override_loaded_profile():
    saved = MappingProfile(incoming_mapping={"name": "Full Name", "school": "College"})

    merged = saved.overridden_by(MappingProfile(incoming_mapping={"name": "First|Last"}))

    assert merged.incoming_mapping == {"name": "First|Last", "school": "College"}
    assert saved.incoming_mapping["name"] == "Full Name"
