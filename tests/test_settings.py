from pathlib import Path

import pytest

from draftsync.config import Settings, load_settings
from draftsync.ingest import DEFAULT_STATS_API_URL


def test_defaults_when_environment_is_empty():
    settings = load_settings({})

    assert settings == Settings()
    assert settings.db_path == Path("draftsync.sqlite")
    assert settings.stats_api_url == DEFAULT_STATS_API_URL
    assert settings.poll_interval == 30.0
    assert settings.prospects_csv is None


def test_environment_overrides():
    settings = load_settings(
        {
            "DRAFTSYNC_DB_PATH": "file:draft?mode=memory&cache=shared",
            "DRAFTSYNC_STATS_API_URL": "http://localhost:9000/api/v1",
            "DRAFTSYNC_DRAFT_YEAR": "2025",
            "DRAFTSYNC_POLL_INTERVAL": "5",
            "DRAFTSYNC_PICKS_TIMEOUT": "2.5",
            "DRAFTSYNC_PROSPECTS_CSV": "exports/prospects.csv",
        }
    )

    assert settings.db_path == "file:draft?mode=memory&cache=shared"
    assert settings.stats_api_url == "http://localhost:9000/api/v1"
    assert settings.draft_year == 2025
    assert settings.poll_interval == 5.0
    assert settings.picks_timeout == 2.5
    assert settings.roster_timeout == 10.0
    assert settings.prospects_csv == Path("exports/prospects.csv")


def test_zero_poll_interval_disables_polling():
    assert load_settings({"DRAFTSYNC_POLL_INTERVAL": "0"}).poll_interval == 0.0


@pytest.mark.parametrize(
    "env",
    [
        {"DRAFTSYNC_POLL_INTERVAL": "soon"},
        {"DRAFTSYNC_POLL_INTERVAL": "-1"},
        {"DRAFTSYNC_PICKS_TIMEOUT": "0"},
        {"DRAFTSYNC_DRAFT_YEAR": "next"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ValueError):
        load_settings(env)
