"""Input adapters that normalize raw roster and pick data."""

from .picks import DEFAULT_STATS_API_URL, StatsApiPickSource, parse_draft_payload
from .roster import (
    DEFAULT_ROSTER_MAPPING,
    CsvRosterSource,
    ProspectRow,
    RosterLoadReport,
    load_roster_csv,
    load_roster_rows,
    rows_to_prospects,
    write_roster_csv,
)

__all__ = [
    "DEFAULT_ROSTER_MAPPING",
    "DEFAULT_STATS_API_URL",
    "CsvRosterSource",
    "ProspectRow",
    "RosterLoadReport",
    "StatsApiPickSource",
    "load_roster_csv",
    "load_roster_rows",
    "parse_draft_payload",
    "rows_to_prospects",
    "write_roster_csv",
]
