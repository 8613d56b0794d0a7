from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from draftsync.models import DraftPickRecord, ProspectRecord


class PlayersResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    players: list[ProspectRecord]
    draft_picks: list[DraftPickRecord] = Field(default_factory=list, alias="draftPicks")
    last_update: datetime | None = Field(default=None, alias="lastUpdate")


class DraftPicksResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    picks: list[DraftPickRecord]
    last_update: datetime | None = Field(default=None, alias="lastUpdate")


class HealthResponse(BaseModel):
    status: str
    players_count: int
    picks_count: int
    last_update: datetime | None = None
    cycle_in_flight: bool = False


class CycleReportResponse(BaseModel):
    started_at: datetime
    finished_at: datetime | None = None
    skipped: bool
    published: bool
    roster_total: int
    added: int
    updated: int
    unchanged: int
    skipped_records: int
    picks_total: int
    drafted: int
    unmatched_picks: int
    degraded_sources: list[str] = Field(default_factory=list)


class MatchDiagnosticEntry(BaseModel):
    player_name: str
    school: str
    pick_number: int | str
    pick_player_name: str | None = None
    team: str
    rule: str | None = None


class MatchingDiagnosticsResponse(BaseModel):
    drafted: list[MatchDiagnosticEntry]
    unmatched_picks: list[str]
    players_count: int
    picks_count: int
    last_update: datetime | None = None
