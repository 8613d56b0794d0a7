"""Pydantic models for API I/O."""

from .snapshot import (
    CycleReportResponse,
    DraftPicksResponse,
    HealthResponse,
    MatchDiagnosticEntry,
    MatchingDiagnosticsResponse,
    PlayersResponse,
)

__all__ = [
    "CycleReportResponse",
    "DraftPicksResponse",
    "HealthResponse",
    "MatchDiagnosticEntry",
    "MatchingDiagnosticsResponse",
    "PlayersResponse",
]
