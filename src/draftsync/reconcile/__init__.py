"""Roster merge and draft-status reconciliation."""

from .draft_status import (
    DraftResolution,
    MatchDiagnostic,
    dedupe_picks,
    diagnose_matches,
    pick_key,
    reconcile_draft,
    resolve_draft_status,
)
from .merge import FILLABLE_FIELDS, MergeResult, fill_missing, merge_prospects, replace_prospects

__all__ = [
    "DraftResolution",
    "FILLABLE_FIELDS",
    "MatchDiagnostic",
    "MergeResult",
    "dedupe_picks",
    "diagnose_matches",
    "fill_missing",
    "merge_prospects",
    "pick_key",
    "reconcile_draft",
    "replace_prospects",
    "resolve_draft_status",
]
