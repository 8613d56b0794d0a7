"""Cross-annotate roster entries with confirmed draft picks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from draftsync.matching import IdentityKey, MatchRule, find_match, match_rule
from draftsync.models import DraftPickRecord, PickNumber, ProspectRecord


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DraftResolution:
    roster: List[ProspectRecord]
    picks: List[DraftPickRecord]
    unmatched_picks: List[DraftPickRecord]

    @property
    def drafted_count(self) -> int:
        return sum(1 for record in self.roster if record.is_drafted)


def pick_key(pick: DraftPickRecord) -> Tuple[str, str]:
    """De-duplication key for a pick: pick number plus normalized player name."""

    return str(pick.pick_number).strip().lower(), pick.identity.name_key


def dedupe_picks(picks: Iterable[DraftPickRecord]) -> List[DraftPickRecord]:
    """Collapse picks that two extraction passes reported twice, keeping the first."""

    seen: Dict[Tuple[str, str], DraftPickRecord] = {}
    for pick in picks:
        key = pick_key(pick)
        if key in seen:
            logger.debug("Dropping duplicate pick %s %r", pick.pick_number, pick.player_name)
            continue
        seen[key] = pick
    return list(seen.values())


def _annotate(record: ProspectRecord, pick: DraftPickRecord | None) -> ProspectRecord:
    if pick is None:
        if not record.is_drafted and record.draft_info is None:
            return record
        return record.model_copy(update={"is_drafted": False, "draft_info": None})
    return record.model_copy(update={"is_drafted": True, "draft_info": pick.to_draft_info()})


def _resolve(
    roster: Sequence[ProspectRecord],
    picks: Sequence[DraftPickRecord],
) -> Tuple[List[ProspectRecord], List[DraftPickRecord]]:
    pool: Dict[int, IdentityKey] = {index: pick.identity for index, pick in enumerate(picks)}
    used: set[int] = set()
    annotated: List[ProspectRecord] = []
    for record in roster:
        # Namesakes at different known schools must not share a pick.
        index = find_match(record.identity, pool, strict_school=True)
        if index is None:
            annotated.append(_annotate(record, None))
            continue
        used.add(index)
        annotated.append(_annotate(record, picks[index]))
    unmatched = [pick for index, pick in enumerate(picks) if index not in used]
    return annotated, unmatched


def resolve_draft_status(
    roster: Iterable[ProspectRecord],
    picks: Iterable[DraftPickRecord],
) -> List[ProspectRecord]:
    """Return ``roster`` with ``is_drafted``/``draft_info`` derived from ``picks``.

    Entries without a matching pick are reset to undrafted, so the output only
    depends on the two inputs.
    """

    annotated, _ = _resolve(list(roster), dedupe_picks(picks))
    return annotated


def reconcile_draft(
    roster: Iterable[ProspectRecord],
    picks: Iterable[DraftPickRecord],
) -> DraftResolution:
    """Resolve draft status and also report the de-duplicated and unmatched picks."""

    unique_picks = dedupe_picks(picks)
    annotated, unmatched = _resolve(list(roster), unique_picks)
    resolution = DraftResolution(roster=annotated, picks=unique_picks, unmatched_picks=unmatched)
    logger.info(
        "Resolved draft status: %d/%d roster entries drafted, %d picks without a roster entry",
        resolution.drafted_count,
        len(annotated),
        len(unmatched),
    )
    return resolution


@dataclass(frozen=True)
class MatchDiagnostic:
    """How one drafted roster entry was tied to its pick."""

    player_name: str
    school: str
    pick_number: PickNumber
    pick_player_name: Optional[str]
    team: str
    rule: Optional[MatchRule]


def diagnose_matches(
    roster: Sequence[ProspectRecord],
    picks: Sequence[DraftPickRecord],
) -> Tuple[List[MatchDiagnostic], List[DraftPickRecord]]:
    """Explain the draft annotations on ``roster`` against ``picks``.

    Returns one entry per drafted roster record and the picks no roster entry
    points at. An annotation whose pick is no longer in ``picks`` is reported
    with ``rule=None``.
    """

    used: set[int] = set()
    diagnostics: List[MatchDiagnostic] = []
    for record in roster:
        info = record.draft_info
        if info is None:
            continue
        found: Optional[int] = None
        rule: Optional[MatchRule] = None
        for index, pick in enumerate(picks):
            if pick.pick_number != info.pick_number:
                continue
            rule = match_rule(record.identity, pick.identity, strict_school=True)
            if rule is not None:
                found = index
                break
        if found is not None:
            used.add(found)
        diagnostics.append(
            MatchDiagnostic(
                player_name=record.name,
                school=record.school,
                pick_number=info.pick_number,
                pick_player_name=picks[found].player_name if found is not None else None,
                team=info.team,
                rule=rule,
            )
        )
    unmatched = [pick for index, pick in enumerate(picks) if index not in used]
    return diagnostics, unmatched
