"""Additive merge of scraped prospects into the authoritative roster."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from draftsync.errors import MalformedRecord
from draftsync.matching import SENTINEL, IdentityKey, find_match_with_rule
from draftsync.models import ProspectRecord


logger = logging.getLogger(__name__)

RawProspect = Union[ProspectRecord, Mapping[str, Any]]

# Fields merge may fill in; draft annotations belong to the draft resolver.
FILLABLE_FIELDS: Tuple[str, ...] = ("position", "school", "rank")


@dataclass(frozen=True)
class MergeResult:
    records: List[ProspectRecord]
    added: int
    updated: int
    unchanged: int
    skipped: int
    skipped_names: List[str] = field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        return {
            "total": len(self.records),
            "added": self.added,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "skipped": self.skipped,
            "skipped_names": list(self.skipped_names),
        }


def fill_missing(existing: ProspectRecord, incoming: ProspectRecord) -> ProspectRecord:
    """Copy incoming fields only where ``existing`` still holds the sentinel."""

    update = {
        name: getattr(incoming, name)
        for name in FILLABLE_FIELDS
        if getattr(existing, name) == SENTINEL and getattr(incoming, name) != SENTINEL
    }
    if not update:
        return existing
    return existing.model_copy(update=update)


class _RosterPool:
    """Insertion-ordered roster keyed by normalized name."""

    def __init__(self) -> None:
        self.records: Dict[str, ProspectRecord] = {}
        self.identities: Dict[str, IdentityKey] = {}

    def put(self, record: ProspectRecord, key: str | None = None) -> None:
        identity = record.identity
        key = key or identity.name_key
        self.records[key] = record
        # Refreshed on every write so a filled-in school anchors later matches.
        self.identities[key] = identity

    def values(self) -> List[ProspectRecord]:
        return list(self.records.values())


def _coerce(raw: RawProspect) -> ProspectRecord:
    return ProspectRecord.from_raw(raw)


def _label(raw: Any) -> str:
    if isinstance(raw, Mapping):
        value = raw.get("name", raw.get("Name", ""))
        return str(value) if value is not None else ""
    return repr(raw)


def _build_pool(existing: Iterable[ProspectRecord]) -> _RosterPool:
    pool = _RosterPool()
    for record in existing:
        key = record.identity.name_key
        if key and key in pool.records:
            logger.debug("Folding duplicate roster entry %r", record.name)
            pool.put(fill_missing(pool.records[key], record), key)
            continue
        pool.put(record)
    return pool


def merge_prospects(
    existing: Iterable[ProspectRecord],
    incoming: Iterable[RawProspect],
) -> MergeResult:
    """Merge ``incoming`` into ``existing`` without overwriting known data.

    Matched records only gain fields they are missing; unmatched records are
    appended. Incoming rows without a usable name are skipped and counted.
    """

    pool = _build_pool(existing)
    added = updated = unchanged = 0
    skipped_names: List[str] = []

    for raw in incoming:
        try:
            record = _coerce(raw)
        except MalformedRecord as exc:
            logger.debug("Skipping malformed prospect: %s", exc)
            skipped_names.append(_label(raw))
            continue

        identity = record.identity
        key, rule = find_match_with_rule(identity, pool.identities)
        if key is None:
            pool.put(record)
            added += 1
            continue

        current = pool.records[key]
        merged = fill_missing(current, record)
        if merged is current:
            unchanged += 1
        else:
            logger.debug("Filled missing fields on %r (matched via %s)", current.name, rule.value if rule else "-")
            pool.put(merged, key)
            updated += 1

    result = MergeResult(
        records=pool.values(),
        added=added,
        updated=updated,
        unchanged=unchanged,
        skipped=len(skipped_names),
        skipped_names=skipped_names,
    )
    logger.info(
        "Merged prospects: %d total, %d added, %d updated, %d unchanged, %d skipped",
        len(result.records),
        added,
        updated,
        unchanged,
        result.skipped,
    )
    return result


def replace_prospects(incoming: Iterable[RawProspect]) -> MergeResult:
    """Build a fresh roster from ``incoming`` alone, discarding the previous one."""

    return merge_prospects([], incoming)
