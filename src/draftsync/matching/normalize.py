"""Canonical comparison forms for player names, schools and placeholder fields."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Tuple


SENTINEL = "unknown"

# Every spelling of "missing" seen in roster sheets and scraped pages.
_MISSING_TOKENS = {"", "unknown", "n/a", "na", "tbd", "-", "--", "none", "null", "unknown player"}

# Documented alternate spellings of the same surname; the first entry is canonical.
SPELLING_VARIANT_GROUPS: dict[str, list[str]] = {
    "holliday": ["holliday", "holiday"],
}

_WHITESPACE = re.compile(r"\s+")


def _build_variant_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {}
    for canonical, variants in SPELLING_VARIANT_GROUPS.items():
        for variant in variants:
            lookup.setdefault(variant, canonical)
    return lookup


SPELLING_VARIANT_LOOKUP = _build_variant_lookup()


@dataclass(frozen=True)
class IdentityKey:
    """Transient comparison tuple for one record; never persisted."""

    name_key: str
    school_key: str
    name_parts: Tuple[str, ...]

    @property
    def has_identity(self) -> bool:
        return bool(self.name_key)

    @property
    def school_known(self) -> bool:
        return self.school_key != SENTINEL


def _clean_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return _WHITESPACE.sub(" ", value).strip()


def is_missing(value: Any) -> bool:
    """Return True when ``value`` is one of the placeholder spellings for "absent"."""

    if value is None:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return False
    return _clean_text(value).lower() in _MISSING_TOKENS


def canonical_field(value: Any) -> str:
    """Return the display form of an optional field, or the sentinel if absent."""

    if isinstance(value, bool):
        return SENTINEL
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, (int, float)):
        return str(value)
    if is_missing(value):
        return SENTINEL
    return _clean_text(value)


def _school_key(raw_school: Any) -> str:
    if is_missing(raw_school):
        return SENTINEL
    return _clean_text(raw_school).lower()


def normalize(raw_name: Any, raw_school: Any = None) -> IdentityKey:
    """Build the identity key for a name/school pair.

    Malformed names (non-strings, blank strings) produce an empty ``name_key``;
    callers must treat that as "no identity" rather than matching on school.
    """

    tokens = [token for token in _clean_text(raw_name).lower().split(" ") if token]
    parts = tuple(SPELLING_VARIANT_LOOKUP.get(token, token) for token in tokens)
    return IdentityKey(
        name_key=" ".join(parts),
        school_key=_school_key(raw_school),
        name_parts=parts,
    )
