"""Ordered identity rules deciding whether two player records are the same person.

Rules run from most to least confident and the first one that fires wins;
there is no scoring across rules:

1. ``EXACT``: normalized names are identical.
2. ``FIRST_LAST``: both names have two or more tokens and agree on the first
   and last token (middle names, initials and suffixes may differ).
3. ``SCHOOL_PARTIAL``: both sides carry the same known school and one name
   token is contained in the other's. This catches nickname and formatting
   drift, at the cost of occasionally merging two same-school players whose
   names overlap. It never fires without a school on both sides.

Callers whose pool may hold namesakes (roster annotation) pass
``strict_school=True``: when both schools are known and differ, no rule
fires. Without it rules 1 and 2 look at names alone.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Mapping, Optional, Tuple, TypeVar

from .normalize import IdentityKey


logger = logging.getLogger(__name__)

K = TypeVar("K")

# Single letters (initials) are too short to anchor a partial match.
MIN_PARTIAL_TOKEN_LENGTH = 2


class MatchRule(str, Enum):
    EXACT = "exact"
    FIRST_LAST = "first_last"
    SCHOOL_PARTIAL = "school_partial"


RULE_ORDER: Tuple[MatchRule, ...] = (
    MatchRule.EXACT,
    MatchRule.FIRST_LAST,
    MatchRule.SCHOOL_PARTIAL,
)


def schools_conflict(left: IdentityKey, right: IdentityKey) -> bool:
    return left.school_known and right.school_known and left.school_key != right.school_key


def _exact(candidate: IdentityKey, target: IdentityKey) -> bool:
    return candidate.name_key == target.name_key


def _first_last(candidate: IdentityKey, target: IdentityKey) -> bool:
    if len(candidate.name_parts) < 2 or len(target.name_parts) < 2:
        return False
    return (
        candidate.name_parts[0] == target.name_parts[0]
        and candidate.name_parts[-1] == target.name_parts[-1]
    )


def _school_partial(candidate: IdentityKey, target: IdentityKey) -> bool:
    if not (candidate.school_known and target.school_known):
        return False
    if candidate.school_key != target.school_key:
        return False
    for token in candidate.name_parts:
        if len(token) < MIN_PARTIAL_TOKEN_LENGTH:
            continue
        for other in target.name_parts:
            if len(other) < MIN_PARTIAL_TOKEN_LENGTH:
                continue
            if token in other or other in token:
                return True
    return False


_RULE_CHECKS = {
    MatchRule.EXACT: _exact,
    MatchRule.FIRST_LAST: _first_last,
    MatchRule.SCHOOL_PARTIAL: _school_partial,
}


def _rule_fires(
    rule: MatchRule,
    candidate: IdentityKey,
    target: IdentityKey,
    *,
    strict_school: bool,
) -> bool:
    if not target.has_identity:
        return False
    if strict_school and schools_conflict(candidate, target):
        return False
    return _RULE_CHECKS[rule](candidate, target)


def match_rule(
    candidate: IdentityKey,
    target: IdentityKey,
    *,
    strict_school: bool = False,
) -> Optional[MatchRule]:
    """Return the first rule under which ``candidate`` and ``target`` are the same player."""

    if not candidate.has_identity:
        return None
    for rule in RULE_ORDER:
        if _rule_fires(rule, candidate, target, strict_school=strict_school):
            return rule
    return None


def find_match_with_rule(
    candidate: IdentityKey,
    pool: Mapping[K, IdentityKey],
    *,
    strict_school: bool = False,
) -> Tuple[Optional[K], Optional[MatchRule]]:
    """Like :func:`find_match` but also report which rule fired."""

    if not candidate.has_identity:
        return None, None
    for rule in RULE_ORDER:
        # Ambiguity inside a rule resolves to the first entry in pool order.
        for key, target in pool.items():
            if _rule_fires(rule, candidate, target, strict_school=strict_school):
                logger.debug("Matched %r to %r via %s", candidate.name_key, target.name_key, rule.value)
                return key, rule
    return None, None


def find_match(
    candidate: IdentityKey,
    pool: Mapping[K, IdentityKey],
    *,
    strict_school: bool = False,
) -> Optional[K]:
    """Return the key of the pool entry ``candidate`` refers to, or ``None`` for a new entity."""

    key, _ = find_match_with_rule(candidate, pool, strict_school=strict_school)
    return key
