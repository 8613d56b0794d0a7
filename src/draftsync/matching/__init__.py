"""Name normalization and identity matching primitives."""

from .identity import MatchRule, find_match, find_match_with_rule, match_rule, schools_conflict
from .normalize import SENTINEL, IdentityKey, canonical_field, is_missing, normalize

__all__ = [
    "SENTINEL",
    "IdentityKey",
    "MatchRule",
    "canonical_field",
    "find_match",
    "find_match_with_rule",
    "is_missing",
    "match_rule",
    "normalize",
    "schools_conflict",
]
