"""Persist and load CLI column mapping profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping

from draftsync.ingest.roster import DEFAULT_ROSTER_MAPPING


MAPPING_FIELDS = frozenset(DEFAULT_ROSTER_MAPPING)


def _check_mapping(label: str, mapping: Mapping[str, str]) -> Dict[str, str]:
    unknown = sorted(set(mapping) - MAPPING_FIELDS)
    if unknown:
        allowed = ", ".join(sorted(MAPPING_FIELDS))
        raise ValueError(f"Unknown {label} mapping field(s) {', '.join(unknown)}; expected one of {allowed}")
    for key, column in mapping.items():
        if not isinstance(column, str) or not column.strip():
            raise ValueError(f"{label} mapping for '{key}' must name a column")
    return {key: column.strip() for key, column in mapping.items()}


@dataclass
class MappingProfile:
    """Column mappings for the roster CSV and the incoming prospects CSV.

    Keys are record fields (``name``, ``position``, ``school``, ``rank``);
    values are CSV headers, with ``A|B`` joining several columns. Fields left
    out fall back to the roster sheet's default headers.
    """

    roster_mapping: Dict[str, str] = field(default_factory=dict)
    incoming_mapping: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.roster_mapping = _check_mapping("roster", self.roster_mapping)
        self.incoming_mapping = _check_mapping("incoming", self.incoming_mapping)

    def overridden_by(self, other: "MappingProfile") -> "MappingProfile":
        return MappingProfile(
            roster_mapping={**self.roster_mapping, **other.roster_mapping},
            incoming_mapping={**self.incoming_mapping, **other.incoming_mapping},
        )

    @classmethod
    def load(cls, path: Path) -> "MappingProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Mapping profile {path} must be a JSON object")
        return cls(
            roster_mapping=data.get("roster_mapping", {}),
            incoming_mapping=data.get("incoming_mapping", {}),
        )

    def save(self, path: Path) -> None:
        payload = {
            "roster_mapping": self.roster_mapping,
            "incoming_mapping": self.incoming_mapping,
        }
        path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
