"""Canonical prospect and draft pick models shared across ingestion and reconciliation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from draftsync.errors import MalformedRecord
from draftsync.matching import SENTINEL, IdentityKey, canonical_field, is_missing, normalize


PickNumber = Union[int, str]

# Spreadsheet headers used by the roster sheet, mapped to field names.
_RAW_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "Name", "playerName", "player_name"),
    "position": ("position", "Position"),
    "school": ("school", "School"),
    "rank": ("rank", "Rank"),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_pick_number(value: Any) -> PickNumber:
    if isinstance(value, bool):
        raise ValueError("pick number must be an integer or ordinal string")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        if value <= 0:
            raise ValueError("pick number must be positive")
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit() and int(text) > 0:
            return int(text)
        if text:
            return text
    raise ValueError(f"invalid pick number {value!r}")


def _required_name(value: Any) -> str:
    if not isinstance(value, str) or is_missing(value):
        raise ValueError("name must be a non-empty string")
    return " ".join(value.split())


class _RecordModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class DraftInfo(_RecordModel):
    pick_number: PickNumber
    team: str = SENTINEL
    timestamp: datetime

    @field_validator("pick_number", mode="before")
    @classmethod
    def _pick_number(cls, value: Any) -> PickNumber:
        return _coerce_pick_number(value)

    @field_validator("team", mode="before")
    @classmethod
    def _team(cls, value: Any) -> str:
        return canonical_field(value)


class ProspectRecord(_RecordModel):
    """A player tracked on the roster, drafted or not."""

    name: str = Field(..., min_length=1)
    position: str = SENTINEL
    school: str = SENTINEL
    rank: str = SENTINEL
    is_drafted: bool = False
    draft_info: Optional[DraftInfo] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> str:
        return _required_name(value)

    @field_validator("position", "school", "rank", mode="before")
    @classmethod
    def _optional(cls, value: Any) -> str:
        return canonical_field(value)

    @model_validator(mode="after")
    def _draft_consistency(self) -> "ProspectRecord":
        if self.is_drafted != (self.draft_info is not None):
            raise ValueError("is_drafted must be true exactly when draft_info is present")
        return self

    @property
    def identity(self) -> IdentityKey:
        return normalize(self.name, self.school)

    @classmethod
    def from_raw(cls, raw: Union["ProspectRecord", Mapping[str, Any]]) -> "ProspectRecord":
        """Coerce a loose mapping (sheet row, scraped dict) into a record.

        Draft annotations on the raw input are ignored; they are derived data.
        Raises :class:`MalformedRecord` when no usable name is present.
        """

        if isinstance(raw, ProspectRecord):
            return raw
        if not isinstance(raw, Mapping):
            raise MalformedRecord(f"expected a mapping, got {type(raw).__name__}")
        data: dict[str, Any] = {}
        for field_name, keys in _RAW_FIELD_ALIASES.items():
            for key in keys:
                if key in raw and not is_missing(raw[key]):
                    data[field_name] = raw[key]
                    break
        try:
            return cls(**data)
        except ValidationError as exc:
            raise MalformedRecord(f"invalid prospect {raw.get('name', raw.get('Name'))!r}: {exc}") from exc


class DraftPickRecord(_RecordModel):
    """A confirmed selection observed on one scrape of the pick feed."""

    pick_number: PickNumber
    player_name: str = Field(..., min_length=1)
    position: str = SENTINEL
    school: str = SENTINEL
    team: str = SENTINEL
    pick_round: str = SENTINEL
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("pick_number", mode="before")
    @classmethod
    def _pick_number(cls, value: Any) -> PickNumber:
        return _coerce_pick_number(value)

    @field_validator("player_name", mode="before")
    @classmethod
    def _player_name(cls, value: Any) -> str:
        return _required_name(value)

    @field_validator("position", "school", "team", "pick_round", mode="before")
    @classmethod
    def _optional(cls, value: Any) -> str:
        return canonical_field(value)

    @property
    def identity(self) -> IdentityKey:
        return normalize(self.player_name, self.school)

    def to_draft_info(self) -> DraftInfo:
        return DraftInfo(pick_number=self.pick_number, team=self.team, timestamp=self.timestamp)
