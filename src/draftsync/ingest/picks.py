"""Draft pick feed backed by the public MLB stats API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

import httpx
from pydantic import ValidationError

from draftsync.errors import SourceUnavailable
from draftsync.models import DraftPickRecord


logger = logging.getLogger(__name__)

DEFAULT_STATS_API_URL = "https://statsapi.mlb.com/api/v1"
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; draftsync/0.1)"


def _nested(data: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(data, Mapping):
            return None
        data = data.get(key)
    return data


def _pick_position(pick: Mapping[str, Any]) -> Optional[str]:
    position = _nested(pick, "person", "primaryPosition")
    if not isinstance(position, Mapping):
        return None
    return position.get("abbreviation") or position.get("name")


def parse_draft_payload(payload: Mapping[str, Any], *, observed_at: datetime | None = None) -> List[DraftPickRecord]:
    """Extract completed picks from a ``/draft/{year}`` response.

    Only picks flagged ``isDrafted`` are returned. Entries without a pick
    number or player name are logged and dropped.
    """

    observed_at = observed_at or datetime.now(timezone.utc)
    rounds = _nested(payload, "drafts", "rounds")
    if not isinstance(rounds, list):
        logger.debug("Draft payload has no drafts.rounds list")
        return []

    picks: List[DraftPickRecord] = []
    for round_data in rounds:
        round_picks = round_data.get("picks") if isinstance(round_data, Mapping) else None
        if not isinstance(round_picks, list):
            continue
        for pick in round_picks:
            if not isinstance(pick, Mapping) or not pick.get("isDrafted"):
                continue
            try:
                picks.append(
                    DraftPickRecord(
                        pick_number=pick.get("pickNumber"),
                        player_name=_nested(pick, "person", "fullName"),
                        team=_nested(pick, "team", "name"),
                        school=_nested(pick, "school", "name"),
                        position=_pick_position(pick),
                        pick_round=pick.get("pickRound") or round_data.get("round"),
                        timestamp=observed_at,
                    )
                )
            except ValidationError as exc:
                logger.debug("Dropping unusable pick %r: %s", pick.get("pickNumber"), exc)
    return picks


class StatsApiPickSource:
    """Async pick source; each call fetches the full pick list for one draft year."""

    def __init__(
        self,
        year: int,
        *,
        base_url: str = DEFAULT_STATS_API_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.year = year
        self.base_url = base_url.rstrip("/")
        self._client = client
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/draft/{self.year}"

    async def _get(self, client: httpx.AsyncClient) -> httpx.Response:
        return await client.get(self.url, headers={"User-Agent": DEFAULT_USER_AGENT}, timeout=self.timeout)

    async def __call__(self) -> List[DraftPickRecord]:
        try:
            if self._client is not None:
                resp = await self._get(self._client)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await self._get(client)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as exc:
            raise SourceUnavailable("stats-api", str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise SourceUnavailable("stats-api", f"invalid JSON from {self.url}: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise SourceUnavailable("stats-api", f"unexpected payload type {type(payload).__name__}")
        picks = parse_draft_payload(payload)
        logger.debug("Fetched %d completed picks from %s", len(picks), self.url)
        return picks
