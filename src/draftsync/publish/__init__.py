"""Last-known-good snapshot of the reconciled roster and picks."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple

from draftsync.models import DraftPickRecord, ProspectRecord


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    roster: Tuple[ProspectRecord, ...]
    picks: Tuple[DraftPickRecord, ...]
    last_update: Optional[datetime]
    cycle_started_at: Optional[datetime]

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls(roster=(), picks=(), last_update=None, cycle_started_at=None)

    @classmethod
    def build(
        cls,
        roster: Iterable[ProspectRecord],
        picks: Iterable[DraftPickRecord],
        *,
        last_update: datetime,
        cycle_started_at: datetime,
    ) -> "Snapshot":
        return cls(
            roster=tuple(roster),
            picks=tuple(picks),
            last_update=last_update,
            cycle_started_at=cycle_started_at,
        )

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready ``{players, draftPicks, lastUpdate}`` form sent to clients."""

        return {
            "players": [record.model_dump(mode="json", by_alias=True) for record in self.roster],
            "draftPicks": [pick.model_dump(mode="json", by_alias=True) for pick in self.picks],
            "lastUpdate": self.last_update.isoformat() if self.last_update else None,
        }


class PublicationCache:
    """Holds one snapshot; readers get whatever was published last.

    Publishing swaps a single reference, so a reader never sees a roster from
    one cycle paired with picks from another. Snapshots from a cycle that
    started before the current one are rejected.
    """

    def __init__(self, initial: Snapshot | None = None):
        self._snapshot = initial or Snapshot.empty()
        self._lock = threading.Lock()

    def current(self) -> Snapshot:
        return self._snapshot

    def publish(self, snapshot: Snapshot) -> bool:
        with self._lock:
            current = self._snapshot
            if (
                current.cycle_started_at is not None
                and snapshot.cycle_started_at is not None
                and snapshot.cycle_started_at < current.cycle_started_at
            ):
                logger.warning(
                    "Discarding stale snapshot from cycle started %s (current cycle started %s)",
                    snapshot.cycle_started_at.isoformat(),
                    current.cycle_started_at.isoformat(),
                )
                return False
            self._snapshot = snapshot
            return True
