"""One fetch -> merge -> resolve -> publish pass, and the loop that repeats it."""

from __future__ import annotations

import asyncio
import copy
import logging
from contextlib import suppress
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

from draftsync.errors import PublicationFailure, SourceUnavailable
from draftsync.models import DraftPickRecord, ProspectRecord
from draftsync.publish import PublicationCache, Snapshot
from draftsync.reconcile import merge_prospects, reconcile_draft


logger = logging.getLogger(__name__)

T = TypeVar("T")

RosterSource = Callable[[], Awaitable[List[ProspectRecord]]]
PickSource = Callable[[], Awaitable[List[DraftPickRecord]]]
RosterSink = Callable[[List[ProspectRecord]], Awaitable[None]]
Broadcast = Callable[[Snapshot], Awaitable[None]]
ReportSink = Callable[["CycleReport"], Awaitable[None]]

DEFAULT_FETCH_TIMEOUT = 10.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CycleReport:
    started_at: datetime
    finished_at: Optional[datetime] = None
    skipped: bool = False
    published: bool = False
    roster_total: int = 0
    added: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped_records: int = 0
    picks_total: int = 0
    drafted: int = 0
    unmatched_picks: int = 0
    degraded_sources: List[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "skipped": self.skipped,
            "published": self.published,
            "roster_total": self.roster_total,
            "added": self.added,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "skipped_records": self.skipped_records,
            "picks_total": self.picks_total,
            "drafted": self.drafted,
            "unmatched_picks": self.unmatched_picks,
            "degraded_sources": list(self.degraded_sources),
        }


async def _no_prospects() -> List[ProspectRecord]:
    return []


class ReconciliationCycle:
    """Runs reconciliation cycles against one publication cache.

    Only one cycle runs at a time; a trigger that arrives while a cycle is in
    flight is skipped. A fetch that fails or times out reuses that source's
    last successful result, which is empty before the first success. Nothing
    is published until a roster has been read at least once, and the roster
    sink is only written when this cycle's roster read succeeded.

    The roster sink and the broadcast both run before the cache is replaced,
    so a failure in either leaves the previous snapshot in place. Broadcast
    messages carry the full snapshot payload; a client that re-reads the REST
    endpoints right after a ``dataUpdate`` may still see the previous one.
    """

    def __init__(
        self,
        roster_source: RosterSource,
        pick_source: PickSource,
        cache: PublicationCache,
        *,
        prospect_source: RosterSource | None = None,
        roster_sink: RosterSink | None = None,
        broadcast: Broadcast | None = None,
        report_sink: ReportSink | None = None,
        roster_timeout: float = DEFAULT_FETCH_TIMEOUT,
        picks_timeout: float = DEFAULT_FETCH_TIMEOUT,
        prospects_timeout: float = DEFAULT_FETCH_TIMEOUT,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.roster_source = roster_source
        self.pick_source = pick_source
        self.prospect_source = prospect_source or _no_prospects
        self.cache = cache
        self.roster_sink = roster_sink
        self.broadcast = broadcast
        self.report_sink = report_sink
        self.roster_timeout = roster_timeout
        self.picks_timeout = picks_timeout
        self.prospects_timeout = prospects_timeout
        self.clock = clock
        self._in_flight = False
        self._roster_loaded = False
        self._last_roster: List[ProspectRecord] = []
        self._last_picks: List[DraftPickRecord] = []
        self._last_prospects: List[ProspectRecord] = []

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def with_broadcast(self, broadcast: Broadcast) -> "ReconciliationCycle":
        """Return a copy of this cycle that also sends each snapshot to ``broadcast``.

        The copy shares sources, sinks and cache with this cycle but keeps its
        own in-flight flag and fallback results.
        """

        clone = copy.copy(self)
        previous = self.broadcast
        if previous is None:
            clone.broadcast = broadcast
        else:

            async def both(snapshot: Snapshot) -> None:
                await previous(snapshot)
                await broadcast(snapshot)

            clone.broadcast = both
        return clone

    async def _fetch(
        self,
        name: str,
        source: Callable[[], Awaitable[List[T]]],
        timeout: float,
        fallback: Sequence[T],
        report: CycleReport,
    ) -> tuple[List[T], bool]:
        try:
            result = await asyncio.wait_for(source(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("%s source timed out after %.1fs; reusing last result (%d rows)", name, timeout, len(fallback))
        except SourceUnavailable as exc:
            logger.warning("%s source unavailable: %s; reusing last result (%d rows)", name, exc.message, len(fallback))
        else:
            return list(result), True
        report.degraded_sources.append(name)
        return list(fallback), False

    async def run_once(self) -> CycleReport:
        started_at = self.clock()
        report = CycleReport(started_at=started_at)
        if self._in_flight:
            logger.info("Skipping cycle trigger at %s; previous cycle still running", started_at.isoformat())
            report.skipped = True
            report.finished_at = self.clock()
            return report

        self._in_flight = True
        try:
            await self._run(report)
        finally:
            self._in_flight = False
        return report

    async def _run(self, report: CycleReport) -> None:
        (roster, roster_ok), (picks, picks_ok), (prospects, prospects_ok) = await asyncio.gather(
            self._fetch("roster", self.roster_source, self.roster_timeout, self._last_roster, report),
            self._fetch("picks", self.pick_source, self.picks_timeout, self._last_picks, report),
            self._fetch("prospects", self.prospect_source, self.prospects_timeout, self._last_prospects, report),
        )
        if roster_ok:
            self._last_roster = roster
            self._roster_loaded = True
        if picks_ok:
            self._last_picks = picks
        if prospects_ok:
            self._last_prospects = prospects

        if not self._roster_loaded:
            logger.warning("No roster has been loaded yet; not publishing cycle started %s", report.started_at.isoformat())
            report.finished_at = self.clock()
            return

        merged = merge_prospects(roster, prospects)
        resolution = reconcile_draft(merged.records, picks)
        report.roster_total = len(merged.records)
        report.added = merged.added
        report.updated = merged.updated
        report.unchanged = merged.unchanged
        report.skipped_records = merged.skipped
        report.picks_total = len(resolution.picks)
        report.drafted = resolution.drafted_count
        report.unmatched_picks = len(resolution.unmatched_picks)

        current = self.cache.current()
        if current.cycle_started_at is not None and report.started_at < current.cycle_started_at:
            logger.warning("Cycle started %s is older than the published snapshot; not publishing", report.started_at.isoformat())
            report.finished_at = self.clock()
            return

        snapshot = Snapshot.build(
            resolution.roster,
            resolution.picks,
            last_update=self.clock(),
            cycle_started_at=report.started_at,
        )
        try:
            # A fallback roster may be older than the store; only a fresh read is written back.
            if self.roster_sink is not None and roster_ok:
                await self.roster_sink(list(merged.records))
            if self.broadcast is not None:
                await self.broadcast(snapshot)
        except Exception as exc:
            report.finished_at = self.clock()
            raise PublicationFailure(f"cycle started {report.started_at.isoformat()} was not published: {exc}") from exc

        report.published = self.cache.publish(snapshot)
        report.finished_at = self.clock()
        self._last_roster = list(merged.records)
        logger.info(
            "Cycle complete: %d players (%d added, %d updated), %d picks, %d drafted",
            report.roster_total,
            report.added,
            report.updated,
            report.picks_total,
            report.drafted,
        )
        if self.report_sink is not None:
            try:
                await self.report_sink(report)
            except Exception as exc:  # pragma: no cover - audit logging only
                logger.warning("Unable to record cycle report: %s", exc)


class Poller:
    """Re-runs a cycle at a fixed interval on the running event loop."""

    def __init__(self, cycle: ReconciliationCycle, interval: float):
        if interval <= 0:
            raise ValueError("poll interval must be positive")
        self.cycle = cycle
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def _loop(self) -> None:
        while True:
            try:
                await self.cycle.run_once()
            except PublicationFailure as exc:
                logger.error("Publication failed; keeping previous snapshot: %s", exc)
            except Exception:  # pragma: no cover - keep polling after unexpected errors
                logger.exception("Unexpected error during reconciliation cycle")
            await asyncio.sleep(self.interval)
