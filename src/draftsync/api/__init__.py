"""REST and WebSocket API publishing the reconciled draft board."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional

from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect

from draftsync.api.schemas import (
    CycleReportResponse,
    DraftPicksResponse,
    HealthResponse,
    MatchingDiagnosticsResponse,
    PlayersResponse,
)
from draftsync.config import Settings, load_settings
from draftsync.cycle import Poller, ReconciliationCycle
from draftsync.errors import PublicationFailure
from draftsync.ingest import CsvRosterSource, StatsApiPickSource
from draftsync.persistence import RosterStore
from draftsync.publish import PublicationCache, Snapshot
from draftsync.reconcile import diagnose_matches


logger = logging.getLogger(__name__)

UPDATE_EVENT = "dataUpdate"


class ConnectionManager:
    """Tracks connected browser clients and pushes snapshots to them."""

    def __init__(self) -> None:
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.debug("Client connected (%d active)", len(self.active_connections))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        logger.debug("Client disconnected (%d active)", len(self.active_connections))

    async def send_snapshot(self, websocket: WebSocket, snapshot: Snapshot) -> None:
        await websocket.send_json({"event": UPDATE_EVENT, **snapshot.to_payload()})

    async def broadcast_snapshot(self, snapshot: Snapshot) -> None:
        message = {"event": UPDATE_EVENT, **snapshot.to_payload()}
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                logger.debug("Dropping client after failed send: %s", exc)
                self.disconnect(connection)


def _build_cycle(settings: Settings, cache: PublicationCache, store: RosterStore) -> ReconciliationCycle:
    prospect_source = CsvRosterSource(settings.prospects_csv) if settings.prospects_csv else None
    return ReconciliationCycle(
        store.roster_source,
        StatsApiPickSource(settings.draft_year, base_url=settings.stats_api_url, timeout=settings.picks_timeout),
        cache,
        prospect_source=prospect_source,
        roster_sink=store.roster_sink,
        report_sink=store.record_cycle,
        roster_timeout=settings.roster_timeout,
        picks_timeout=settings.picks_timeout,
        prospects_timeout=settings.prospects_timeout,
    )


def create_app(
    settings: Settings | None = None,
    *,
    cycle: ReconciliationCycle | None = None,
    store: RosterStore | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    manager = ConnectionManager()
    if cycle is None:
        store = store or RosterStore(settings.db_path)
        cycle = _build_cycle(settings, PublicationCache(), store)
    # The app runs its own copy so the caller's cycle keeps its broadcast unchanged.
    cycle = cycle.with_broadcast(manager.broadcast_snapshot)
    cache = cycle.cache
    poller: Optional[Poller] = Poller(cycle, settings.poll_interval) if settings.poll_interval > 0 else None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if poller is not None:
            logger.info("Starting reconciliation poller every %.0fs", settings.poll_interval)
            poller.start()
        try:
            yield
        finally:
            if poller is not None:
                await poller.stop()

    app = FastAPI(title="draftsync", lifespan=lifespan)
    app.state.cache = cache
    app.state.cycle = cycle
    app.state.store = store
    app.state.connections = manager
    app.state.poller = poller

    @app.get("/health", response_model=HealthResponse)
    @app.get("/api/health", response_model=HealthResponse)
    async def health() -> dict[str, Any]:
        snapshot = cache.current()
        return {
            "status": "ok",
            "players_count": len(snapshot.roster),
            "picks_count": len(snapshot.picks),
            "last_update": snapshot.last_update,
            "cycle_in_flight": cycle.in_flight,
        }

    @app.get("/api/players", response_model=PlayersResponse)
    async def players(drafted: bool | None = Query(None)) -> dict[str, Any]:
        payload = cache.current().to_payload()
        if drafted is not None:
            payload["players"] = [p for p in payload["players"] if p["isDrafted"] is drafted]
        return payload

    @app.get("/api/draft-picks", response_model=DraftPicksResponse)
    async def draft_picks() -> dict[str, Any]:
        payload = cache.current().to_payload()
        return {"picks": payload["draftPicks"], "lastUpdate": payload["lastUpdate"]}

    @app.get("/api/debug-matching", response_model=MatchingDiagnosticsResponse)
    async def debug_matching() -> dict[str, Any]:
        snapshot = cache.current()
        diagnostics, unmatched = diagnose_matches(snapshot.roster, snapshot.picks)
        return {
            "drafted": [
                {
                    "player_name": entry.player_name,
                    "school": entry.school,
                    "pick_number": entry.pick_number,
                    "pick_player_name": entry.pick_player_name,
                    "team": entry.team,
                    "rule": entry.rule.value if entry.rule is not None else None,
                }
                for entry in diagnostics
            ],
            "unmatched_picks": [pick.player_name for pick in unmatched],
            "players_count": len(snapshot.roster),
            "picks_count": len(snapshot.picks),
            "last_update": snapshot.last_update,
        }

    @app.post("/api/refresh", response_model=CycleReportResponse)
    async def refresh() -> dict[str, Any]:
        try:
            report = await cycle.run_once()
        except PublicationFailure as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return report.to_dict()

    @app.get("/api/cycles")
    async def cycles(limit: int = Query(20, ge=1, le=200)) -> list[dict[str, Any]]:
        if store is None:
            return []
        records = await asyncio.to_thread(store.list_cycles, limit)
        return [
            {
                "cycle_id": record.cycle_id,
                "created_at": record.created_at.isoformat(),
                "published": record.published,
                "report": record.report,
            }
            for record in records
        ]

    @app.websocket("/ws")
    async def updates(websocket: WebSocket) -> None:
        await manager.connect(websocket)
        try:
            await manager.send_snapshot(websocket, cache.current())
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            manager.disconnect(websocket)

    return app
