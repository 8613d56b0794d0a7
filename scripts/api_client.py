"""Lightweight REST client for the draftsync API."""

from __future__ import annotations

import argparse
import json

import httpx


def _print_players(payload: dict, drafted_only: bool) -> None:
    players = payload.get("players", [])
    if drafted_only:
        players = [player for player in players if player.get("isDrafted")]
    for player in players:
        info = player.get("draftInfo") or {}
        pick = f"#{info['pickNumber']} {info.get('team', '')}" if info else "-"
        print(f"{player['name']:<28} {player['position']:<8} {player['school']:<28} {pick}")
    print(f"{len(players)} players (last update {payload.get('lastUpdate')})")


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the draftsync REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--refresh", action="store_true", help="Run a reconciliation cycle before reading")
    parser.add_argument("--drafted", action="store_true", help="Only list drafted players")
    parser.add_argument("--picks", action="store_true", help="List draft picks instead of players")
    parser.add_argument("--cycles", action="store_true", help="List recent reconciliation cycles and exit")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.cycles:
            resp = client.get("/api/cycles")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.refresh:
            resp = client.post("/api/refresh")
            if resp.status_code == 502:
                raise SystemExit(f"refresh failed: {resp.json().get('detail')}")
            resp.raise_for_status()
            print("Cycle report:", json.dumps(resp.json(), indent=2))

        if args.picks:
            resp = client.get("/api/draft-picks")
            resp.raise_for_status()
            payload = resp.json()
            for pick in payload["picks"]:
                print(f"#{pick['pickNumber']:<4} {pick['playerName']:<28} {pick['team']}")
            print(f"{len(payload['picks'])} picks (last update {payload.get('lastUpdate')})")
            return

        resp = client.get("/api/players")
        resp.raise_for_status()
        _print_players(resp.json(), args.drafted)


if __name__ == "__main__":
    main()
