"""Command-line interface for merging rosters and resolving draft status."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from draftsync.config import load_settings
from draftsync.config_loader import MappingProfile
from draftsync.ingest import load_roster_csv, load_roster_rows, parse_draft_payload, rows_to_prospects, write_roster_csv
from draftsync.persistence import RosterStore
from draftsync.reconcile import merge_prospects, reconcile_draft, replace_prospects


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile draft prospects with confirmed picks")
    sub = parser.add_subparsers(dest="command", required=True)

    merge = sub.add_parser("merge", help="Merge an incoming prospect CSV into an existing roster CSV")
    merge.add_argument("existing", type=Path, help="Authoritative roster CSV")
    merge.add_argument("incoming", type=Path, help="Scraped prospects CSV")
    merge.add_argument("--output", type=Path, default=Path("roster.csv"), help="Merged roster CSV path")
    merge.add_argument("--report", type=Path, default=None, help="Optional path to write merge summary JSON")
    merge.add_argument(
        "--replace",
        action="store_true",
        help="Rebuild the roster from the incoming file instead of merging",
    )
    merge.add_argument(
        "--roster-column",
        action="append",
        default=[],
        help="Mapping for roster CSV columns (e.g., name=Player)",
    )
    merge.add_argument(
        "--incoming-column",
        action="append",
        default=[],
        help="Mapping for incoming CSV columns (e.g., name=First Name|Last Name)",
    )
    merge.add_argument("--load-profile", type=Path, help="Load column mapping JSON", default=None)
    merge.add_argument("--save-profile", type=Path, help="Save column mapping JSON", default=None)

    resolve = sub.add_parser("resolve", help="Annotate a roster CSV with picks from a stats API draft payload")
    resolve.add_argument("roster", type=Path, help="Roster CSV")
    resolve.add_argument("--picks-json", type=Path, required=True, help="Saved /draft/{year} JSON response")
    resolve.add_argument("--output", type=Path, default=Path("draft_status.csv"), help="Annotated roster CSV path")

    importer = sub.add_parser("import-roster", help="Replace the stored roster with a CSV export")
    importer.add_argument("roster", type=Path, help="Roster CSV")
    importer.add_argument("--db", type=Path, default=None, help="SQLite path (defaults to DRAFTSYNC_DB_PATH)")

    serve = sub.add_parser("serve", help="Run the API server and poll loop")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--log-level", default="info")

    return parser.parse_args(argv)


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _preview(names: list[str], limit: int = 5) -> str:
    preview = ", ".join(repr(name) for name in names[:limit])
    more = len(names) - limit
    suffix = f", +{more} more" if more > 0 else ""
    return f"{preview}{suffix}"


def _run_merge(args: argparse.Namespace) -> None:
    profile = MappingProfile(_parse_mapping(args.roster_column), _parse_mapping(args.incoming_column))
    if args.load_profile:
        profile = MappingProfile.load(args.load_profile).overridden_by(profile)
    roster_mapping = profile.roster_mapping
    incoming_mapping = profile.incoming_mapping

    existing = [] if args.replace else load_roster_csv(args.existing, mapping=roster_mapping or None)
    incoming_rows = load_roster_rows(args.incoming, mapping=incoming_mapping or None)
    incoming, load_report = rows_to_prospects(incoming_rows)

    if args.save_profile:
        profile.save(args.save_profile)
        print(f"Saved mapping profile to {args.save_profile}")

    result = replace_prospects(incoming) if args.replace else merge_prospects(existing, incoming)
    write_roster_csv(args.output, result.records)
    skipped = result.skipped + len(load_report.malformed_rows)
    print(
        f"Merged {len(result.records)} players: {result.added} added, "
        f"{result.updated} updated, {result.unchanged} unchanged, {skipped} skipped"
    )
    print(f"Wrote roster to {args.output}")
    if load_report.malformed_rows:
        rows = ", ".join(str(row) for row in load_report.malformed_rows[:5])
        print(f"Incoming rows without a name: {rows}")
    if result.skipped_names:
        print(f"Skipped unusable records: {_preview(result.skipped_names)}")
    if args.report:
        payload = result.summary()
        payload["skipped"] = skipped
        payload["malformed_rows"] = load_report.malformed_rows
        args.report.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote merge report to {args.report}")


def _run_resolve(args: argparse.Namespace) -> None:
    roster = load_roster_csv(args.roster)
    payload = json.loads(args.picks_json.read_text(encoding="utf-8"))
    picks = parse_draft_payload(payload)
    resolution = reconcile_draft(roster, picks)
    write_roster_csv(args.output, resolution.roster, include_draft=True)
    print(f"Matched {resolution.drafted_count}/{len(resolution.roster)} players to {len(resolution.picks)} picks")
    if resolution.unmatched_picks:
        names = [pick.player_name for pick in resolution.unmatched_picks]
        print(f"Picks without a roster entry: {_preview(names)}")
    print(f"Wrote draft status to {args.output}")


def _run_import(args: argparse.Namespace) -> None:
    db_path = args.db or load_settings().db_path
    records = load_roster_csv(args.roster)
    result = replace_prospects(records)
    count = RosterStore(db_path).replace_roster(result.records)
    print(f"Stored {count} players in {db_path}")


def _run_serve(args: argparse.Namespace) -> None:
    import uvicorn

    from draftsync.api import create_app

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=args.log_level)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    handlers = {
        "merge": _run_merge,
        "resolve": _run_resolve,
        "import-roster": _run_import,
        "serve": _run_serve,
    }
    handlers[args.command](args)


if __name__ == "__main__":
    main()
