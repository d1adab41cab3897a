"""Inspect the gateway's protocol event logs from the command line."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from pts_gateway.config.settings import get_settings  # noqa: E402
from pts_gateway.events import LogStore  # noqa: E402


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="View PTS gateway event logs.")
    parser.add_argument("--log-dir", default=None, help="Log directory (defaults to PTS_GATEWAY_LOG_DIR).")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List log files")

    recent = commands.add_parser("recent", help="Show today's most recent entries for an event type")
    recent.add_argument("event_type")
    recent.add_argument("-n", "--limit", type=int, default=10)

    commands.add_parser("summary", help="Per event type file and entry counts")

    search = commands.add_parser("search", help="Find entries containing a term")
    search.add_argument("term")
    search.add_argument("--type", dest="event_type", default=None)

    prune = commands.add_parser("prune", help="Delete log files older than the retention window")
    prune.add_argument("--days", type=int, default=None)

    return parser.parse_args(argv)


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, default=str))


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    store = LogStore(Path(args.log_dir) if args.log_dir else settings.log_dir)

    try:
        if args.command == "list":
            files = store.list_files()
            print(f"Log directory: {store.log_dir}")
            for name in files:
                print(f"  {name}")
            print(f"Total files: {len(files)}")
        elif args.command == "recent":
            entries = store.recent(args.event_type, args.limit)
            if not entries:
                print(f"No {args.event_type} entries for today")
            for entry in entries:
                _print_json(entry)
        elif args.command == "summary":
            _print_json(store.summary())
        elif args.command == "search":
            results = store.search(args.term, args.event_type)
            for entry in results:
                _print_json(entry)
            print(f"{len(results)} matching entr{'y' if len(results) == 1 else 'ies'}")
        elif args.command == "prune":
            removed = store.prune(args.days if args.days is not None else settings.log_retention_days)
            for name in removed:
                print(f"removed {name}")
            print(f"{len(removed)} file(s) removed")
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
